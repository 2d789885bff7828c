from fastapi import Request

from ..embeddings.lifecycle import BillSearchService


def get_search_service(request: Request) -> BillSearchService:
    """
    Return the search service created by the application lifespan.
    """
    return request.app.state.search_service
