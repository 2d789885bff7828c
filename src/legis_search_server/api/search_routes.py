"""
Search Routes

This module defines the natural-language bill search endpoint and the
administrative endpoints that inspect and invalidate the vector index.

Search never fails from the caller's point of view: the service degrades to
an empty result set, and the route may then fall back to a keyword match
over the most recently fetched bills.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Annotated

from .models import SearchRequest, SearchResponse, OperationResult
from .dependencies import get_search_service
from ..embeddings.lifecycle import BillSearchService
from ..embeddings.models import ServiceStats

router = APIRouter(prefix="/search", tags=["search"])


@router.post(
    "/",
    response_model=SearchResponse,
    summary="Natural-language bill search",
    status_code=status.HTTP_200_OK,
)
async def search(
    req: SearchRequest,
    service: Annotated[BillSearchService, Depends(get_search_service)],
) -> SearchResponse:
    """
    Rank bills by semantic similarity to a free-text query.

    Parameters
    ----------
    req : SearchRequest
        Contains:
        - query: Search query string
        - top_k: Maximum number of results
        - min_similarity: Optional similarity cutoff override
        - keyword_fallback: Whether to fall back to substring matching

    Returns
    -------
    SearchResponse
        Ranked results, timing, and the strategy that produced them.
    """
    outcome = await service.search(
        req.query,
        top_k=req.top_k,
        min_similarity=req.min_similarity,
    )

    if outcome.results:
        return SearchResponse(
            results=outcome.results,
            total_results=outcome.total_results,
            search_time_ms=outcome.search_time_ms,
            source="vector",
        )

    if req.keyword_fallback:
        matches = service.keyword_search(req.query, top_k=req.top_k)
        if matches:
            return SearchResponse(
                results=matches,
                total_results=len(matches),
                search_time_ms=outcome.search_time_ms,
                source="keyword",
            )

    return SearchResponse(search_time_ms=outcome.search_time_ms)


@router.get(
    "/stats",
    response_model=ServiceStats,
    summary="Get vector index statistics",
)
async def get_search_stats(
    service: Annotated[BillSearchService, Depends(get_search_service)],
) -> ServiceStats:
    return service.get_stats()


@router.post(
    "/refresh",
    response_model=OperationResult,
    summary="Invalidate (and optionally rebuild) the vector index",
)
async def refresh_index(
    service: Annotated[BillSearchService, Depends(get_search_service)],
    rebuild: Annotated[bool, Query()] = False,
) -> OperationResult:
    """
    Invalidate the index so the next search rebuilds it.

    With ``rebuild=true`` the rebuild happens before the response is sent.
    """
    if not rebuild:
        service.refresh()
        return OperationResult(status="refreshed", count=0)

    stats = await service.rebuild()
    return OperationResult(
        status="rebuilt",
        count=stats.count,
        details={"state": stats.state},
    )
