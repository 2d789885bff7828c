from typing import Annotated

from fastapi import APIRouter, Depends

from ..embeddings.lifecycle import BillSearchService
from .dependencies import get_search_service

router = APIRouter(tags=["health"])

@router.get("/health")
def health(service: Annotated[BillSearchService, Depends(get_search_service)]):
    return {"status": "ok", "index": service.state}
