"""
API Models for the Bill Search Server

This module defines the Pydantic models used for request/response validation
on the search and administrative endpoints. Result records themselves
(RankedResult, ServiceStats) are defined alongside the index in
``embeddings.models`` and reused here unchanged.
"""

from __future__ import annotations

from typing import List, Optional, Dict, Any, Literal
from pydantic import BaseModel, Field, ConfigDict

from ..embeddings.models import RankedResult


class OperationResult(BaseModel):
    """
    Standardized administrative operation result.
    """
    status: Literal["refreshed", "rebuilt"]
    count: Optional[int] = Field(default=None, ge=0)
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Search Models
# ---------------------------------------------------------------------

class SearchRequest(BaseModel):
    """
    Natural-language bill search request.
    """
    query: str = Field(..., min_length=1, max_length=500)
    top_k: int = Field(default=10, ge=1, le=100)
    min_similarity: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    keyword_fallback: bool = True

    model_config = ConfigDict(extra="forbid")


class SearchResponse(BaseModel):
    """
    Ranked bills for a query.

    ``source`` records which strategy produced the results: the vector index,
    the keyword fallback over the last fetched bills, or neither.
    """
    results: List[RankedResult] = Field(default_factory=list)
    total_results: int = Field(default=0, ge=0)
    search_time_ms: float = Field(default=0.0, ge=0.0)
    source: Literal["vector", "keyword", "none"] = "none"

    model_config = ConfigDict(extra="forbid")
