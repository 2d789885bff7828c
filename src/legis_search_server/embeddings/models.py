"""
Embedding Data Models

This module defines the canonical records that flow through the semantic
bill-search pipeline:

- BillDocument   : one legislative record as delivered by a document source
- BillEmbedding  : a document paired with the vector computed for it
- RankedResult   : one search hit returned to callers

Each BillEmbedding corresponds to ONE embedding vector and ONE bill.
"""

from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict


class BillMetadata(BaseModel):
    """
    Opaque caller payload. The index stores and returns it, never reads it.
    """

    sponsor: Optional[str] = None
    date: Optional[str] = None
    status: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)


class BillDocument(BaseModel):
    """
    A single legislative record eligible for indexing.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Stable identifier, e.g. '118-HR-5615'.",
    )

    title: str = Field(
        default="Untitled Bill",
        description="Official or short title of the bill.",
    )

    summary: str = Field(
        default="",
        description="Latest CRS summary text, if any.",
    )

    metadata: BillMetadata = Field(default_factory=BillMetadata)

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )

    @property
    def full_text(self) -> str:
        """
        Embedding input: title, summary, sponsor and tags joined by spaces.
        """
        return " ".join(
            [
                self.title or "",
                self.summary or "",
                self.metadata.sponsor or "",
                " ".join(self.metadata.tags),
            ]
        )


class BillEmbedding(BaseModel):
    """
    A document together with the vector the embedder produced for it.
    """

    document: BillDocument
    full_text: str
    embedding: List[float] = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def dimension(self) -> int:
        return len(self.embedding)


class RankedResult(BaseModel):
    """
    A single search hit, ordered by descending similarity.
    """

    id: str
    title: str
    summary: str = ""
    similarity: float
    metadata: BillMetadata = Field(default_factory=BillMetadata)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_document(cls, doc: BillDocument, similarity: float) -> "RankedResult":
        return cls(
            id=doc.id,
            title=doc.title,
            summary=doc.summary,
            similarity=float(similarity),
            metadata=doc.metadata,
        )


class SearchResults(BaseModel):
    """
    Outcome of one natural-language search. Always well-formed, even when
    the search failed internally.
    """

    results: List[RankedResult] = Field(default_factory=list)
    total_results: int = Field(default=0, ge=0)
    search_time_ms: float = Field(default=0.0, ge=0.0)

    @classmethod
    def empty(cls, search_time_ms: float = 0.0) -> "SearchResults":
        return cls(results=[], total_results=0, search_time_ms=search_time_ms)


class ServiceStats(BaseModel):
    """
    Index statistics plus lifecycle freshness state.
    """

    count: int = Field(..., ge=0)
    is_built: bool
    dimension: Optional[int] = None
    last_update: Optional[float] = None
    is_initialized: bool
    state: Literal["uninitialized", "fresh", "stale"]
    ttl_seconds: float
