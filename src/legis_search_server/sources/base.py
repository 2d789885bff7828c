"""
Document source contract.

The search service only needs an async batch fetch of bill documents; where
they come from is up to the implementation.
"""

from __future__ import annotations

from typing import List, Protocol, Sequence, runtime_checkable

from ..embeddings.models import BillDocument


@runtime_checkable
class DocumentSource(Protocol):
    async def fetch_documents(self, limit: int) -> List[BillDocument]:
        ...


class StaticDocumentSource:
    """
    Serves a fixed list of documents. Used for tests and offline runs.
    """

    def __init__(self, documents: Sequence[BillDocument] = ()) -> None:
        self.documents: List[BillDocument] = list(documents)

    async def fetch_documents(self, limit: int) -> List[BillDocument]:
        return self.documents[:limit]
