"""
Embeddings Package

Text-to-vector conversion, the in-memory cosine index, and the service that
keeps the index fresh.
"""

from .models import (
    BillDocument,
    BillMetadata,
    BillEmbedding,
    RankedResult,
    SearchResults,
    ServiceStats,
)
from .embedder import Embedder, EmbeddingError
from .index import VectorIndex, IndexBuildError, DimensionMismatchError, cosine_similarity
from .lifecycle import BillSearchService

__all__ = [
    "BillDocument",
    "BillMetadata",
    "BillEmbedding",
    "RankedResult",
    "SearchResults",
    "ServiceStats",
    "Embedder",
    "EmbeddingError",
    "VectorIndex",
    "IndexBuildError",
    "DimensionMismatchError",
    "cosine_similarity",
    "BillSearchService",
]
