"""
In-Memory Vector Index

This module implements an exact, brute-force cosine-similarity index over
embedded bill documents.

Key Properties
--------------
- Exhaustive O(N·L) search: every stored vector is scored for every query
- Deterministic ranking: stable sort, ties keep insertion order
- Atomic rebuilds: contents are replaced in a single swap, never merged
- Strong validation: empty batches and mixed dimensionality fail fast
- Concurrency-safe (thread locking)
"""

from __future__ import annotations

import logging
import time
from threading import RLock
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from .models import BillDocument, BillEmbedding, RankedResult

logger = logging.getLogger("legis.index")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class IndexBuildError(ValueError):
    """Raised when a build batch violates the index preconditions."""


class DimensionMismatchError(ValueError):
    """Raised when vectors of different lengths meet."""


# ---------------------------------------------------------------------
# Similarity
# ---------------------------------------------------------------------

def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of the angle between ``a`` and ``b``.

    Returns 0.0 when either vector has zero norm.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(
            f"Vectors must have the same length ({len(a)} != {len(b)})."
        )

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return float(np.dot(va, vb) / (norm_a * norm_b))


class IndexStats(NamedTuple):
    count: int
    is_built: bool
    dimension: Optional[int]


# ---------------------------------------------------------------------
# Vector Index
# ---------------------------------------------------------------------

class VectorIndex:
    """
    Exact cosine-similarity index held entirely in memory.

    Stored rows are kept L2-normalized alongside a mask of zero-norm rows,
    so a query costs one matrix-vector product.
    """

    def __init__(self, dimension: Optional[int] = None) -> None:
        """
        Parameters
        ----------
        dimension : Optional[int]
            Expected vector length. When omitted the first successful build
            fixes it from the data.
        """
        self._declared_dimension = dimension
        self._dimension: Optional[int] = dimension

        self._documents: List[BillDocument] = []
        self._matrix: Optional[np.ndarray] = None
        self._is_built = False
        self._built_at: Optional[float] = None

        self._lock = RLock()

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    def _validate_embeddings(
        self,
        embeddings: Sequence[BillEmbedding],
        dimension: Optional[int],
    ) -> int:
        if not embeddings:
            raise IndexBuildError("Cannot build index from an empty batch.")

        dim = dimension or self._declared_dimension or embeddings[0].dimension

        for i, emb in enumerate(embeddings):
            if emb.dimension != dim:
                raise IndexBuildError(
                    f"Inconsistent embedding dimensionality at index {i}: "
                    f"expected {dim}, got {emb.dimension}."
                )

        return dim

    @staticmethod
    def _normalize_rows(matrix: np.ndarray) -> np.ndarray:
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        safe = np.where(norms == 0.0, 1.0, norms)
        return matrix / safe

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_built(self) -> bool:
        return self._is_built

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    @property
    def built_at(self) -> Optional[float]:
        return self._built_at

    def __len__(self) -> int:
        return len(self._documents)

    def build(
        self,
        embeddings: Sequence[BillEmbedding],
        dimension: Optional[int] = None,
    ) -> None:
        """
        Replace the index contents with ``embeddings``.

        The previous contents survive untouched if validation fails.

        Raises
        ------
        IndexBuildError
            If the batch is empty or dimensionalities are inconsistent.
        """
        dim = self._validate_embeddings(embeddings, dimension)

        matrix = np.asarray(
            [emb.embedding for emb in embeddings],
            dtype=np.float64,
        )
        matrix = self._normalize_rows(matrix)
        documents = [emb.document for emb in embeddings]

        with self._lock:
            self._matrix = matrix
            self._documents = documents
            self._dimension = dim
            self._is_built = True
            self._built_at = time.time()

        logger.info("Vector index built with %d bills (dim=%d)", len(documents), dim)

    def search(
        self,
        query_vector: Sequence[float],
        top_k: int = 10,
        min_similarity: float = 0.0,
    ) -> List[RankedResult]:
        """
        Rank stored documents by cosine similarity to ``query_vector``.

        Returns at most ``top_k`` results with similarity ``>= min_similarity``,
        highest first. An unbuilt index returns an empty list.

        Raises
        ------
        DimensionMismatchError
            If the query length differs from the index dimension.
        """
        with self._lock:
            if not self._is_built or self._matrix is None or top_k <= 0:
                return []

            if len(query_vector) != self._dimension:
                raise DimensionMismatchError(
                    f"Query dimension {len(query_vector)} does not match "
                    f"index dimension {self._dimension}."
                )

            matrix = self._matrix
            documents = self._documents

        q = np.asarray(query_vector, dtype=np.float64)
        q_norm = float(np.linalg.norm(q))
        if q_norm == 0.0:
            scores = np.zeros(len(documents), dtype=np.float64)
        else:
            scores = matrix @ (q / q_norm)

        order = np.argsort(-scores, kind="stable")

        results: List[RankedResult] = []
        for idx in order:
            score = float(scores[idx])
            if score < min_similarity:
                # Sorted descending: nothing further can pass.
                break
            results.append(RankedResult.from_document(documents[idx], score))
            if len(results) >= top_k:
                break

        return results

    def clear(self) -> None:
        """
        Drop every stored vector and return to the unbuilt state.
        """
        with self._lock:
            self._matrix = None
            self._documents = []
            self._dimension = self._declared_dimension
            self._is_built = False
            self._built_at = None

        logger.info("Vector index cleared")

    def stats(self) -> IndexStats:
        """
        Return index statistics for diagnostics.
        """
        with self._lock:
            return IndexStats(
                count=len(self._documents),
                is_built=self._is_built,
                dimension=self._dimension,
            )
