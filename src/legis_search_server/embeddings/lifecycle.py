"""
Bill Search Service

Owns the vector index for the lifetime of the application and answers
natural-language bill searches against it.

Lifecycle
---------
    uninitialized --(build)--> fresh --(ttl expiry | refresh())--> stale
    stale --(build)--> fresh

``uninitialized`` and ``stale`` behave the same when serving: the next search
rebuilds before answering. They differ only in what ``get_stats`` reports.

Failure Semantics
-----------------
``search`` never raises. Source outages leave the previous index in place,
embedding outages fall back to hashed vectors inside the Embedder, and any
other error is logged and answered with an empty result set.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Callable, List, Optional

from ..config import settings
from .embedder import Embedder
from .index import VectorIndex
from .models import BillDocument, RankedResult, SearchResults, ServiceStats

if TYPE_CHECKING:
    from ..sources.base import DocumentSource

logger = logging.getLogger("legis.search")


class BillSearchService:
    """
    Index lifecycle manager and the single entry point for bill search.

    Instances are created by the application factory and injected into
    routes; tests construct their own with stub sources.
    """

    def __init__(
        self,
        source: DocumentSource,
        embedder: Embedder,
        index: Optional[VectorIndex] = None,
        ttl_seconds: Optional[float] = None,
        min_similarity: Optional[float] = None,
        fetch_limit: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.source = source
        self.embedder = embedder
        self.index = index if index is not None else VectorIndex()

        self.ttl_seconds = (
            ttl_seconds if ttl_seconds is not None else settings.index_ttl_seconds
        )
        self.min_similarity = (
            min_similarity
            if min_similarity is not None
            else settings.default_min_similarity
        )
        self.fetch_limit = (
            fetch_limit if fetch_limit is not None else settings.document_fetch_limit
        )
        self._clock = clock

        self._initialized = False
        self._ever_built = False
        self._last_update: Optional[float] = None
        self._generation = 0
        self._documents: List[BillDocument] = []
        self._rebuild_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Freshness
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def last_update(self) -> Optional[float]:
        return self._last_update

    def is_fresh(self) -> bool:
        if not self._initialized or self._last_update is None:
            return False
        return (self._clock() - self._last_update) < self.ttl_seconds

    @property
    def state(self) -> str:
        if self.is_fresh():
            return "fresh"
        if self._ever_built:
            return "stale"
        return "uninitialized"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Build the index eagerly. Failures are logged; the first search
        will try again.
        """
        try:
            await self.ensure_fresh()
        except Exception:
            logger.exception("Initial vector index build failed")

    async def dispose(self) -> None:
        """
        Release the index and close the document source if it holds resources.
        """
        self.refresh()
        self._ever_built = False
        self._documents = []

        aclose = getattr(self.source, "aclose", None)
        if aclose is not None:
            await aclose()

    async def ensure_fresh(self) -> None:
        """
        Rebuild the index unless it is initialized and younger than the TTL.

        Concurrent callers that all observe a stale index share a single
        rebuild: the freshness check is repeated once the lock is held.
        """
        if self.is_fresh():
            return

        async with self._rebuild_lock:
            if self.is_fresh():
                return
            await self._rebuild()

    async def _rebuild(self) -> None:
        logger.info("Rebuilding bill vector index (limit=%d)", self.fetch_limit)
        generation = self._generation

        documents = await self.source.fetch_documents(self.fetch_limit)
        if not documents:
            logger.warning("No bills found to build vector index; keeping previous state")
            return

        embeddings = await self.embedder.embed_batch(documents)
        if not embeddings:
            logger.warning("No embeddings generated; keeping previous state")
            return

        self.index.build(embeddings)

        self._documents = list(documents)
        self._ever_built = True

        if generation != self._generation:
            # refresh() ran while this build was in flight; stay stale.
            logger.info("Vector index invalidated during rebuild; next search rebuilds again")
            return

        self._initialized = True
        self._last_update = self._clock()

        logger.info("Vector index initialized with %d bills", len(embeddings))

    def refresh(self) -> None:
        """
        Invalidate the index so the next search performs a full rebuild.
        """
        self._generation += 1
        self._initialized = False
        self._last_update = None
        self.index.clear()
        logger.info("Vector index invalidated")

    async def rebuild(self) -> ServiceStats:
        """
        Invalidate and rebuild immediately. Never raises.
        """
        self.refresh()
        try:
            await self.ensure_fresh()
        except Exception:
            logger.exception("Forced vector index rebuild failed")
        return self.get_stats()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        top_k: Optional[int] = None,
        min_similarity: Optional[float] = None,
    ) -> SearchResults:
        """
        Answer a natural-language query with ranked bills.

        Parameters
        ----------
        query : str
            Free-text query.

        top_k : Optional[int]
            Maximum number of results. Defaults to settings.default_top_k.

        min_similarity : Optional[float]
            Similarity cutoff. Defaults to the service threshold.

        Returns
        -------
        SearchResults
            Ranked results and elapsed time. Empty on any internal failure.
        """
        start = time.perf_counter()
        k = top_k if top_k is not None else settings.default_top_k
        threshold = min_similarity if min_similarity is not None else self.min_similarity

        try:
            await self.ensure_fresh()

            query_vector = await self.embedder.embed(query)
            results = self.index.search(query_vector, k, threshold)
        except Exception:
            logger.exception("Natural language search failed for %r", query)
            return SearchResults.empty(_elapsed_ms(start))

        elapsed = _elapsed_ms(start)
        logger.info(
            "Search for %r completed in %.1fms with %d results",
            query,
            elapsed,
            len(results),
        )

        return SearchResults(
            results=results,
            total_results=len(results),
            search_time_ms=elapsed,
        )

    def keyword_search(self, query: str, top_k: Optional[int] = None) -> List[RankedResult]:
        """
        Case-insensitive substring match over the last fetched bills.

        Matches against title, sponsor and summary. Hits carry similarity 0.
        """
        needle = (query or "").strip().lower()
        if not needle:
            return []

        k = top_k if top_k is not None else settings.default_top_k
        hits: List[RankedResult] = []

        for doc in self._documents:
            haystacks = (doc.title, doc.metadata.sponsor or "", doc.summary)
            if any(needle in h.lower() for h in haystacks):
                hits.append(RankedResult.from_document(doc, 0.0))
                if len(hits) >= k:
                    break

        return hits

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_stats(self) -> ServiceStats:
        stats = self.index.stats()
        return ServiceStats(
            count=stats.count,
            is_built=stats.is_built,
            dimension=stats.dimension,
            last_update=self._last_update,
            is_initialized=self._initialized,
            state=self.state,
            ttl_seconds=self.ttl_seconds,
        )


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000.0, 3)
