"""
Shared fixtures for the bill search test suite.

Everything here runs offline: embedders have no provider key, so vectors come
from the deterministic hashed fallback.
"""

import pytest

from legis_search_server.embeddings.embedder import Embedder
from legis_search_server.embeddings.index import VectorIndex
from legis_search_server.embeddings.lifecycle import BillSearchService
from legis_search_server.embeddings.models import BillDocument, BillMetadata
from legis_search_server.sources.base import StaticDocumentSource


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingSource(StaticDocumentSource):
    """Static source that records how often it was asked for documents."""

    def __init__(self, documents=()):
        super().__init__(documents)
        self.calls = 0

    async def fetch_documents(self, limit: int):
        self.calls += 1
        return await super().fetch_documents(limit)


@pytest.fixture
def scenario_docs():
    return [
        BillDocument(id="A", title="clean energy tax credit"),
        BillDocument(id="B", title="corporate tax reform act"),
        BillDocument(id="C", title="renewable energy grant program"),
    ]


@pytest.fixture
def sponsored_doc():
    return BillDocument(
        id="118-HR-5615",
        title="Rural Broadband Expansion Act",
        summary="Expands grants for rural broadband deployment.",
        metadata=BillMetadata(
            sponsor="Rep. Jane Smith",
            date="2023-09-20",
            status="Referred to committee",
            tags=["Telecommunications", "Rural development"],
        ),
    )


@pytest.fixture
def embedder():
    return Embedder(api_key="", throttle_seconds=0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def source(scenario_docs):
    return CountingSource(scenario_docs)


@pytest.fixture
def service(source, embedder, clock):
    return BillSearchService(
        source=source,
        embedder=embedder,
        index=VectorIndex(),
        ttl_seconds=1800,
        min_similarity=0.2,
        fetch_limit=100,
        clock=clock,
    )
