"""
Vector Index Tests

Exercise the exact-search contract of VectorIndex:
- build preconditions (empty batch, mixed dimensionality)
- threshold filtering, top-k bound, descending order, stable ties
- empty-index safety and atomic rebuilds
"""

import math

import numpy as np
import pytest

from legis_search_server.embeddings.index import (
    DimensionMismatchError,
    IndexBuildError,
    VectorIndex,
    cosine_similarity,
)
from legis_search_server.embeddings.models import BillDocument, BillEmbedding
from legis_search_server.embeddings.text import hashed_embedding


def _emb(doc_id, vector, title=None):
    doc = BillDocument(id=doc_id, title=title or f"Bill {doc_id}")
    return BillEmbedding(document=doc, full_text=doc.full_text, embedding=vector)


def _hashed(doc_id, text):
    doc = BillDocument(id=doc_id, title=text)
    return BillEmbedding(
        document=doc,
        full_text=doc.full_text,
        embedding=hashed_embedding(text),
    )


class TestCosineSimilarity:

    def test_symmetric(self):
        rng = np.random.default_rng(7)
        for _ in range(20):
            a = rng.normal(size=32).tolist()
            b = rng.normal(size=32).tolist()
            assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_self_similarity_is_one(self):
        v = [0.3, -1.2, 4.0, 0.0]
        assert cosine_similarity(v, v) == pytest.approx(1.0)

    def test_zero_vector_gives_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
        assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0

    def test_orthogonal(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 5.0]) == 0.0

    def test_length_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError):
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])


class TestBuild:

    def test_empty_batch_rejected(self):
        index = VectorIndex()
        with pytest.raises(IndexBuildError):
            index.build([])
        assert not index.is_built

    def test_mixed_dimensions_rejected(self):
        index = VectorIndex()
        with pytest.raises(IndexBuildError):
            index.build([_emb("A", [1.0, 0.0]), _emb("B", [1.0, 0.0, 0.0])])
        assert not index.is_built

    def test_declared_dimension_enforced(self):
        index = VectorIndex(dimension=3)
        with pytest.raises(IndexBuildError):
            index.build([_emb("A", [1.0, 0.0])])

    def test_explicit_build_dimension_enforced(self):
        index = VectorIndex()
        with pytest.raises(IndexBuildError):
            index.build([_emb("A", [1.0, 0.0])], dimension=4)

    def test_failed_build_keeps_previous_contents(self):
        index = VectorIndex()
        index.build([_emb("A", [1.0, 0.0])])

        with pytest.raises(IndexBuildError):
            index.build([_emb("B", [1.0, 0.0]), _emb("C", [1.0])])

        results = index.search([1.0, 0.0], top_k=5, min_similarity=0.0)
        assert [r.id for r in results] == ["A"]

    def test_build_sets_stats(self):
        index = VectorIndex()
        index.build([_emb("A", [1.0, 0.0]), _emb("B", [0.0, 1.0])])

        stats = index.stats()
        assert stats.count == 2
        assert stats.is_built is True
        assert stats.dimension == 2
        assert index.built_at is not None
        assert len(index) == 2


class TestSearch:

    def test_unbuilt_index_returns_empty(self):
        assert VectorIndex().search([1.0, 0.0], top_k=5) == []

    def test_cleared_index_returns_empty(self):
        index = VectorIndex()
        index.build([_emb("A", [1.0, 0.0])])
        index.clear()

        assert index.search([1.0, 0.0], top_k=5) == []
        assert index.stats().count == 0
        assert index.stats().is_built is False

    def test_query_dimension_mismatch_raises(self):
        index = VectorIndex()
        index.build([_emb("A", [1.0, 0.0])])
        with pytest.raises(DimensionMismatchError):
            index.search([1.0, 0.0, 0.0], top_k=1)

    def test_non_positive_top_k_returns_empty(self):
        index = VectorIndex()
        index.build([_emb("A", [1.0, 0.0])])
        assert index.search([1.0, 0.0], top_k=0) == []

    def test_threshold_filtering_matches_brute_force(self):
        rng = np.random.default_rng(42)
        vectors = rng.normal(size=(40, 16)).tolist()
        index = VectorIndex()
        index.build([_emb(str(i), v) for i, v in enumerate(vectors)])

        query = rng.normal(size=16).tolist()
        threshold = 0.1
        results = index.search(query, top_k=100, min_similarity=threshold)

        expected = {
            str(i)
            for i, v in enumerate(vectors)
            if cosine_similarity(query, v) >= threshold + 1e-12
        }
        returned = {r.id for r in results}

        assert all(r.similarity >= threshold for r in results)
        assert expected <= returned
        for i, v in enumerate(vectors):
            if str(i) not in returned:
                assert cosine_similarity(query, v) < threshold + 1e-12

    def test_top_k_bound_and_descending_order(self):
        rng = np.random.default_rng(3)
        index = VectorIndex()
        index.build([_emb(str(i), rng.normal(size=8).tolist()) for i in range(25)])

        results = index.search(rng.normal(size=8).tolist(), top_k=5, min_similarity=-1.0)

        assert len(results) == 5
        sims = [r.similarity for r in results]
        assert sims == sorted(sims, reverse=True)

    def test_ties_keep_insertion_order(self):
        index = VectorIndex()
        index.build(
            [
                _emb("first", [1.0, 1.0]),
                _emb("other", [0.0, 1.0]),
                _emb("second", [1.0, 1.0]),
                _emb("third", [1.0, 1.0]),
            ]
        )

        results = index.search([1.0, 1.0], top_k=4, min_similarity=0.0)

        assert [r.id for r in results[:3]] == ["first", "second", "third"]
        assert results[3].id == "other"

    def test_zero_query_scores_zero(self):
        index = VectorIndex()
        index.build([_emb("A", [1.0, 0.0]), _emb("B", [0.0, 1.0])])

        results = index.search([0.0, 0.0], top_k=5, min_similarity=0.0)

        assert [r.id for r in results] == ["A", "B"]
        assert all(r.similarity == 0.0 for r in results)

    def test_zero_row_never_nan(self):
        index = VectorIndex()
        index.build([_emb("Z", [0.0, 0.0]), _emb("A", [1.0, 0.0])])

        results = index.search([1.0, 0.0], top_k=5, min_similarity=-1.0)

        assert [r.id for r in results] == ["A", "Z"]
        assert all(not math.isnan(r.similarity) for r in results)

    def test_similarity_matches_cosine(self):
        a, q = [3.0, 4.0], [4.0, 3.0]
        index = VectorIndex()
        index.build([_emb("A", a)])

        (result,) = index.search(q, top_k=1, min_similarity=0.0)
        assert result.similarity == pytest.approx(cosine_similarity(a, q))

    def test_rebuild_replaces_previous_documents(self):
        index = VectorIndex()
        index.build([_hashed("A", "clean energy"), _hashed("B", "tax reform")])
        index.build([_hashed("D", "energy grants"), _hashed("E", "tax credits")])

        results = index.search(hashed_embedding("energy tax"), top_k=10, min_similarity=0.0)

        assert {r.id for r in results} == {"D", "E"}

    def test_renewable_energy_scenario(self, scenario_docs):
        index = VectorIndex()
        index.build(
            [
                BillEmbedding(
                    document=doc,
                    full_text=doc.full_text,
                    embedding=hashed_embedding(doc.title),
                )
                for doc in scenario_docs
            ]
        )

        results = index.search(
            hashed_embedding("renewable energy incentives"),
            top_k=2,
            min_similarity=0.1,
        )

        ids = [r.id for r in results]
        assert ids == ["C", "A"]
        assert "B" not in ids
        assert all(r.similarity >= 0.1 for r in results)
