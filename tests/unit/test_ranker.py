"""Tests for cosine similarity and top-K ranking."""

import math

import pytest

from ragamuffin.exceptions import DimensionMismatchError
from ragamuffin.retrieval.ranker import cosine_similarity, rank_chunks
from ragamuffin.store.models import Chunk


def _chunk(chunk_id: int, vector: list[float]) -> Chunk:
    return Chunk(id=chunk_id, vault_id=1, hash=f"h{chunk_id}", text=f"c{chunk_id}", vector=vector)


class TestCosineSimilarity:
    """Test cosine_similarity()."""

    @pytest.mark.parametrize("vector", [[1.0, 0.0], [0.3, -4.0, 2.5], [1e-3, 1e-3, 1e-3, 1e-3]])
    def test_self_similarity_is_one(self, vector: list[float]):
        assert cosine_similarity(vector, vector) == pytest.approx(1.0)

    def test_orthogonal_is_zero(self):
        assert cosine_similarity([1.0, 0.0, 0.0], [0.0, 1.0, 0.0]) == 0.0

    def test_opposite_is_minus_one(self):
        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)

    def test_symmetric(self):
        a, b = [0.2, 0.7, -0.1], [0.9, -0.3, 0.4]

        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_scale_invariant(self):
        assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)

    def test_dimension_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError) as exc_info:
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])

        assert exc_info.value.expected_dims == 2
        assert exc_info.value.actual_dims == 3

    def test_zero_vector_is_nan(self):
        assert math.isnan(cosine_similarity([0.0, 0.0], [1.0, 0.0]))


class TestRankChunks:
    """Test rank_chunks()."""

    def test_reference_ranking(self):
        c1 = _chunk(1, [1.0, 0.0, 0.0])
        c2 = _chunk(2, [0.8, 0.6, 0.0])
        c3 = _chunk(3, [0.0, 1.0, 0.0])

        assert rank_chunks([c1, c2, c3], [1.0, 0.0, 0.0], top_k=2) == [c1, c2]

    def test_order_independent_of_input_order(self):
        c1 = _chunk(1, [1.0, 0.0, 0.0])
        c2 = _chunk(2, [0.8, 0.6, 0.0])
        c3 = _chunk(3, [0.0, 1.0, 0.0])

        assert rank_chunks([c3, c2, c1], [1.0, 0.0, 0.0], top_k=3) == [c1, c2, c3]

    def test_ties_keep_input_order(self):
        first = _chunk(1, [1.0, 1.0])
        second = _chunk(2, [2.0, 2.0])
        third = _chunk(3, [3.0, 3.0])

        assert rank_chunks([second, third, first], [1.0, 1.0], top_k=3) == [second, third, first]

    def test_top_k_larger_than_input(self):
        chunks = [_chunk(1, [1.0, 0.0]), _chunk(2, [0.0, 1.0])]

        assert len(rank_chunks(chunks, [1.0, 0.0], top_k=10)) == 2

    def test_top_k_zero(self):
        assert rank_chunks([_chunk(1, [1.0])], [1.0], top_k=0) == []

    def test_negative_top_k_raises(self):
        with pytest.raises(ValueError):
            rank_chunks([], [1.0], top_k=-1)

    def test_empty_input(self):
        assert rank_chunks([], [1.0, 0.0], top_k=4) == []

    def test_any_mismatched_chunk_raises(self):
        chunks = [_chunk(1, [1.0, 0.0]), _chunk(7, [1.0, 0.0, 0.0])]

        with pytest.raises(DimensionMismatchError) as exc_info:
            rank_chunks(chunks, [1.0, 0.0], top_k=1)

        assert exc_info.value.chunk_id == 7
