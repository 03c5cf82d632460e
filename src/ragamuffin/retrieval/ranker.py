"""Brute-force cosine similarity ranking over stored chunks."""

import math
from collections.abc import Sequence

from ragamuffin.exceptions import DimensionMismatchError
from ragamuffin.store.models import Chunk


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Precondition: both vectors are nonzero. A zero vector yields NaN
    rather than a synthetic score.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(expected_dims=len(a), actual_dims=len(b))

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    denominator = norm_a * norm_b
    if denominator == 0.0:
        return math.nan
    return dot / denominator


def rank_chunks(chunks: Sequence[Chunk], query_vector: Sequence[float], top_k: int) -> list[Chunk]:
    """Return the top_k chunks most similar to the query, best first.

    Ties keep their input order. Every stored vector is checked against the
    query's dimensionality, so a vault embedded by a different model fails
    loudly instead of producing meaningless scores.

    Args:
        chunks: Candidate chunks.
        query_vector: Embedding of the query.
        top_k: Maximum number of results.

    Raises:
        DimensionMismatchError: If any chunk vector differs in length from the query.
        ValueError: If top_k is negative.
    """
    if top_k < 0:
        raise ValueError(f"top_k must be non-negative, got {top_k}")

    scored: list[tuple[float, Chunk]] = []
    for chunk in chunks:
        if len(chunk.vector) != len(query_vector):
            raise DimensionMismatchError(
                expected_dims=len(query_vector),
                actual_dims=len(chunk.vector),
                chunk_id=chunk.id,
            )
        scored.append((cosine_similarity(query_vector, chunk.vector), chunk))

    # sorted() is stable, so equal scores keep input order
    ranked = sorted(scored, key=lambda pair: pair[0], reverse=True)
    return [chunk for _, chunk in ranked[:top_k]]
