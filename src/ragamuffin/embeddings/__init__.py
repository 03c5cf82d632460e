"""Embedding providers."""

from ragamuffin.embeddings.base import EmbeddingProvider, EmbeddingResult
from ragamuffin.embeddings.factory import RetryingEmbedder, create_embedder

__all__ = ["EmbeddingProvider", "EmbeddingResult", "RetryingEmbedder", "create_embedder"]
