"""Similarity ranking and the retrieval tool."""

from ragamuffin.retrieval.ranker import cosine_similarity, rank_chunks
from ragamuffin.retrieval.tool import RetrievalTool, RetrieveChunksInput

__all__ = ["cosine_similarity", "rank_chunks", "RetrievalTool", "RetrieveChunksInput"]
