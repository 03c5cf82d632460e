"""Document chunking and scanning."""

from ragamuffin.indexing.chunker import ChunkerConfig, TextChunker, chunk_text, estimate_tokens
from ragamuffin.indexing.scanner import (
    DiskSnapshot,
    content_hash,
    discover_files,
    scan_tree,
)

__all__ = [
    "ChunkerConfig",
    "TextChunker",
    "chunk_text",
    "estimate_tokens",
    "DiskSnapshot",
    "content_hash",
    "discover_files",
    "scan_tree",
]
