"""Chunk operations for the content store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ragamuffin.indexing.scanner import content_hash
from ragamuffin.store.models import Chunk, encode_vector

if TYPE_CHECKING:
    from ragamuffin.store.core import ContentStore

logger = logging.getLogger(__name__)


def add_chunk(store: ContentStore, vault_id: int, text: str, vector: list[float]) -> bool:
    """Add a chunk to a vault.

    The hash is computed from the text. Inserting a (hash, vault_id) pair
    that already exists is a no-op.

    Args:
        store: The ContentStore instance.
        vault_id: Owning vault.
        text: Chunk text.
        vector: Embedding of the text.

    Returns:
        True if a row was inserted, False if it already existed.
    """
    chunk_hash = content_hash(text)
    with store._transaction() as conn:
        cursor = conn.execute(
            "INSERT OR IGNORE INTO chunks (vault_id, hash, text, vec) VALUES (?, ?, ?, ?)",
            (vault_id, chunk_hash, text, encode_vector(vector)),
        )
    inserted = cursor.rowcount > 0
    if not inserted:
        logger.debug(f"Chunk {chunk_hash[:12]} already stored for vault {vault_id}")
    return inserted


def get_chunk_hashes(store: ContentStore, vault_id: int) -> set[str]:
    """Get all chunk hashes for a vault."""
    cursor = store._get_connection().execute(
        "SELECT hash FROM chunks WHERE vault_id = ?",
        (vault_id,),
    )
    return {row["hash"] for row in cursor.fetchall()}


def delete_chunk(store: ContentStore, chunk_hash: str, vault_id: int) -> bool:
    """Delete a chunk by hash and vault id.

    Returns:
        True if a row was removed. Deleting an absent chunk is a no-op.
    """
    with store._transaction() as conn:
        cursor = conn.execute(
            "DELETE FROM chunks WHERE hash = ? AND vault_id = ?",
            (chunk_hash, vault_id),
        )
    return cursor.rowcount > 0


def get_chunks(store: ContentStore, vault_id: int) -> list[Chunk]:
    """Get all chunks for a vault, ordered by insertion."""
    cursor = store._get_connection().execute(
        "SELECT id, vault_id, hash, text, vec FROM chunks WHERE vault_id = ? ORDER BY id",
        (vault_id,),
    )
    return [Chunk.from_row(row) for row in cursor.fetchall()]


def count_chunks(store: ContentStore, vault_id: int) -> int:
    """Count chunks for a vault."""
    row = (
        store._get_connection()
        .execute("SELECT COUNT(*) FROM chunks WHERE vault_id = ?", (vault_id,))
        .fetchone()
    )
    return int(row[0])
