"""Vault operations for the content store."""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

from ragamuffin.exceptions import VaultError, VaultExistsError, VaultNotFoundError
from ragamuffin.store.models import Vault

if TYPE_CHECKING:
    from ragamuffin.store.core import ContentStore

logger = logging.getLogger(__name__)


def create_vault(store: ContentStore, name: str, root_path: str) -> Vault:
    """Create a new vault.

    Args:
        store: The ContentStore instance.
        name: Unique vault name.
        root_path: Filesystem path of the vault's documents.

    Returns:
        The created vault with its store-assigned id.

    Raises:
        VaultExistsError: If a vault with this name already exists.
    """
    if vault_exists(store, name):
        raise VaultExistsError(name)

    try:
        with store._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO vaults (name, root_path) VALUES (?, ?)",
                (name, root_path),
            )
            vault_id = cursor.lastrowid
    except sqlite3.IntegrityError as e:
        raise VaultExistsError(name) from e

    if vault_id is None:
        raise VaultError("Database did not return an id for the new vault", vault_name=name)
    logger.info(f'Created vault "{name}" -> {root_path}')
    return Vault(id=vault_id, name=name, root_path=root_path)


def get_vault(store: ContentStore, name: str) -> Vault | None:
    """Get a vault by name.

    Returns:
        The vault, or None if no vault has this name.
    """
    row = (
        store._get_connection()
        .execute("SELECT id, name, root_path FROM vaults WHERE name = ?", (name,))
        .fetchone()
    )
    return Vault.from_row(row) if row else None


def vault_exists(store: ContentStore, name: str) -> bool:
    """Check if a vault exists."""
    row = store._get_connection().execute("SELECT 1 FROM vaults WHERE name = ?", (name,)).fetchone()
    return row is not None


def list_vaults(store: ContentStore, name_filter: str | None = None) -> list[Vault]:
    """Get all vaults ordered by name, optionally filtered by exact name."""
    conn = store._get_connection()
    if name_filter is None:
        cursor = conn.execute("SELECT id, name, root_path FROM vaults ORDER BY name")
    else:
        cursor = conn.execute(
            "SELECT id, name, root_path FROM vaults WHERE name = ? ORDER BY name",
            (name_filter,),
        )
    return [Vault.from_row(row) for row in cursor.fetchall()]


def delete_vault(store: ContentStore, name: str) -> int:
    """Delete a vault and all its chunks.

    Chunks are removed first, then the vault row, in one transaction.

    Returns:
        Number of chunks removed.

    Raises:
        VaultNotFoundError: If no vault has this name.
    """
    vault = get_vault(store, name)
    if vault is None:
        raise VaultNotFoundError(name)

    with store._transaction() as conn:
        cursor = conn.execute("DELETE FROM chunks WHERE vault_id = ?", (vault.id,))
        removed = cursor.rowcount
        conn.execute("DELETE FROM vaults WHERE id = ?", (vault.id,))

    logger.info(f'Deleted vault "{name}" ({removed} chunks)')
    return removed
