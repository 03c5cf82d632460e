"""Core ContentStore class.

Contains the main ContentStore class with connection management and
delegation to the vault and chunk operation modules.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ragamuffin.store import chunks, vaults
from ragamuffin.store.models import Chunk, Vault
from ragamuffin.store.schema import SCHEMA_SQL, SCHEMA_VERSION

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


class ContentStore:
    """SQLite-backed store of vaults and content-addressed chunks.

    One instance is constructed at process start and passed to every
    component that needs it. Single writer: one process, one vault
    operation at a time.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the store and create the schema if needed.

        Args:
            db_path: Path to SQLite database file, or ":memory:".
        """
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._ensure_schema()

    def _get_connection(self) -> sqlite3.Connection:
        """Get the database connection, opening it on first use."""
        if self._conn is None:
            if str(self.db_path) != IN_MEMORY:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), timeout=30.0, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            # foreign_keys: enforce chunk -> vault referential integrity
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
        return self._conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database transaction error: {e}", exc_info=True)
            raise

    def _ensure_schema(self) -> None:
        """Create database schema if needed."""
        with self._transaction() as conn:
            try:
                row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
                current_version = row[0] if row and row[0] is not None else 0
            except sqlite3.OperationalError:
                current_version = 0

            if current_version < SCHEMA_VERSION:
                conn.executescript(SCHEMA_SQL)
                conn.execute("DELETE FROM schema_version")
                conn.execute(
                    "INSERT INTO schema_version (version) VALUES (?)",
                    (SCHEMA_VERSION,),
                )
                logger.debug(f"Content store schema initialized (v{SCHEMA_VERSION})")

    def get_schema_version(self) -> int:
        """Get current database schema version."""
        try:
            row = self._get_connection().execute("SELECT MAX(version) FROM schema_version").fetchone()
            return row[0] if row and row[0] is not None else 0
        except sqlite3.OperationalError:
            return 0

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "ContentStore":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ==========================================================================
    # Vault operations - delegate to vaults module
    # ==========================================================================

    def create_vault(self, name: str, root_path: str) -> Vault:
        """Create a vault. Raises VaultExistsError if the name is taken."""
        return vaults.create_vault(self, name, root_path)

    def get_vault(self, name: str) -> Vault | None:
        """Get a vault by name, or None."""
        return vaults.get_vault(self, name)

    def vault_exists(self, name: str) -> bool:
        """Check whether a vault with this name exists."""
        return vaults.vault_exists(self, name)

    def list_vaults(self, name_filter: str | None = None) -> list[Vault]:
        """List vaults, optionally restricted to one name."""
        return vaults.list_vaults(self, name_filter)

    def delete_vault(self, name: str) -> int:
        """Delete a vault and its chunks. Raises VaultNotFoundError if absent."""
        return vaults.delete_vault(self, name)

    # ==========================================================================
    # Chunk operations - delegate to chunks module
    # ==========================================================================

    def add_chunk(self, vault_id: int, text: str, vector: list[float]) -> bool:
        """Insert a chunk keyed by its content hash. No-op if already present."""
        return chunks.add_chunk(self, vault_id, text, vector)

    def get_chunk_hashes(self, vault_id: int) -> set[str]:
        """Get the set of chunk hashes stored for a vault."""
        return chunks.get_chunk_hashes(self, vault_id)

    def delete_chunk(self, chunk_hash: str, vault_id: int) -> bool:
        """Delete one chunk by hash. Returns whether a row was removed."""
        return chunks.delete_chunk(self, chunk_hash, vault_id)

    def get_chunks(self, vault_id: int) -> list[Chunk]:
        """Get all chunks of a vault (order not significant)."""
        return chunks.get_chunks(self, vault_id)

    def count_chunks(self, vault_id: int) -> int:
        """Count chunks stored for a vault."""
        return chunks.count_chunks(self, vault_id)
