"""Tests for the SQLite content store.

Covers:
- Schema creation and persistence across reopen
- Vault CRUD and name uniqueness
- Content-addressed chunk insertion and deletion
- Cascade delete of a vault's chunks
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ragamuffin.exceptions import VaultError, VaultExistsError, VaultNotFoundError
from ragamuffin.indexing.scanner import content_hash
from ragamuffin.store import SCHEMA_VERSION, ContentStore


class TestSchema:
    """Test schema initialization."""

    def test_schema_version_recorded(self, store: ContentStore):
        assert store.get_schema_version() == SCHEMA_VERSION

    def test_in_memory_store(self):
        memory_store = ContentStore(":memory:")
        vault = memory_store.create_vault("mem", "/tmp/mem")

        assert memory_store.get_vault("mem") == vault
        memory_store.close()

    def test_data_survives_reopen(self, tmp_path: Path):
        db_path = tmp_path / "persist.db"
        with ContentStore(db_path) as first:
            vault = first.create_vault("notes", "/notes")
            first.add_chunk(vault.id, "Persisted text.", [0.5, 0.25])

        with ContentStore(db_path) as second:
            reopened = second.get_vault("notes")
            assert reopened == vault
            assert [c.text for c in second.get_chunks(vault.id)] == ["Persisted text."]

    def test_foreign_keys_enforced(self, store: ContentStore):
        with pytest.raises(sqlite3.IntegrityError):
            store.add_chunk(999, "orphan", [1.0])


class TestVaults:
    """Test vault operations."""

    def test_create_and_get(self, store: ContentStore):
        vault = store.create_vault("notes", "/home/me/notes")

        assert vault.id > 0
        assert vault.name == "notes"
        assert vault.root_path == "/home/me/notes"
        assert store.get_vault("notes") == vault

    def test_create_without_row_id_raises(self, store: ContentStore):
        conn = MagicMock()
        conn.execute.return_value.lastrowid = None

        @contextmanager
        def fake_transaction():
            yield conn

        with patch.object(store, "_transaction", fake_transaction):
            with pytest.raises(VaultError) as exc_info:
                store.create_vault("notes", "/notes")

        assert exc_info.value.vault_name == "notes"

    def test_get_missing_returns_none(self, store: ContentStore):
        assert store.get_vault("nope") is None

    def test_duplicate_name_raises(self, store: ContentStore):
        store.create_vault("notes", "/a")

        with pytest.raises(VaultExistsError) as exc_info:
            store.create_vault("notes", "/b")

        assert exc_info.value.vault_name == "notes"
        assert "already exists" in str(exc_info.value)

    def test_vault_exists(self, store: ContentStore):
        store.create_vault("notes", "/a")

        assert store.vault_exists("notes")
        assert not store.vault_exists("other")

    def test_list_vaults_sorted_by_name(self, store: ContentStore):
        store.create_vault("zeta", "/z")
        store.create_vault("alpha", "/a")

        assert [v.name for v in store.list_vaults()] == ["alpha", "zeta"]

    def test_list_vaults_with_filter(self, store: ContentStore):
        store.create_vault("zeta", "/z")
        store.create_vault("alpha", "/a")

        assert [v.name for v in store.list_vaults("zeta")] == ["zeta"]
        assert store.list_vaults("missing") == []

    def test_delete_cascades_to_chunks(self, store: ContentStore):
        vault = store.create_vault("notes", "/a")
        store.add_chunk(vault.id, "One.", [1.0, 0.0])
        store.add_chunk(vault.id, "Two.", [0.0, 1.0])

        removed = store.delete_vault("notes")

        assert removed == 2
        assert store.get_vault("notes") is None
        assert store.get_chunks(vault.id) == []

    def test_delete_leaves_other_vaults_alone(self, store: ContentStore):
        first = store.create_vault("first", "/1")
        second = store.create_vault("second", "/2")
        store.add_chunk(first.id, "Shared.", [1.0])
        store.add_chunk(second.id, "Shared.", [1.0])

        store.delete_vault("first")

        assert store.count_chunks(second.id) == 1

    def test_delete_missing_raises(self, store: ContentStore):
        with pytest.raises(VaultNotFoundError):
            store.delete_vault("ghost")

    def test_name_reusable_after_delete(self, store: ContentStore):
        store.create_vault("notes", "/a")
        store.delete_vault("notes")

        assert store.create_vault("notes", "/b").root_path == "/b"


class TestChunks:
    """Test chunk operations."""

    @pytest.fixture()
    def vault_id(self, store: ContentStore) -> int:
        return store.create_vault("notes", "/notes").id

    def test_add_computes_hash(self, store: ContentStore, vault_id: int):
        assert store.add_chunk(vault_id, "Some text.", [0.1, 0.2, 0.3]) is True

        (chunk,) = store.get_chunks(vault_id)
        assert chunk.hash == content_hash("Some text.")
        assert chunk.vault_id == vault_id
        assert chunk.text == "Some text."

    def test_vector_roundtrip_preserves_order_and_precision(self, store: ContentStore, vault_id: int):
        vector = [0.1, -2.5, 1e-12, 3.141592653589793]
        store.add_chunk(vault_id, "Vector.", vector)

        (chunk,) = store.get_chunks(vault_id)
        assert chunk.vector == vector
        assert chunk.dimensions == 4

    def test_duplicate_add_is_noop(self, store: ContentStore, vault_id: int):
        store.add_chunk(vault_id, "Same.", [1.0])

        assert store.add_chunk(vault_id, "Same.", [2.0]) is False
        (chunk,) = store.get_chunks(vault_id)
        assert chunk.vector == [1.0]

    def test_same_text_in_two_vaults_stored_twice(self, store: ContentStore, vault_id: int):
        other = store.create_vault("other", "/other")

        store.add_chunk(vault_id, "Same.", [1.0])
        store.add_chunk(other.id, "Same.", [1.0])

        assert store.count_chunks(vault_id) == 1
        assert store.count_chunks(other.id) == 1

    def test_get_chunk_hashes(self, store: ContentStore, vault_id: int):
        store.add_chunk(vault_id, "A.", [1.0])
        store.add_chunk(vault_id, "B.", [1.0])

        assert store.get_chunk_hashes(vault_id) == {content_hash("A."), content_hash("B.")}

    def test_get_chunk_hashes_empty(self, store: ContentStore, vault_id: int):
        assert store.get_chunk_hashes(vault_id) == set()

    def test_delete_chunk(self, store: ContentStore, vault_id: int):
        store.add_chunk(vault_id, "A.", [1.0])

        assert store.delete_chunk(content_hash("A."), vault_id) is True
        assert store.get_chunk_hashes(vault_id) == set()

    def test_delete_absent_chunk_is_noop(self, store: ContentStore, vault_id: int):
        assert store.delete_chunk(content_hash("never stored"), vault_id) is False

    def test_delete_chunk_scoped_to_vault(self, store: ContentStore, vault_id: int):
        other = store.create_vault("other", "/other")
        store.add_chunk(vault_id, "Same.", [1.0])
        store.add_chunk(other.id, "Same.", [1.0])

        store.delete_chunk(content_hash("Same."), other.id)

        assert store.count_chunks(vault_id) == 1
        assert store.count_chunks(other.id) == 0
