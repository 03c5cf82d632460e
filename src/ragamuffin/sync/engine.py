"""Content-addressed reconciliation of a vault against its document tree."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ragamuffin.config import SyncConfig
from ragamuffin.exceptions import VaultNotFoundError
from ragamuffin.indexing.chunker import TextChunker
from ragamuffin.indexing.scanner import scan_tree
from ragamuffin.store.models import Vault

if TYPE_CHECKING:
    from ragamuffin.embeddings.base import EmbeddingProvider
    from ragamuffin.store.core import ContentStore

logger = logging.getLogger(__name__)

SyncProgress = Callable[[int, int], None]


@dataclass
class SyncResult:
    """Counts from one sync run."""

    added: int = 0
    deleted: int = 0
    cancelled: bool = False
    files_scanned: int = 0
    duration_seconds: float = 0.0


class SyncEngine:
    """Brings a vault's stored chunks in line with the files on disk.

    Each run chunks the whole tree, diffs chunk hashes against the store,
    embeds and inserts chunks that are new, then deletes chunks that no
    longer appear on disk. Chunks added before a failure stay committed, so
    re-running sync resumes from the recomputed diff.
    """

    def __init__(
        self,
        store: ContentStore,
        embedder: EmbeddingProvider,
        chunker: TextChunker | None = None,
        config: SyncConfig | None = None,
    ):
        """Initialize the engine.

        Args:
            store: Content store to reconcile.
            embedder: Provider used for every new chunk.
            chunker: Text chunker (default budget if omitted).
            config: Extensions and embedding concurrency.
        """
        self.store = store
        self.embedder = embedder
        self.chunker = chunker or TextChunker()
        self.config = config or SyncConfig()

    def sync(
        self,
        vault_name: str,
        cancel_event: threading.Event | None = None,
        progress: SyncProgress | None = None,
    ) -> SyncResult:
        """Reconcile one vault.

        Args:
            vault_name: Vault to sync.
            cancel_event: When set, no further embedding calls are issued.
                Committed chunks are kept and deletions still run.
            progress: Optional callback(done, total) over chunks to embed.

        Returns:
            SyncResult with added/deleted counts.

        Raises:
            VaultNotFoundError: If the vault does not exist.
            ProviderError: If an embedding call fails. Deletions of this
                run are then not applied.
            OSError: If a document cannot be read.
        """
        start_time = time.time()
        vault = self.store.get_vault(vault_name)
        if vault is None:
            raise VaultNotFoundError(vault_name)

        logger.debug(f'Scanning "{vault.name}" at {vault.root_path}')
        snapshot = scan_tree(vault.root_path, self.chunker, self.config.extensions)
        db_hashes = self.store.get_chunk_hashes(vault.id)

        to_add = [h for h in snapshot.chunks if h not in db_hashes]
        to_delete = sorted(db_hashes - snapshot.hashes)
        logger.debug(
            f"{len(snapshot.files)} files, {len(snapshot.chunks)} chunks on disk, "
            f"{len(db_hashes)} stored: {len(to_add)} to add, {len(to_delete)} to delete"
        )

        texts = [snapshot.chunks[h] for h in to_add]
        if self.config.embed_workers > 1 and len(texts) > 1:
            added, cancelled = self._add_parallel(vault, texts, cancel_event, progress)
        else:
            added, cancelled = self._add_sequential(vault, texts, cancel_event, progress)

        deleted = 0
        for chunk_hash in to_delete:
            if self.store.delete_chunk(chunk_hash, vault.id):
                deleted += 1

        result = SyncResult(
            added=added,
            deleted=deleted,
            cancelled=cancelled,
            files_scanned=len(snapshot.files),
            duration_seconds=time.time() - start_time,
        )
        if cancelled:
            logger.warning(f'Sync of "{vault.name}" cancelled after {added} of {len(texts)} additions')
        logger.info(f'Synced "{vault.name}": {added} added, {deleted} deleted')
        return result

    def _add_sequential(
        self,
        vault: Vault,
        texts: list[str],
        cancel_event: threading.Event | None,
        progress: SyncProgress | None,
    ) -> tuple[int, bool]:
        added = 0
        total = len(texts)
        for i, text in enumerate(texts):
            if cancel_event is not None and cancel_event.is_set():
                return added, True
            vector = self.embedder.embed_text(text)
            if self.store.add_chunk(vault.id, text, vector):
                added += 1
            logger.debug(f"  embedded ({i + 1}/{total})")
            if progress:
                progress(i + 1, total)
        return added, False

    def _add_parallel(
        self,
        vault: Vault,
        texts: list[str],
        cancel_event: threading.Event | None,
        progress: SyncProgress | None,
    ) -> tuple[int, bool]:
        """Embed on a bounded pool in submission-ordered batches.

        Store writes happen on the calling thread, in submission order.
        """
        workers = self.config.embed_workers
        added = 0
        done = 0
        total = len(texts)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ragamuffin-embed") as pool:
            for start in range(0, total, workers):
                if cancel_event is not None and cancel_event.is_set():
                    return added, True

                batch = texts[start : start + workers]
                futures = [pool.submit(self.embedder.embed_text, text) for text in batch]
                try:
                    for text, future in zip(batch, futures):
                        vector = future.result()
                        if self.store.add_chunk(vault.id, text, vector):
                            added += 1
                        done += 1
                        if progress:
                            progress(done, total)
                except Exception:
                    for future in futures:
                        future.cancel()
                    raise
                logger.debug(f"  embedded batch ({done}/{total})")

        return added, False
