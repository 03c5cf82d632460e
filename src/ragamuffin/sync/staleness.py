"""Read-only comparison of on-disk chunks against stored chunks."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from ragamuffin.constants import DEFAULT_EXTENSIONS
from ragamuffin.indexing.chunker import TextChunker
from ragamuffin.indexing.scanner import scan_tree

if TYPE_CHECKING:
    from ragamuffin.store.core import ContentStore

logger = logging.getLogger(__name__)


class StalenessDetector:
    """Tells whether a vault needs a sync, without modifying anything."""

    def __init__(
        self,
        store: ContentStore,
        chunker: TextChunker | None = None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ):
        self.store = store
        self.chunker = chunker or TextChunker()
        self.extensions = tuple(extensions)

    def is_stale(self, vault_id: int, root_path: Path | str) -> bool:
        """True if the disk hash set differs from the stored hash set."""
        disk_hashes = scan_tree(root_path, self.chunker, self.extensions).hashes
        stored_hashes = self.store.get_chunk_hashes(vault_id)
        stale = disk_hashes != stored_hashes
        if stale:
            logger.debug(
                f"Vault {vault_id} is stale: {len(disk_hashes - stored_hashes)} new, "
                f"{len(stored_hashes - disk_hashes)} vanished"
            )
        return stale
