"""Document discovery and content-addressed scanning.

Shared by the sync engine and the staleness detector so both compute the
disk-side hash set through exactly the same walk, chunk, and digest
pipeline.
"""

import hashlib
import logging
import os
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from ragamuffin.constants import DEFAULT_EXTENSIONS
from ragamuffin.indexing.chunker import TextChunker

logger = logging.getLogger(__name__)

ScanProgress = Callable[[int, int, str], None]


def content_hash(text: str) -> str:
    """SHA-256 hex digest of the UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _has_extension(path: Path, extensions: Iterable[str]) -> bool:
    suffix = path.suffix.lower()
    return any(suffix == ext.lower() for ext in extensions)


def discover_files(
    root: Path | str,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> Iterator[Path]:
    """Yield eligible files under root in a stable order.

    A root that is itself a file is treated as a one-file tree. Directories
    are walked recursively without following symlinked directories.

    Args:
        root: File or directory to scan.
        extensions: Allowed suffixes (e.g. [".md"]).

    Yields:
        File paths rooted at ``root``, sorted within each directory.
    """
    root = Path(root)
    extensions = tuple(extensions)

    if root.is_file():
        if _has_extension(root, extensions):
            yield root
        return

    if not root.is_dir():
        logger.warning(f"Vault root does not exist: {root}")
        return

    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.is_file() and _has_extension(path, extensions):
                yield path


def relative_name(path: Path, root: Path) -> str:
    """Path of a discovered file relative to the vault root, for display."""
    if root.is_file():
        return path.name
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


@dataclass
class DiskSnapshot:
    """Content-addressed view of a document tree.

    Attributes:
        chunks: hash -> chunk text. Identical text anywhere in the tree
            collapses to one entry.
        sources: hash -> relative path of the first file producing it.
        files: Relative paths of every scanned file.
    """

    chunks: dict[str, str] = field(default_factory=dict)
    sources: dict[str, str] = field(default_factory=dict)
    files: list[str] = field(default_factory=list)

    @property
    def hashes(self) -> set[str]:
        return set(self.chunks)


def scan_tree(
    root: Path | str,
    chunker: TextChunker,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    progress: ScanProgress | None = None,
) -> DiskSnapshot:
    """Chunk every eligible file under root and index chunks by hash.

    Args:
        root: Vault root (file or directory).
        chunker: Chunker used to split each file.
        extensions: Allowed suffixes.
        progress: Optional callback (index, total, relative_path) per file.

    Returns:
        DiskSnapshot of the tree.

    Raises:
        OSError: If a discovered file cannot be read. Skipping it would make
            a sync delete that file's stored chunks.
    """
    root = Path(root)
    files = list(discover_files(root, extensions))
    snapshot = DiskSnapshot()

    for i, path in enumerate(files, start=1):
        rel = relative_name(path, root)
        if progress:
            progress(i, len(files), rel)
        text = path.read_text(encoding="utf-8", errors="replace")

        snapshot.files.append(rel)
        pieces = chunker.chunk(text)
        for piece in pieces:
            digest = content_hash(piece)
            if digest not in snapshot.chunks:
                snapshot.chunks[digest] = piece
                snapshot.sources[digest] = rel
        logger.debug(f"  ({i}/{len(files)}) {rel}: {len(pieces)} chunks")

    return snapshot
