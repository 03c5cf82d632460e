"""Pytest configuration and fixtures for ragamuffin tests."""

import hashlib
import logging
import threading
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from ragamuffin.chat.base import ChatMessage, ChatProvider, ChatReply, ToolSpec
from ragamuffin.embeddings.base import EmbeddingProvider, EmbeddingResult
from ragamuffin.exceptions import ChatError, EmbeddingError
from ragamuffin.logging_config import PACKAGE_LOGGER
from ragamuffin.store.core import ContentStore


def fake_vector(text: str, dims: int = 3) -> list[float]:
    """Deterministic, never-zero vector derived from the text."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return [digest[i] / 255.0 + 0.01 for i in range(dims)]


class FakeEmbedder(EmbeddingProvider):
    """In-memory embedder recording every text it was asked to embed."""

    def __init__(
        self,
        dims: int = 3,
        fail_on_call: int | None = None,
        on_call: Callable[[int, str], None] | None = None,
    ):
        self._dims = dims
        self.fail_on_call = fail_on_call
        self.on_call = on_call
        self.calls: list[str] = []
        self.closed = False
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "fake:embedder"

    @property
    def dimensions(self) -> int:
        return self._dims

    @property
    def is_available(self) -> bool:
        return True

    def embed(self, texts: list[str]) -> EmbeddingResult:
        vectors = []
        for text in texts:
            with self._lock:
                self.calls.append(text)
                call_number = len(self.calls)
            if self.fail_on_call is not None and call_number == self.fail_on_call:
                raise EmbeddingError("embedding failed", provider=self.name)
            if self.on_call:
                self.on_call(call_number, text)
            vectors.append(fake_vector(text, self._dims))
        return EmbeddingResult(embeddings=vectors, model="fake", provider=self.name, dimensions=self._dims)

    def close(self) -> None:
        self.closed = True


class ScriptedChatProvider(ChatProvider):
    """Chat provider replaying a fixed list of replies."""

    def __init__(self, replies: list[ChatReply]):
        self.replies = list(replies)
        self.requests: list[tuple[list[ChatMessage], list[ToolSpec]]] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "scripted:chat"

    @property
    def is_available(self) -> bool:
        return True

    def complete(self, messages: list[ChatMessage], tools: list[ToolSpec]) -> ChatReply:
        self.requests.append((list(messages), list(tools)))
        if not self.replies:
            raise ChatError("No scripted reply left", provider=self.name)
        return self.replies.pop(0)

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo configure_logging() side effects between tests."""
    yield
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture()
def store(tmp_path: Path) -> Iterator[ContentStore]:
    """ContentStore backed by a temp SQLite file."""
    content_store = ContentStore(tmp_path / "db" / "ragamuffin.db")
    yield content_store
    content_store.close()


@pytest.fixture()
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture()
def fake_embedder_cls() -> type[FakeEmbedder]:
    return FakeEmbedder


@pytest.fixture()
def scripted_chat_cls() -> type[ScriptedChatProvider]:
    return ScriptedChatProvider


@pytest.fixture()
def write_docs() -> Callable[[Path, dict[str, str]], Path]:
    """Write {relative_path: text} under a root and return the root."""

    def _write(root: Path, files: dict[str, str]) -> Path:
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return root

    return _write


@pytest.fixture()
def vault_dir(tmp_path: Path, write_docs: Callable[[Path, dict[str, str]], Path]) -> Path:
    """A small document tree with three markdown files and one ignored file."""
    return write_docs(
        tmp_path / "notes",
        {
            "alpha.md": "Alpha is the first letter.",
            "beta.md": "Beta comes after alpha.",
            "sub/gamma.md": "Gamma lives in a subfolder.",
            "ignored.txt": "Not a markdown file.",
        },
    )
