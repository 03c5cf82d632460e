"""Service layer wiring the store, providers and engines together.

RagamuffinService is the composition root: one store, one embedder and
one chat provider are constructed at startup and handed to every
component that needs them.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from ragamuffin.chat.base import ChatMessage, ChatProvider
from ragamuffin.chat.factory import create_chat_provider
from ragamuffin.chat.orchestrator import ChatOrchestrator
from ragamuffin.config import ChunkingConfig, RagamuffinConfig
from ragamuffin.constants import DEFAULT_SYSTEM_PROMPT
from ragamuffin.embeddings.base import EmbeddingProvider
from ragamuffin.embeddings.factory import create_embedder
from ragamuffin.exceptions import ConfigurationError, ValidationError, VaultNotFoundError
from ragamuffin.indexing.chunker import ChunkerConfig, TextChunker
from ragamuffin.indexing.scanner import discover_files, relative_name
from ragamuffin.retrieval.tool import RetrievalTool
from ragamuffin.store.core import ContentStore
from ragamuffin.store.models import Vault, VaultInfo
from ragamuffin.sync.engine import SyncEngine, SyncProgress, SyncResult
from ragamuffin.sync.staleness import StalenessDetector

logger = logging.getLogger(__name__)


def _build_chunker(config: ChunkingConfig) -> TextChunker:
    return TextChunker(ChunkerConfig(max_tokens=config.max_tokens))


class ChatSession:
    """One interactive conversation against a vault."""

    def __init__(self, vault: Vault, orchestrator: ChatOrchestrator):
        self.vault = vault
        self.orchestrator = orchestrator
        self.history: list[ChatMessage] = orchestrator.new_history()

    def ask(self, text: str) -> str:
        """Run one turn and keep the extended history for the next."""
        result = self.orchestrator.run_turn(text, self.history)
        self.history = result.messages
        return result.text

    def reset(self) -> None:
        """Drop the conversation, keeping only the system prompt."""
        self.history = self.orchestrator.new_history()


class RagamuffinService:
    """High-level vault operations used by the CLI."""

    def __init__(
        self,
        config: RagamuffinConfig,
        store: ContentStore,
        embedder: EmbeddingProvider,
        chat_provider: ChatProvider | None = None,
    ):
        """Initialize the service.

        Args:
            config: Loaded configuration.
            store: The process-wide content store.
            embedder: Embedding provider for sync and retrieval.
            chat_provider: Chat provider; only needed for open_chat.
        """
        self.config = config
        self.store = store
        self.embedder = embedder
        self.chat_provider = chat_provider
        self.chunker = _build_chunker(config.chunking)
        self.engine = SyncEngine(store, embedder, self.chunker, config.sync)
        self.staleness = StalenessDetector(store, self.chunker, config.sync.extensions)

    @classmethod
    def from_config(
        cls,
        config: RagamuffinConfig,
        project_root: Path,
        db_path: Path | None = None,
    ) -> RagamuffinService:
        """Construct the store and providers from configuration."""
        resolved_db = db_path or config.get_db_path(project_root)
        logger.debug(f"Opening content store at {resolved_db}")
        store = ContentStore(resolved_db)
        embedder = create_embedder(config.embedding, config.retry)
        chat_provider = create_chat_provider(config.chat, config.retry)
        return cls(config, store, embedder, chat_provider)

    def close(self) -> None:
        """Release the store connection and provider clients."""
        self.store.close()
        self.embedder.close()
        if self.chat_provider is not None:
            self.chat_provider.close()

    def check_providers(self, include_chat: bool = False) -> list[str]:
        """Check provider endpoints before long-running work.

        Args:
            include_chat: Also check the chat provider.

        Returns:
            Reasons for each unreachable provider; empty when all are up.
        """
        providers: list[EmbeddingProvider | ChatProvider] = [self.embedder]
        if include_chat and self.chat_provider is not None:
            providers.append(self.chat_provider)

        problems: list[str] = []
        for provider in providers:
            available, reason = provider.check_availability()
            if not available:
                logger.info(f"Provider {provider.name} unavailable: {reason}")
                problems.append(reason)
        return problems

    def _require_vault(self, name: str) -> Vault:
        vault = self.store.get_vault(name)
        if vault is None:
            raise VaultNotFoundError(name)
        return vault

    def create_vault(
        self,
        name: str,
        root_path: Path | str,
        cancel_event: threading.Event | None = None,
        progress: SyncProgress | None = None,
    ) -> tuple[Vault, SyncResult]:
        """Register a vault and run its first sync.

        The root is stored as an absolute path. If the first sync fails the
        vault stays registered and ``update`` resumes it.

        Raises:
            ValidationError: If the root path does not exist.
            VaultExistsError: If the name is taken.
            ProviderError: If embedding fails during the first sync.
        """
        root = Path(root_path).expanduser().resolve()
        if not root.exists():
            raise ValidationError(
                f"Path does not exist: {root}",
                field="root_path",
                value=str(root),
                expected="existing file or directory",
            )

        vault = self.store.create_vault(name, str(root))
        result = self.engine.sync(vault.name, cancel_event=cancel_event, progress=progress)
        return vault, result

    def update_vault(
        self,
        name: str,
        cancel_event: threading.Event | None = None,
        progress: SyncProgress | None = None,
    ) -> SyncResult:
        """Re-sync a vault with its root path."""
        return self.engine.sync(name, cancel_event=cancel_event, progress=progress)

    def delete_vault(self, name: str) -> int:
        """Delete a vault and its chunks; returns the chunk count removed."""
        return self.store.delete_vault(name)

    def list_vaults(self, name_filter: str | None = None) -> list[VaultInfo]:
        """Vaults with their current document listing and chunk counts."""
        infos = []
        for vault in self.store.list_vaults(name_filter):
            root = Path(vault.root_path)
            files = [relative_name(path, root) for path in discover_files(root, self.config.sync.extensions)]
            infos.append(
                VaultInfo(
                    vault=vault,
                    files=files,
                    chunk_count=self.store.count_chunks(vault.id),
                )
            )
        return infos

    def is_stale(self, name: str) -> bool:
        """Whether the vault's documents changed since its last sync."""
        vault = self._require_vault(name)
        return self.staleness.is_stale(vault.id, vault.root_path)

    def open_chat(self, name: str) -> ChatSession:
        """Start a chat session bound to one vault.

        Raises:
            VaultNotFoundError: If the vault does not exist.
            ConfigurationError: If no chat provider was configured.
        """
        vault = self._require_vault(name)
        if self.chat_provider is None:
            raise ConfigurationError("No chat provider configured", key="chat")

        tool = RetrievalTool(self.store, self.embedder, vault.id, top_k=self.config.retrieval.top_k)
        orchestrator = ChatOrchestrator(
            self.chat_provider,
            tool,
            system_prompt=self.config.chat.system_prompt or DEFAULT_SYSTEM_PROMPT,
        )
        logger.debug(f'Chat session on "{vault.name}" with {self.chat_provider.name}')
        return ChatSession(vault, orchestrator)
