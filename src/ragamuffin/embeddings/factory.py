"""Embedding provider construction from configuration."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ragamuffin.constants import PROVIDER_OLLAMA, PROVIDER_OPENAI
from ragamuffin.embeddings.base import EmbeddingProvider, EmbeddingResult
from ragamuffin.exceptions import ValidationError
from ragamuffin.retry import call_with_retry

if TYPE_CHECKING:
    from ragamuffin.config import EmbeddingConfig, RetryConfig

logger = logging.getLogger(__name__)


class RetryingEmbedder(EmbeddingProvider):
    """Decorator that retries rate-limited calls of a wrapped provider."""

    def __init__(
        self,
        inner: EmbeddingProvider,
        policy: RetryConfig,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._inner = inner
        self._policy = policy
        self._sleep = sleep

    @property
    def inner(self) -> EmbeddingProvider:
        return self._inner

    @property
    def name(self) -> str:
        return self._inner.name

    @property
    def dimensions(self) -> int:
        return self._inner.dimensions

    @property
    def is_available(self) -> bool:
        return self._inner.is_available

    def check_availability(self) -> tuple[bool, str]:
        return self._inner.check_availability()

    def embed(self, texts: list[str]) -> EmbeddingResult:
        return call_with_retry(lambda: self._inner.embed(texts), self._policy, self._sleep)

    def close(self) -> None:
        self._inner.close()


def create_embedder(config: EmbeddingConfig, retry: RetryConfig) -> EmbeddingProvider:
    """Create an embedding provider from configuration.

    Args:
        config: Embedding configuration.
        retry: Rate-limit retry policy.

    Returns:
        Configured provider wrapped in a RetryingEmbedder.

    Raises:
        ValidationError: If the provider type is not supported.
    """
    provider_type = config.provider.lower()

    provider: EmbeddingProvider
    if provider_type == PROVIDER_OPENAI:
        from ragamuffin.embeddings.openai_compat import OpenAICompatEmbedder

        provider = OpenAICompatEmbedder(
            model=config.model,
            base_url=config.base_url,
            api_key=config.get_api_key(),
            dimensions=config.dimensions,
            timeout=config.timeout,
        )
    elif provider_type == PROVIDER_OLLAMA:
        from ragamuffin.embeddings.ollama import OllamaEmbedder

        provider = OllamaEmbedder(
            model=config.model,
            base_url=config.base_url,
            timeout=config.timeout,
            dimensions=config.dimensions,
        )
    else:
        raise ValidationError(
            f"Unknown embedding provider type: {provider_type}",
            field="provider",
            value=provider_type,
        )

    logger.debug(f"Embedding provider: {provider.name} at {config.base_url}")
    return RetryingEmbedder(provider, retry)
