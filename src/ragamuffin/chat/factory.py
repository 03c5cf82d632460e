"""Chat provider construction from configuration."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ragamuffin.chat.base import ChatMessage, ChatProvider, ChatReply, ToolSpec
from ragamuffin.constants import PROVIDER_OLLAMA, PROVIDER_OPENAI
from ragamuffin.exceptions import ValidationError
from ragamuffin.retry import call_with_retry

if TYPE_CHECKING:
    from ragamuffin.config import ChatConfig, RetryConfig

logger = logging.getLogger(__name__)


class RetryingChatProvider(ChatProvider):
    """Decorator that retries rate-limited calls of a wrapped chat provider."""

    def __init__(
        self,
        inner: ChatProvider,
        policy: RetryConfig,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._inner = inner
        self._policy = policy
        self._sleep = sleep

    @property
    def inner(self) -> ChatProvider:
        return self._inner

    @property
    def name(self) -> str:
        return self._inner.name

    @property
    def is_available(self) -> bool:
        return self._inner.is_available

    def check_availability(self) -> tuple[bool, str]:
        return self._inner.check_availability()

    def complete(self, messages: list[ChatMessage], tools: list[ToolSpec]) -> ChatReply:
        return call_with_retry(lambda: self._inner.complete(messages, tools), self._policy, self._sleep)

    def close(self) -> None:
        self._inner.close()


def create_chat_provider(config: ChatConfig, retry: RetryConfig) -> ChatProvider:
    """Create a chat provider from configuration.

    Raises:
        ValidationError: If the provider type is not supported.
    """
    provider_type = config.provider.lower()

    provider: ChatProvider
    if provider_type == PROVIDER_OPENAI:
        from ragamuffin.chat.openai_compat import OpenAICompatChatProvider

        provider = OpenAICompatChatProvider(
            model=config.model,
            base_url=config.base_url,
            api_key=config.get_api_key(),
            timeout=config.timeout,
            temperature=config.temperature,
        )
    elif provider_type == PROVIDER_OLLAMA:
        from ragamuffin.chat.ollama import OllamaChatProvider

        provider = OllamaChatProvider(
            model=config.model,
            base_url=config.base_url,
            timeout=config.timeout,
            temperature=config.temperature,
        )
    else:
        raise ValidationError(
            f"Unknown chat provider type: {provider_type}",
            field="provider",
            value=provider_type,
        )

    logger.debug(f"Chat provider: {provider.name} at {config.base_url}")
    return RetryingChatProvider(provider, retry)
