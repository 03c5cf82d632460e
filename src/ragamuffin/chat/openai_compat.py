"""OpenAI-compatible chat completions provider."""

import json
import logging
from typing import Any

import httpx

from ragamuffin.chat.base import ChatMessage, ChatProvider, ChatReply, ToolCall, ToolSpec
from ragamuffin.constants import (
    DEFAULT_CHAT_TEMPERATURE,
    DEFAULT_OPENAI_BASE_URL,
    DEFAULT_PROVIDER_TIMEOUT,
    HTTP_STATUS_OK,
    HTTP_STATUS_TOO_MANY_REQUESTS,
)
from ragamuffin.exceptions import ChatError
from ragamuffin.retry import rate_limited_from_response

logger = logging.getLogger(__name__)


def _message_to_wire(message: ChatMessage) -> dict[str, Any]:
    wire: dict[str, Any] = {"role": message.role, "content": message.content}
    if message.tool_calls:
        wire["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {
                    "name": call.name,
                    "arguments": (
                        call.arguments if isinstance(call.arguments, str) else json.dumps(call.arguments)
                    ),
                },
            }
            for call in message.tool_calls
        ]
    if message.tool_call_id:
        wire["tool_call_id"] = message.tool_call_id
    return wire


class OpenAICompatChatProvider(ChatProvider):
    """Chat provider for OpenAI's /chat/completions API and compatible servers."""

    def __init__(
        self,
        model: str,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
        api_key: str | None = None,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        temperature: float = DEFAULT_CHAT_TEMPERATURE,
        client: httpx.Client | None = None,
    ):
        """Initialize the provider.

        Args:
            model: Chat model name.
            base_url: API base URL including /v1.
            api_key: Optional API key.
            timeout: Request timeout in seconds.
            temperature: Sampling temperature.
            client: Optional preconfigured HTTP client.
        """
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.temperature = temperature
        self._client = client or httpx.Client(timeout=timeout)
        self._available: bool | None = None

    @property
    def name(self) -> str:
        return f"openai:{self.model}"

    def _get_headers(self) -> dict[str, str]:
        """Get request headers with optional auth."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @property
    def is_available(self) -> bool:
        if self._available is None:
            try:
                response = self._client.get(f"{self.base_url}/models", headers=self._get_headers())
                self._available = response.status_code == HTTP_STATUS_OK
            except httpx.RequestError as e:
                logger.debug(f"API not available: {e}")
                self._available = False
        return self._available

    def complete(self, messages: list[ChatMessage], tools: list[ToolSpec]) -> ChatReply:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [_message_to_wire(m) for m in messages],
            "temperature": self.temperature,
        }
        if tools:
            payload["tools"] = [tool.to_function_schema() for tool in tools]

        try:
            response = self._client.post(
                f"{self.base_url}/chat/completions",
                headers=self._get_headers(),
                json=payload,
            )
        except httpx.RequestError as e:
            raise ChatError(f"Failed to connect to API: {e}", provider=self.name, cause=e) from e

        if response.status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
            raise rate_limited_from_response(response, self.name)
        if response.status_code != HTTP_STATUS_OK:
            raise ChatError(
                f"API returned status {response.status_code}: {response.text}",
                provider=self.name,
            )

        try:
            data = response.json()
            choices = data.get("choices") or []
            if not choices:
                raise ChatError(f"No choices in API response: {data}", provider=self.name)

            message = choices[0].get("message") or {}
            tool_calls = [
                ToolCall(
                    id=raw.get("id", f"call_{i}"),
                    name=raw.get("function", {}).get("name", ""),
                    arguments=raw.get("function", {}).get("arguments", ""),
                )
                for i, raw in enumerate(message.get("tool_calls") or [])
            ]
            text = message.get("content")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ChatError(f"Malformed chat response: {e!r}", provider=self.name, cause=e) from e
        if tool_calls:
            logger.debug(f"Model requested tools: {[c.name for c in tool_calls]}")
        return ChatReply(text=text, tool_calls=tool_calls)

    def close(self) -> None:
        self._client.close()
