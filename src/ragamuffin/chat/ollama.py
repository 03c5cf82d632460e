"""Ollama native chat provider (/api/chat with tools)."""

import json
import logging
from typing import Any

import httpx

from ragamuffin.chat.base import ChatMessage, ChatProvider, ChatReply, ToolCall, ToolSpec
from ragamuffin.constants import (
    DEFAULT_CHAT_TEMPERATURE,
    DEFAULT_OLLAMA_BASE_URL,
    DEFAULT_PROVIDER_TIMEOUT,
    HTTP_STATUS_OK,
    HTTP_STATUS_TOO_MANY_REQUESTS,
)
from ragamuffin.exceptions import ChatError
from ragamuffin.retry import rate_limited_from_response

logger = logging.getLogger(__name__)


def _message_to_wire(message: ChatMessage) -> dict[str, Any]:
    wire: dict[str, Any] = {"role": message.role, "content": message.content or ""}
    if message.tool_calls:
        # Ollama expects decoded argument objects
        wire["tool_calls"] = [
            {
                "function": {
                    "name": call.name,
                    "arguments": (
                        json.loads(call.arguments) if isinstance(call.arguments, str) else call.arguments
                    ),
                }
            }
            for call in message.tool_calls
        ]
    if message.name and message.role == "tool":
        wire["tool_name"] = message.name
    return wire


class OllamaChatProvider(ChatProvider):
    """Chat provider using Ollama's native chat endpoint.

    Ollama does not assign ids to tool calls, so ids are generated per reply.
    """

    def __init__(
        self,
        model: str,
        base_url: str = DEFAULT_OLLAMA_BASE_URL,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        temperature: float = DEFAULT_CHAT_TEMPERATURE,
        client: httpx.Client | None = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self._client = client or httpx.Client(timeout=timeout)
        self._available: bool | None = None

    @property
    def name(self) -> str:
        return f"ollama:{self.model}"

    @property
    def is_available(self) -> bool:
        if self._available is None:
            try:
                response = self._client.get(f"{self.base_url}/api/tags")
                self._available = response.status_code == HTTP_STATUS_OK
            except httpx.RequestError as e:
                logger.debug(f"Ollama not available: {e}")
                self._available = False
        return self._available

    def complete(self, messages: list[ChatMessage], tools: list[ToolSpec]) -> ChatReply:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [_message_to_wire(m) for m in messages],
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        if tools:
            payload["tools"] = [tool.to_function_schema() for tool in tools]

        try:
            response = self._client.post(f"{self.base_url}/api/chat", json=payload)
        except httpx.RequestError as e:
            raise ChatError(f"Failed to connect to Ollama: {e}", provider=self.name, cause=e) from e

        if response.status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
            raise rate_limited_from_response(response, self.name)
        if response.status_code != HTTP_STATUS_OK:
            raise ChatError(
                f"Ollama returned status {response.status_code}: {response.text}",
                provider=self.name,
            )

        try:
            data = response.json()
            message = data.get("message")
            if message is None:
                raise ChatError(f"No message in Ollama response: {data}", provider=self.name)

            tool_calls = [
                ToolCall(
                    id=f"call_{i}",
                    name=raw.get("function", {}).get("name", ""),
                    arguments=raw.get("function", {}).get("arguments", {}),
                )
                for i, raw in enumerate(message.get("tool_calls") or [])
            ]
            text = message.get("content") or None
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ChatError(f"Malformed Ollama response: {e!r}", provider=self.name, cause=e) from e
        return ChatReply(text=text, tool_calls=tool_calls)

    def close(self) -> None:
        self._client.close()
