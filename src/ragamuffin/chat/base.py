"""Chat provider interface and conversation message types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_TOOL = "tool"


@dataclass
class ToolCall:
    """A model's request to invoke a tool.

    Attributes:
        id: Provider-assigned call id, echoed back in the tool result.
        name: Requested tool name.
        arguments: Raw arguments, either a JSON string (OpenAI) or an
            already-decoded object (Ollama).
    """

    id: str
    name: str
    arguments: str | dict[str, Any]


@dataclass
class ChatMessage:
    """One role-tagged entry in a conversation history."""

    role: str
    content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_call_id: str | None = None
    name: str | None = None

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role=ROLE_SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=ROLE_USER, content=content)

    @classmethod
    def assistant(cls, content: str | None, tool_calls: list[ToolCall] | None = None) -> "ChatMessage":
        return cls(role=ROLE_ASSISTANT, content=content, tool_calls=list(tool_calls or []))

    @classmethod
    def tool(cls, call: ToolCall, content: str) -> "ChatMessage":
        return cls(role=ROLE_TOOL, content=content, tool_call_id=call.id, name=call.name)


@dataclass(frozen=True)
class ToolSpec:
    """Descriptor of a callable tool advertised to the model."""

    name: str
    description: str
    parameters: dict[str, Any]

    def to_function_schema(self) -> dict[str, Any]:
        """Render in the function-tool format shared by OpenAI and Ollama."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass
class ChatReply:
    """A model reply: either final text or one or more tool-call requests."""

    text: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)

    @property
    def wants_tool(self) -> bool:
        return bool(self.tool_calls)


class ChatProvider(ABC):
    """Abstract base class for chat completion providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging and identification."""
        ...

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider endpoint is reachable."""
        ...

    def check_availability(self) -> tuple[bool, str]:
        """Check availability with a human-readable reason."""
        if self.is_available:
            return True, "ok"
        return False, f"Chat provider {self.name} is not reachable"

    @abstractmethod
    def complete(self, messages: list[ChatMessage], tools: list[ToolSpec]) -> ChatReply:
        """Send the history and tool descriptors; return the model's reply.

        Args:
            messages: Full conversation history, oldest first.
            tools: Tools the model may request.

        Returns:
            ChatReply carrying text or tool calls.

        Raises:
            ChatError: If the call fails.
            RateLimitedError: If the provider rejected the call for rate limiting.
        """
        ...

    def close(self) -> None:
        """Release any held resources."""
