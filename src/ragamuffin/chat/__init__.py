"""Chat providers and the tool-calling orchestrator."""

from ragamuffin.chat.base import ChatMessage, ChatProvider, ChatReply, ToolCall, ToolSpec
from ragamuffin.chat.factory import RetryingChatProvider, create_chat_provider
from ragamuffin.chat.orchestrator import ChatOrchestrator, TurnResult, TurnState

__all__ = [
    "ChatMessage",
    "ChatProvider",
    "ChatReply",
    "ToolCall",
    "ToolSpec",
    "RetryingChatProvider",
    "create_chat_provider",
    "ChatOrchestrator",
    "TurnResult",
    "TurnState",
]
