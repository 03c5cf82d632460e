"""Single-turn chat driver with one retrieval round-trip.

State machine per user turn::

    AWAITING_USER_INPUT -> MODEL_CALLED -> RESPONSE_READY
    AWAITING_USER_INPUT -> MODEL_CALLED -> TOOL_REQUESTED -> TOOL_EXECUTED
                        -> MODEL_CALLED -> RESPONSE_READY

A model that asks for a tool again after the tool result is a protocol
violation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from ragamuffin.chat.base import ChatMessage, ChatProvider, ChatReply
from ragamuffin.constants import DEFAULT_SYSTEM_PROMPT
from ragamuffin.exceptions import ToolProtocolError

if TYPE_CHECKING:
    from ragamuffin.retrieval.tool import RetrievalTool

logger = logging.getLogger(__name__)


class TurnState(Enum):
    """States of one conversational turn."""

    AWAITING_USER_INPUT = "awaiting_user_input"
    MODEL_CALLED = "model_called"
    TOOL_REQUESTED = "tool_requested"
    TOOL_EXECUTED = "tool_executed"
    RESPONSE_READY = "response_ready"


@dataclass
class TurnResult:
    """Outcome of a completed turn.

    Attributes:
        text: The assistant's final answer.
        messages: Full history including this turn, to pass to the next one.
        tool_used: Whether the turn performed a retrieval.
    """

    text: str
    messages: list[ChatMessage] = field(default_factory=list)
    tool_used: bool = False


class ChatOrchestrator:
    """Drives user turns against a chat provider and the retrieval tool."""

    def __init__(
        self,
        provider: ChatProvider,
        tool: RetrievalTool,
        system_prompt: str | None = DEFAULT_SYSTEM_PROMPT,
    ):
        self.provider = provider
        self.tool = tool
        self.system_prompt = system_prompt
        self.state = TurnState.AWAITING_USER_INPUT

    def new_history(self) -> list[ChatMessage]:
        """Initial history for a session, seeded with the system prompt if any."""
        if self.system_prompt:
            return [ChatMessage.system(self.system_prompt)]
        return []

    def _transition(self, state: TurnState) -> None:
        logger.debug(f"Turn state: {self.state.value} -> {state.value}")
        self.state = state

    def _call_model(self, history: list[ChatMessage]) -> ChatReply:
        self._transition(TurnState.MODEL_CALLED)
        return self.provider.complete(history, [self.tool.spec()])

    def run_turn(self, user_input: str, history: list[ChatMessage]) -> TurnResult:
        """Run one user turn to completion.

        The passed history is not mutated; the returned result carries the
        extended copy.

        Args:
            user_input: The user's message.
            history: Messages from previous turns.

        Returns:
            TurnResult with the answer and updated history.

        Raises:
            ProviderError: If a chat or embedding call fails.
            InvalidToolCallError: If the model's tool call is malformed.
            ToolProtocolError: If the model requests a second tool round-trip.
        """
        messages = list(history)
        messages.append(ChatMessage.user(user_input))
        self.state = TurnState.AWAITING_USER_INPUT

        try:
            reply = self._call_model(messages)
            tool_used = False

            if reply.wants_tool:
                self._transition(TurnState.TOOL_REQUESTED)
                messages.append(ChatMessage.assistant(reply.text, reply.tool_calls))
                for call in reply.tool_calls:
                    result = self.tool.execute(call)
                    messages.append(ChatMessage.tool(call, result))
                self._transition(TurnState.TOOL_EXECUTED)
                tool_used = True

                reply = self._call_model(messages)
                if reply.wants_tool:
                    raise ToolProtocolError(
                        "Model requested a second tool call in the same turn",
                        tool_name=reply.tool_calls[0].name,
                    )

            text = reply.text or ""
            messages.append(ChatMessage.assistant(text))
            self._transition(TurnState.RESPONSE_READY)
            return TurnResult(text=text, messages=messages, tool_used=tool_used)
        finally:
            if self.state is not TurnState.RESPONSE_READY:
                # Failed turn: the caller may resubmit with the old history
                self.state = TurnState.AWAITING_USER_INPUT
