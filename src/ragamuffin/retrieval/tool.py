"""The retrieve_chunks tool exposed to chat models."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ragamuffin.chat.base import ToolCall, ToolSpec
from ragamuffin.constants import (
    DEFAULT_TOP_K,
    RETRIEVE_TOOL_DESCRIPTION,
    RETRIEVE_TOOL_NAME,
    SNIPPET_SEPARATOR,
)
from ragamuffin.exceptions import InvalidToolCallError
from ragamuffin.retrieval.ranker import rank_chunks

if TYPE_CHECKING:
    from ragamuffin.embeddings.base import EmbeddingProvider
    from ragamuffin.store.core import ContentStore

logger = logging.getLogger(__name__)


class RetrieveChunksInput(BaseModel):
    """Arguments of a retrieve_chunks call."""

    query: str = Field(..., min_length=1, description="Text to search the vault for")


class RetrievalTool:
    """Embeds a query and returns the most similar chunks of one vault.

    Chunks are read from the store on every call, so a sync performed
    during a chat session is visible to the next retrieval.
    """

    def __init__(
        self,
        store: ContentStore,
        embedder: EmbeddingProvider,
        vault_id: int,
        top_k: int = DEFAULT_TOP_K,
    ):
        self.store = store
        self.embedder = embedder
        self.vault_id = vault_id
        self.top_k = top_k

    @property
    def name(self) -> str:
        return RETRIEVE_TOOL_NAME

    def spec(self) -> ToolSpec:
        """Tool descriptor advertised to the chat model."""
        schema = RetrieveChunksInput.model_json_schema()
        return ToolSpec(
            name=RETRIEVE_TOOL_NAME,
            description=RETRIEVE_TOOL_DESCRIPTION,
            parameters={
                "type": "object",
                "properties": schema["properties"],
                "required": schema.get("required", []),
            },
        )

    def parse_arguments(self, call: ToolCall) -> RetrieveChunksInput:
        """Validate a tool call at the boundary.

        Raises:
            InvalidToolCallError: On an unknown tool name, undecodable JSON
                or a missing/non-string ``query``.
        """
        if call.name != RETRIEVE_TOOL_NAME:
            raise InvalidToolCallError(
                f"Unknown tool: {call.name}",
                tool_name=call.name,
                arguments=call.arguments,
            )

        raw: Any = call.arguments
        if isinstance(raw, str):
            try:
                raw = json.loads(raw) if raw.strip() else {}
            except json.JSONDecodeError as e:
                raise InvalidToolCallError(
                    f"Tool arguments are not valid JSON: {e.msg}",
                    tool_name=call.name,
                    arguments=call.arguments,
                ) from e

        try:
            return RetrieveChunksInput.model_validate(raw)
        except PydanticValidationError as e:
            raise InvalidToolCallError(
                f"Invalid arguments for {call.name}: {e.errors()[0]['msg']}",
                tool_name=call.name,
                arguments=call.arguments,
            ) from e

    def run(self, query: str) -> list[str]:
        """Return the texts of the top-K chunks for the query, best first."""
        query_vector = self.embedder.embed_text(query)
        chunks = self.store.get_chunks(self.vault_id)
        ranked = rank_chunks(chunks, query_vector, self.top_k)
        logger.debug(f"Retrieved {len(ranked)}/{len(chunks)} chunks for query: {query[:80]}")
        return [chunk.text for chunk in ranked]

    def execute(self, call: ToolCall) -> str:
        """Validate and run a tool call, returning the joined snippets."""
        args = self.parse_arguments(call)
        return SNIPPET_SEPARATOR.join(self.run(args.query))
