"""Tests for the retrieve_chunks tool."""

from unittest.mock import MagicMock

import pytest

from ragamuffin.chat.base import ToolCall
from ragamuffin.constants import RETRIEVE_TOOL_NAME, SNIPPET_SEPARATOR
from ragamuffin.embeddings.base import EmbeddingProvider
from ragamuffin.exceptions import DimensionMismatchError, InvalidToolCallError
from ragamuffin.retrieval.tool import RetrievalTool, RetrieveChunksInput
from ragamuffin.store.core import ContentStore


@pytest.fixture()
def query_embedder() -> MagicMock:
    mock = MagicMock(spec=EmbeddingProvider)
    mock.embed_text.return_value = [1.0, 0.0, 0.0]
    return mock


@pytest.fixture()
def tool(store: ContentStore, query_embedder: MagicMock) -> RetrievalTool:
    vault = store.create_vault("notes", "/notes")
    store.add_chunk(vault.id, "Closest.", [1.0, 0.0, 0.0])
    store.add_chunk(vault.id, "Close.", [0.8, 0.6, 0.0])
    store.add_chunk(vault.id, "Far.", [0.0, 0.0, 1.0])
    return RetrievalTool(store, query_embedder, vault.id, top_k=2)


def _call(arguments, name: str = RETRIEVE_TOOL_NAME) -> ToolCall:
    return ToolCall(id="call_1", name=name, arguments=arguments)


class TestToolSpec:
    """Test the advertised tool descriptor."""

    def test_spec_requires_query_string(self, tool: RetrievalTool):
        spec = tool.spec()

        assert spec.name == "retrieve_chunks"
        assert spec.parameters["type"] == "object"
        assert spec.parameters["required"] == ["query"]
        assert spec.parameters["properties"]["query"]["type"] == "string"

    def test_function_schema(self, tool: RetrievalTool):
        schema = tool.spec().to_function_schema()

        assert schema["type"] == "function"
        assert schema["function"]["name"] == "retrieve_chunks"


class TestArgumentValidation:
    """Test parse_arguments() at the tool boundary."""

    def test_json_string_arguments(self, tool: RetrievalTool):
        assert tool.parse_arguments(_call('{"query": "alpha"}')) == RetrieveChunksInput(query="alpha")

    def test_dict_arguments(self, tool: RetrievalTool):
        assert tool.parse_arguments(_call({"query": "alpha"})).query == "alpha"

    @pytest.mark.parametrize(
        "arguments",
        ["{}", "", {"q": "alpha"}, {"query": 42}, {"query": ""}, "not json", "[1, 2]"],
    )
    def test_invalid_arguments_raise(self, tool: RetrievalTool, arguments):
        with pytest.raises(InvalidToolCallError) as exc_info:
            tool.parse_arguments(_call(arguments))

        assert exc_info.value.tool_name == RETRIEVE_TOOL_NAME

    def test_unknown_tool_raises(self, tool: RetrievalTool):
        with pytest.raises(InvalidToolCallError, match="Unknown tool"):
            tool.parse_arguments(_call({"query": "x"}, name="delete_everything"))


class TestExecute:
    """Test retrieval through execute()."""

    def test_returns_top_k_joined_best_first(self, tool: RetrievalTool, query_embedder: MagicMock):
        result = tool.execute(_call('{"query": "what is closest?"}'))

        assert result == f"Closest.{SNIPPET_SEPARATOR}Close."
        query_embedder.embed_text.assert_called_once_with("what is closest?")

    def test_empty_vault_returns_empty_string(self, store: ContentStore, query_embedder: MagicMock):
        vault = store.create_vault("empty", "/empty")

        assert RetrievalTool(store, query_embedder, vault.id).execute(_call({"query": "x"})) == ""

    def test_sees_chunks_added_after_construction(self, store: ContentStore, tool: RetrievalTool):
        store.add_chunk(tool.vault_id, "Newest and exact.", [1.0, 0.0, 0.0])

        assert "Newest and exact." in tool.run("q")

    def test_dimension_mismatch_propagates(self, tool: RetrievalTool, query_embedder: MagicMock):
        query_embedder.embed_text.return_value = [1.0, 0.0]

        with pytest.raises(DimensionMismatchError):
            tool.execute(_call({"query": "x"}))
