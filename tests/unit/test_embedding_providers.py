"""Tests for the HTTP embedding providers.

Requests are served by httpx.MockTransport so no network is touched.
"""

import json

import httpx
import pytest

from ragamuffin.config import EmbeddingConfig, RetryConfig
from ragamuffin.embeddings.factory import RetryingEmbedder, create_embedder
from ragamuffin.embeddings.ollama import OllamaEmbedder
from ragamuffin.embeddings.openai_compat import OpenAICompatEmbedder
from ragamuffin.exceptions import EmbeddingError, RateLimitedError, ValidationError


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


# =============================================================================
# OpenAI-compatible
# =============================================================================


class TestOpenAICompatEmbedder:
    """Test OpenAICompatEmbedder against a mocked /embeddings route."""

    def test_embed_sends_model_and_input(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"data": [{"index": 0, "embedding": [0.1, 0.2]}, {"index": 1, "embedding": [0.3, 0.4]}]},
            )

        embedder = OpenAICompatEmbedder(
            "text-embedding-3-small", base_url="https://api.example.com/v1/", api_key="sk-test", client=_client(handler)
        )

        result = embedder.embed(["a", "b"])

        assert seen["url"] == "https://api.example.com/v1/embeddings"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"] == {"model": "text-embedding-3-small", "input": ["a", "b"]}
        assert result.embeddings == [[0.1, 0.2], [0.3, 0.4]]
        assert embedder.dimensions == 2

    def test_results_sorted_by_index(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"data": [{"index": 1, "embedding": [2.0]}, {"index": 0, "embedding": [1.0]}]}
            )

        embedder = OpenAICompatEmbedder("m", client=_client(handler))

        assert embedder.embed(["first", "second"]).embeddings == [[1.0], [2.0]]

    def test_empty_input_makes_no_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        assert OpenAICompatEmbedder("m", client=_client(handler)).embed([]).embeddings == []

    def test_no_auth_header_without_key(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"data": [{"index": 0, "embedding": [1.0]}]})

        OpenAICompatEmbedder("m", client=_client(handler)).embed(["x"])

        assert seen["auth"] is None

    def test_rate_limited_carries_retry_after(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, headers={"Retry-After": "7"}, text="slow down")

        with pytest.raises(RateLimitedError) as exc_info:
            OpenAICompatEmbedder("m", client=_client(handler)).embed(["x"])

        assert exc_info.value.retry_after == 7.0
        assert exc_info.value.provider == "openai:m"

    def test_server_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        with pytest.raises(EmbeddingError, match="500"):
            OpenAICompatEmbedder("m", client=_client(handler)).embed(["x"])

    def test_non_json_body_raises_embedding_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        with pytest.raises(EmbeddingError) as exc_info:
            OpenAICompatEmbedder("m", client=_client(handler)).embed(["x"])

        assert isinstance(exc_info.value.cause, ValueError)

    def test_item_without_embedding_raises_embedding_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [{"index": 0}]})

        with pytest.raises(EmbeddingError, match="Malformed") as exc_info:
            OpenAICompatEmbedder("m", client=_client(handler)).embed_text("x")

        assert isinstance(exc_info.value.cause, KeyError)

    def test_count_mismatch_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [{"index": 0, "embedding": [1.0]}]})

        with pytest.raises(EmbeddingError, match="Expected 2"):
            OpenAICompatEmbedder("m", client=_client(handler)).embed(["a", "b"])

    def test_connection_error_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(EmbeddingError) as exc_info:
            OpenAICompatEmbedder("m", client=_client(handler)).embed(["x"])

        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    def test_embed_text_returns_single_vector(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [{"index": 0, "embedding": [0.5, 0.5]}]})

        assert OpenAICompatEmbedder("m", client=_client(handler)).embed_text("x") == [0.5, 0.5]

    def test_is_available(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/models")
            return httpx.Response(200, json={"data": []})

        assert OpenAICompatEmbedder("m", client=_client(handler)).is_available is True

    def test_check_availability_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        embedder = OpenAICompatEmbedder("m", client=_client(handler))

        assert embedder.check_availability() == (False, "Embedding provider openai:m is not reachable")


# =============================================================================
# Ollama
# =============================================================================


class TestOllamaEmbedder:
    """Test OllamaEmbedder against mocked /api routes."""

    def test_one_request_per_text(self):
        prompts = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            prompts.append(body["prompt"])
            assert body["model"] == "nomic-embed-text"
            return httpx.Response(200, json={"embedding": [float(len(body["prompt"])), 1.0]})

        embedder = OllamaEmbedder("nomic-embed-text", client=_client(handler))

        result = embedder.embed(["a", "bbb"])

        assert prompts == ["a", "bbb"]
        assert result.embeddings == [[1.0, 1.0], [3.0, 1.0]]
        assert embedder.dimensions == 2

    def test_non_json_body_raises_embedding_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="not json")

        with pytest.raises(EmbeddingError, match="Malformed"):
            OllamaEmbedder("m", client=_client(handler)).embed(["x"])

    def test_missing_embedding_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": "model not loaded"})

        with pytest.raises(EmbeddingError, match="No embedding"):
            OllamaEmbedder("m", client=_client(handler)).embed(["x"])

    def test_rate_limited_from_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, text="busy, try again in 250ms")

        with pytest.raises(RateLimitedError) as exc_info:
            OllamaEmbedder("m", client=_client(handler)).embed(["x"])

        assert exc_info.value.retry_after == pytest.approx(0.25)

    def test_check_availability_model_present(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"models": [{"name": "nomic-embed-text:latest"}]})

        assert OllamaEmbedder("nomic-embed-text", client=_client(handler)).check_availability() == (True, "ok")

    def test_check_availability_model_missing(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"models": [{"name": "other"}]})

        available, reason = OllamaEmbedder("nomic-embed-text", client=_client(handler)).check_availability()

        assert available is False
        assert "not found" in reason

    def test_check_availability_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        available, reason = OllamaEmbedder("m", client=_client(handler)).check_availability()

        assert available is False
        assert "Cannot connect" in reason


# =============================================================================
# Factory
# =============================================================================


class TestCreateEmbedder:
    """Test create_embedder()."""

    def test_openai_wrapped_in_retry(self):
        embedder = create_embedder(EmbeddingConfig(provider="openai", api_key="sk"), RetryConfig())

        assert isinstance(embedder, RetryingEmbedder)
        assert isinstance(embedder.inner, OpenAICompatEmbedder)
        assert embedder.name == "openai:text-embedding-3-small"

    def test_ollama(self):
        embedder = create_embedder(EmbeddingConfig(provider="ollama"), RetryConfig())

        assert isinstance(embedder.inner, OllamaEmbedder)

    def test_unknown_provider_rejected(self):
        config = EmbeddingConfig()
        config.provider = "mystery"

        with pytest.raises(ValidationError):
            create_embedder(config, RetryConfig())
