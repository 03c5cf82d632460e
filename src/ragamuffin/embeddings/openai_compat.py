"""OpenAI-compatible embedding provider.

Works with the OpenAI API and any endpoint implementing its embeddings
route (vLLM, LocalAI, LM Studio, Ollama's /v1 endpoint).
"""

import logging

import httpx

from ragamuffin.constants import (
    DEFAULT_OPENAI_BASE_URL,
    DEFAULT_PROVIDER_TIMEOUT,
    HTTP_STATUS_OK,
    HTTP_STATUS_TOO_MANY_REQUESTS,
)
from ragamuffin.embeddings.base import EmbeddingProvider, EmbeddingResult
from ragamuffin.exceptions import EmbeddingError
from ragamuffin.retry import rate_limited_from_response

logger = logging.getLogger(__name__)


class OpenAICompatEmbedder(EmbeddingProvider):
    """Embedding provider for OpenAI-compatible APIs.

    Attributes:
        model: The model name to use for embeddings.
        base_url: The API base URL including the version (e.g. https://api.openai.com/v1).
        api_key: Optional API key for authentication.
    """

    def __init__(
        self,
        model: str,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
        api_key: str | None = None,
        dimensions: int | None = None,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        client: httpx.Client | None = None,
    ):
        """Initialize OpenAI-compatible provider.

        Args:
            model: Model name for embeddings.
            base_url: API base URL (should end with /v1).
            api_key: Optional API key.
            dimensions: Embedding dimensions (auto-detected if not specified).
            timeout: Request timeout in seconds.
            client: Optional preconfigured HTTP client.
        """
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key or ""
        self._dimensions = dimensions or 0
        self._client = client or httpx.Client(timeout=timeout)
        self._available: bool | None = None

    @property
    def name(self) -> str:
        """Provider name."""
        return f"openai:{self._model}"

    @property
    def dimensions(self) -> int:
        """Embedding dimensions for the configured model."""
        return self._dimensions

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    @property
    def is_available(self) -> bool:
        """Check if the API endpoint is available."""
        if self._available is not None:
            return self._available

        try:
            response = self._client.get(f"{self._base_url}/models", headers=self._headers())
            self._available = response.status_code == HTTP_STATUS_OK
        except httpx.RequestError:
            self._available = False
        return self._available

    def embed(self, texts: list[str]) -> EmbeddingResult:
        """Generate embeddings using the OpenAI embeddings API.

        Args:
            texts: List of texts to embed.

        Returns:
            EmbeddingResult with embeddings.

        Raises:
            EmbeddingError: If embedding fails.
            RateLimitedError: On HTTP 429.
        """
        if not texts:
            return EmbeddingResult(
                embeddings=[],
                model=self._model,
                provider=self.name,
                dimensions=self._dimensions,
            )

        try:
            response = self._client.post(
                f"{self._base_url}/embeddings",
                headers=self._headers(),
                json={"model": self._model, "input": texts},
            )
        except httpx.RequestError as e:
            raise EmbeddingError(
                f"Failed to connect to API: {e}",
                provider=self.name,
                cause=e,
            ) from e

        if response.status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
            raise rate_limited_from_response(response, self.name)
        if response.status_code != HTTP_STATUS_OK:
            raise EmbeddingError(
                f"API returned status {response.status_code}: {response.text}",
                provider=self.name,
            )

        try:
            data = response.json()
            embeddings_data = list(data.get("data", []))
            if len(embeddings_data) != len(texts):
                raise EmbeddingError(
                    f"Expected {len(texts)} embeddings, API returned {len(embeddings_data)}",
                    provider=self.name,
                )

            # Sort by index to ensure correct order
            embeddings_data.sort(key=lambda x: x.get("index", 0))
            embeddings = [[float(v) for v in item["embedding"]] for item in embeddings_data]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise EmbeddingError(
                f"Malformed embeddings response: {e!r}",
                provider=self.name,
                cause=e,
            ) from e

        if embeddings and len(embeddings[0]) != self._dimensions:
            self._dimensions = len(embeddings[0])
            logger.debug(f"Detected embedding dimensions: {self._dimensions}")

        return EmbeddingResult(
            embeddings=embeddings,
            model=self._model,
            provider=self.name,
            dimensions=self._dimensions,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()
