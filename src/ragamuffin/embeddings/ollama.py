"""Ollama embedding provider."""

import logging

import httpx

from ragamuffin.constants import (
    DEFAULT_OLLAMA_BASE_URL,
    DEFAULT_PROVIDER_TIMEOUT,
    HTTP_STATUS_OK,
    HTTP_STATUS_TOO_MANY_REQUESTS,
)
from ragamuffin.embeddings.base import EmbeddingProvider, EmbeddingResult
from ragamuffin.exceptions import EmbeddingError
from ragamuffin.retry import rate_limited_from_response

logger = logging.getLogger(__name__)


class OllamaEmbedder(EmbeddingProvider):
    """Embedding provider using Ollama's local embedding models.

    Ollama's /api/embeddings route takes one prompt per request, so texts
    are embedded one call at a time.
    """

    def __init__(
        self,
        model: str,
        base_url: str = DEFAULT_OLLAMA_BASE_URL,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        dimensions: int | None = None,
        client: httpx.Client | None = None,
    ):
        """Initialize Ollama provider.

        Args:
            model: Ollama model name for embeddings.
            base_url: Ollama API base URL.
            timeout: Request timeout in seconds.
            dimensions: Embedding dimensions (auto-detected on first embed if not set).
            client: Optional preconfigured HTTP client.
        """
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._dimensions = dimensions or 0
        self._client = client or httpx.Client(timeout=timeout)
        self._available: bool | None = None

    @property
    def name(self) -> str:
        """Provider name."""
        return f"ollama:{self._model}"

    @property
    def dimensions(self) -> int:
        """Embedding dimensions for the configured model."""
        return self._dimensions

    def check_availability(self) -> tuple[bool, str]:
        """Check if Ollama is running and the model is pulled.

        Returns:
            Tuple of (is_available, reason_if_not).
        """
        try:
            response = self._client.get(f"{self._base_url}/api/tags")
        except httpx.ConnectError:
            return False, f"Cannot connect to Ollama at {self._base_url}"
        except httpx.TimeoutException:
            return False, f"Connection to Ollama timed out at {self._base_url}"
        except httpx.RequestError as e:
            return False, f"Error checking Ollama: {e}"

        if response.status_code != HTTP_STATUS_OK:
            return False, f"Ollama returned status {response.status_code}"

        try:
            names = [m.get("name", "") for m in response.json().get("models", [])]
        except (ValueError, AttributeError) as e:
            return False, f"Unexpected response from Ollama: {e}"
        if self._model in names or f"{self._model}:latest" in names:
            return True, "ok"
        available_str = ", ".join(names[:5]) if names else "none"
        return False, f"Model '{self._model}' not found in Ollama (available: {available_str})"

    @property
    def is_available(self) -> bool:
        """Check if Ollama is running and the model is available."""
        if self._available is None:
            self._available, reason = self.check_availability()
            if not self._available:
                logger.debug(reason)
        return self._available

    def embed(self, texts: list[str]) -> EmbeddingResult:
        """Generate embeddings using Ollama.

        Args:
            texts: List of texts to embed.

        Returns:
            EmbeddingResult with embeddings.

        Raises:
            EmbeddingError: If embedding fails.
            RateLimitedError: On HTTP 429.
        """
        embeddings: list[list[float]] = []
        for text in texts:
            try:
                response = self._client.post(
                    f"{self._base_url}/api/embeddings",
                    json={"model": self._model, "prompt": text},
                )
            except httpx.RequestError as e:
                raise EmbeddingError(
                    f"Failed to connect to Ollama: {e}",
                    provider=self.name,
                    cause=e,
                ) from e

            if response.status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
                raise rate_limited_from_response(response, self.name)
            if response.status_code != HTTP_STATUS_OK:
                raise EmbeddingError(
                    f"Ollama returned status {response.status_code}: {response.text}",
                    provider=self.name,
                )

            try:
                data = response.json()
                embedding = data.get("embedding")
                if not embedding:
                    raise EmbeddingError(
                        f"No embedding in Ollama response: {data}",
                        provider=self.name,
                    )
                embeddings.append([float(v) for v in embedding])
            except (ValueError, TypeError, AttributeError) as e:
                raise EmbeddingError(
                    f"Malformed Ollama response: {e!r}",
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
