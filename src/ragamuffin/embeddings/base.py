"""Base embedding provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ragamuffin.exceptions import EmbeddingError


@dataclass
class EmbeddingResult:
    """Result from embedding operation."""

    embeddings: list[list[float]]
    model: str
    provider: str
    dimensions: int


class EmbeddingProvider(ABC):
    """Abstract base class for embedding providers.

    Embedding providers transform text into dense vector representations
    suitable for cosine similarity ranking. One provider instance always
    produces vectors of the same dimensionality.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging and identification."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Dimensionality of the embedding vectors (0 until first detected)."""
        ...

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider is currently reachable.

        Returns:
            True if the provider can be used, False otherwise.
        """
        ...

    @abstractmethod
    def embed(self, texts: list[str]) -> EmbeddingResult:
        """Generate embeddings for a list of texts.

        Args:
            texts: List of text strings to embed.

        Returns:
            EmbeddingResult containing one embedding per input text, in order.

        Raises:
            EmbeddingError: If embedding generation fails.
            RateLimitedError: If the provider rejected the call for rate limiting.
        """
        ...

    def check_availability(self) -> tuple[bool, str]:
        """Check availability with a human-readable reason.

        Returns:
            Tuple of (is_available, reason_if_not).
        """
        if self.is_available:
            return True, "ok"
        return False, f"Embedding provider {self.name} is not reachable"

    def embed_text(self, text: str) -> list[float]:
        """Generate the embedding for a single text.

        This is the per-chunk call the sync engine and retrieval tool use.

        Args:
            text: The text to embed.

        Returns:
            A single embedding vector.
        """
        result = self.embed([text])
        if len(result.embeddings) != 1:
            raise EmbeddingError(
                f"Expected 1 embedding, got {len(result.embeddings)}",
                provider=self.name,
            )
        return result.embeddings[0]

    def close(self) -> None:
        """Release any held resources."""
