"""Custom exceptions for ragamuffin.

All exceptions inherit from RagamuffinError, allowing callers to catch every
ragamuffin failure with a single except clause if desired.

Exception hierarchy:
    RagamuffinError (base)
    ├── ConfigurationError
    │   └── ValidationError
    ├── VaultError
    │   ├── VaultExistsError
    │   └── VaultNotFoundError
    ├── DimensionMismatchError
    ├── ProviderError
    │   ├── EmbeddingError
    │   ├── ChatError
    │   └── RateLimitedError
    └── ToolCallError
        ├── InvalidToolCallError
        └── ToolProtocolError
"""

from pathlib import Path
from typing import Any


class RagamuffinError(Exception):
    """Base exception for all ragamuffin errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize ragamuffin error.

        Args:
            message: Error description.
            details: Optional dictionary with additional context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RagamuffinError):
    """Raised when configuration is invalid or cannot be loaded."""

    def __init__(
        self,
        message: str,
        config_file: Path | None = None,
        key: str | None = None,
    ):
        """Initialize configuration error.

        Args:
            message: Error description.
            config_file: Path to the problematic config file.
            key: The configuration key that caused the error.
        """
        details = {}
        if config_file:
            details["config_file"] = str(config_file)
        if key:
            details["key"] = key
        super().__init__(message, details)
        self.config_file = config_file
        self.key = key


class ValidationError(ConfigurationError):
    """Raised when configuration values fail validation.

    Examples:
        - Unknown provider name
        - Invalid URL format
        - Out-of-range numeric values
    """

    def __init__(
        self,
        message: str,
        field: str,
        value: Any = None,
        expected: str | None = None,
    ):
        """Initialize validation error.

        Args:
            message: Error description.
            field: The field that failed validation.
            value: The invalid value (truncated if too long).
            expected: Description of expected value format.
        """
        super().__init__(message)
        self.details["field"] = field
        if value is not None:
            value_str = str(value)
            self.details["value"] = value_str[:100] + "..." if len(value_str) > 100 else value_str
        if expected:
            self.details["expected"] = expected
        self.field = field
        self.value = value
        self.expected = expected


# =============================================================================
# Vault Errors
# =============================================================================


class VaultError(RagamuffinError):
    """Base class for vault lookup and lifecycle errors."""

    def __init__(self, message: str, vault_name: str | None = None):
        details = {}
        if vault_name:
            details["vault"] = vault_name
        super().__init__(message, details)
        self.vault_name = vault_name


class VaultExistsError(VaultError):
    """Raised when creating a vault whose name is already taken."""

    def __init__(self, vault_name: str):
        super().__init__(f'Vault "{vault_name}" already exists', vault_name=None)
        self.vault_name = vault_name


class VaultNotFoundError(VaultError):
    """Raised when operating on a vault that does not exist."""

    def __init__(self, vault_name: str):
        super().__init__(f'No vault named "{vault_name}"', vault_name=None)
        self.vault_name = vault_name


# =============================================================================
# Vector Errors
# =============================================================================


class DimensionMismatchError(RagamuffinError):
    """Raised when comparing vectors of unequal dimensionality.

    This typically occurs when a vault is reused with a different
    embedding provider or model than the one that built it.
    """

    def __init__(self, expected_dims: int, actual_dims: int, chunk_id: int | None = None):
        """Initialize dimension mismatch error.

        Args:
            expected_dims: Dimensions of the query vector.
            actual_dims: Dimensions of the stored vector.
            chunk_id: The stored chunk whose vector did not match, if known.
        """
        details: dict[str, Any] = {"expected_dims": expected_dims, "actual_dims": actual_dims}
        if chunk_id is not None:
            details["chunk_id"] = chunk_id
        super().__init__("Embedding dimensions do not match", details)
        self.expected_dims = expected_dims
        self.actual_dims = actual_dims
        self.chunk_id = chunk_id


# =============================================================================
# Provider Errors
# =============================================================================


class ProviderError(RagamuffinError):
    """Raised when an embedding or chat provider call fails."""

    def __init__(self, message: str, provider: str, cause: Exception | None = None):
        """Initialize provider error.

        Args:
            message: Error description.
            provider: Name of the provider that failed.
            cause: Optional underlying exception.
        """
        super().__init__(message, {"provider": provider})
        self.provider = provider
        self.cause = cause


class EmbeddingError(ProviderError):
    """Raised when embedding generation fails."""


class ChatError(ProviderError):
    """Raised when a chat completion fails."""


class RateLimitedError(ProviderError):
    """Raised when a provider rejects a call because of rate limiting.

    Attributes:
        retry_after: Suggested backoff in seconds, when the provider gave one.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        retry_after: float | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, provider=provider, cause=cause)
        if retry_after is not None:
            self.details["retry_after"] = retry_after
        self.retry_after = retry_after


# =============================================================================
# Tool Call Errors
# =============================================================================


class ToolCallError(RagamuffinError):
    """Base class for errors in a chat model's tool invocation."""

    def __init__(self, message: str, tool_name: str | None = None):
        details = {}
        if tool_name:
            details["tool"] = tool_name
        super().__init__(message, details)
        self.tool_name = tool_name


class InvalidToolCallError(ToolCallError):
    """Raised when a tool call names an unknown tool or carries bad arguments."""

    def __init__(self, message: str, tool_name: str | None = None, arguments: Any = None):
        super().__init__(message, tool_name=tool_name)
        if arguments is not None:
            args_str = str(arguments)
            self.details["arguments"] = args_str[:100] + "..." if len(args_str) > 100 else args_str
        self.arguments = arguments


class ToolProtocolError(ToolCallError):
    """Raised when the chat model requests a second tool round-trip in one turn."""
