"""Tests for the exception hierarchy."""

from ragamuffin.exceptions import (
    ChatError,
    ConfigurationError,
    DimensionMismatchError,
    EmbeddingError,
    InvalidToolCallError,
    ProviderError,
    RagamuffinError,
    RateLimitedError,
    ToolCallError,
    ToolProtocolError,
    ValidationError,
    VaultError,
    VaultExistsError,
    VaultNotFoundError,
)


class TestHierarchy:
    """Every error is catchable as RagamuffinError."""

    def test_subclasses(self):
        assert issubclass(ValidationError, ConfigurationError)
        assert issubclass(VaultExistsError, VaultError)
        assert issubclass(VaultNotFoundError, VaultError)
        assert issubclass(EmbeddingError, ProviderError)
        assert issubclass(ChatError, ProviderError)
        assert issubclass(RateLimitedError, ProviderError)
        assert issubclass(InvalidToolCallError, ToolCallError)
        assert issubclass(ToolProtocolError, ToolCallError)
        for error in (ConfigurationError, VaultError, DimensionMismatchError, ProviderError, ToolCallError):
            assert issubclass(error, RagamuffinError)


class TestMessages:
    """String forms shown to CLI users."""

    def test_plain_message(self):
        assert str(RagamuffinError("boom")) == "boom"

    def test_details_appended(self):
        assert str(EmbeddingError("failed", provider="openai:m")) == "failed (provider=openai:m)"

    def test_vault_messages(self):
        assert str(VaultExistsError("notes")) == 'Vault "notes" already exists'
        assert str(VaultNotFoundError("notes")) == 'No vault named "notes"'
        assert VaultNotFoundError("notes").vault_name == "notes"

    def test_validation_value_truncated(self):
        error = ValidationError("bad", field="model", value="x" * 300)

        assert len(error.details["value"]) == 103
        assert error.value == "x" * 300

    def test_dimension_mismatch_details(self):
        error = DimensionMismatchError(expected_dims=3, actual_dims=2, chunk_id=9)

        assert error.details == {"expected_dims": 3, "actual_dims": 2, "chunk_id": 9}

    def test_rate_limited_retry_after(self):
        error = RateLimitedError("slow down", provider="openai:m", retry_after=2.5)

        assert error.retry_after == 2.5
        assert error.details["retry_after"] == 2.5

    def test_provider_cause_kept(self):
        cause = ConnectionError("refused")

        assert ChatError("down", provider="ollama:m", cause=cause).cause is cause
