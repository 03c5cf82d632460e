"""Configuration management for ragamuffin.

Configuration follows a priority hierarchy:
1. Environment variables (RAGAMUFFIN_*)
2. Project config (.ragamuffin/config.yaml, under the 'ragamuffin' key)
3. Hardcoded defaults in this module
"""

import logging
import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from ragamuffin.constants import (
    CONFIG_FILENAME,
    CONFIG_ROOT_KEY,
    DEFAULT_BASE_URLS,
    DEFAULT_CHAT_MODELS,
    DEFAULT_CHAT_PROVIDER,
    DEFAULT_CHAT_TEMPERATURE,
    DEFAULT_DB_FILENAME,
    DEFAULT_EMBED_WORKERS,
    DEFAULT_EMBEDDING_MODELS,
    DEFAULT_EMBEDDING_PROVIDER,
    DEFAULT_EXTENSIONS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_PROVIDER_TIMEOUT,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_ATTEMPTS,
    DEFAULT_RETRY_MAX_DELAY_SECONDS,
    DEFAULT_TOP_K,
    ENV_DB_PATH,
    ENV_DEBUG,
    ENV_LOG_FILE,
    ENV_LOG_LEVEL,
    LOG_LEVEL_DEBUG,
    MAX_EMBED_WORKERS,
    OPENAI_API_KEY_ENV,
    PROVIDER_OPENAI,
    RAGAMUFFIN_DIR,
    VALID_LOG_LEVELS,
    VALID_PROVIDERS,
)
from ragamuffin.exceptions import ValidationError

logger = logging.getLogger(__name__)

_URL_PATTERN = re.compile(
    r"^https?://"  # http:// or https://
    r"[a-zA-Z0-9.-]+"  # domain
    r"(:\d+)?"  # optional port
    r"(/.*)?$",  # optional path
    re.IGNORECASE,
)


def _is_valid_url(url: str) -> bool:
    """Check if URL is valid HTTP(S) URL."""
    return bool(url) and bool(_URL_PATTERN.match(url))


def _resolve_api_key(value: str | None) -> str | None:
    """Resolve ${ENV_VAR} indirection in an api_key value."""
    if value and value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1])
    return value


def _validate_provider(provider: str, model: str, base_url: str, timeout: float) -> None:
    if provider not in VALID_PROVIDERS:
        raise ValidationError(
            f"Invalid provider: {provider}",
            field="provider",
            value=provider,
            expected=f"one of {VALID_PROVIDERS}",
        )
    if not model or not model.strip():
        raise ValidationError(
            "Model name cannot be empty",
            field="model",
            value=model,
            expected="non-empty string",
        )
    if not _is_valid_url(base_url):
        raise ValidationError(
            f"Invalid base URL: {base_url}",
            field="base_url",
            value=base_url,
            expected="valid HTTP(S) URL",
        )
    if timeout <= 0:
        raise ValidationError(
            "Timeout must be positive",
            field="timeout",
            value=timeout,
            expected="positive number",
        )


@dataclass
class EmbeddingConfig:
    """Configuration for the embedding provider.

    Attributes:
        provider: Embedding provider (openai, ollama).
        model: Model name/identifier. Defaults per provider when empty.
        base_url: Base URL for the embedding API. Defaults per provider when empty.
        api_key: API key (supports ${ENV_VAR} syntax).
        dimensions: Expected embedding dimensions (auto-detected if None).
        timeout: Request timeout in seconds.
    """

    provider: str = DEFAULT_EMBEDDING_PROVIDER
    model: str = ""
    base_url: str = ""
    api_key: str | None = None
    dimensions: int | None = None
    timeout: float = DEFAULT_PROVIDER_TIMEOUT

    def __post_init__(self) -> None:
        """Fill provider defaults and validate."""
        if not self.model and self.provider in DEFAULT_EMBEDDING_MODELS:
            self.model = DEFAULT_EMBEDDING_MODELS[self.provider]
        if not self.base_url and self.provider in DEFAULT_BASE_URLS:
            self.base_url = DEFAULT_BASE_URLS[self.provider]
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValidationError: If any configuration value is invalid.
        """
        _validate_provider(self.provider, self.model, self.base_url, self.timeout)
        if self.dimensions is not None and self.dimensions <= 0:
            raise ValidationError(
                "Dimensions must be positive",
                field="dimensions",
                value=self.dimensions,
                expected="positive integer",
            )

    def get_api_key(self) -> str | None:
        """Return the effective API key, falling back to OPENAI_API_KEY for OpenAI."""
        key = _resolve_api_key(self.api_key)
        if not key and self.provider == PROVIDER_OPENAI:
            key = os.environ.get(OPENAI_API_KEY_ENV)
        return key

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmbeddingConfig":
        """Create config from dictionary.

        Raises:
            ValidationError: If configuration values are invalid.
        """
        return cls(
            provider=data.get("provider", DEFAULT_EMBEDDING_PROVIDER),
            model=data.get("model", ""),
            base_url=data.get("base_url", ""),
            api_key=data.get("api_key"),
            dimensions=data.get("dimensions"),
            timeout=data.get("timeout", DEFAULT_PROVIDER_TIMEOUT),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "provider": self.provider,
            "model": self.model,
            "base_url": self.base_url,
            "api_key": self.api_key,
            "dimensions": self.dimensions,
            "timeout": self.timeout,
        }


@dataclass
class ChatConfig:
    """Configuration for the chat provider.

    Attributes:
        provider: Chat provider (openai, ollama).
        model: Model name/identifier. Defaults per provider when empty.
        base_url: Base URL for the chat API. Defaults per provider when empty.
        api_key: API key (supports ${ENV_VAR} syntax).
        timeout: Request timeout in seconds.
        temperature: Sampling temperature.
        system_prompt: Optional override of the default system prompt.
    """

    provider: str = DEFAULT_CHAT_PROVIDER
    model: str = ""
    base_url: str = ""
    api_key: str | None = None
    timeout: float = DEFAULT_PROVIDER_TIMEOUT
    temperature: float = DEFAULT_CHAT_TEMPERATURE
    system_prompt: str | None = None

    def __post_init__(self) -> None:
        """Fill provider defaults and validate."""
        if not self.model and self.provider in DEFAULT_CHAT_MODELS:
            self.model = DEFAULT_CHAT_MODELS[self.provider]
        if not self.base_url and self.provider in DEFAULT_BASE_URLS:
            self.base_url = DEFAULT_BASE_URLS[self.provider]
        self._validate()

    def _validate(self) -> None:
        _validate_provider(self.provider, self.model, self.base_url, self.timeout)
        if not 0.0 <= self.temperature <= 2.0:
            raise ValidationError(
                "Temperature out of range",
                field="temperature",
                value=self.temperature,
                expected="number between 0 and 2",
            )

    def get_api_key(self) -> str | None:
        """Return the effective API key, falling back to OPENAI_API_KEY for OpenAI."""
        key = _resolve_api_key(self.api_key)
        if not key and self.provider == PROVIDER_OPENAI:
            key = os.environ.get(OPENAI_API_KEY_ENV)
        return key

    def with_model_spec(self, spec: str) -> "ChatConfig":
        """Return a copy overridden by a 'provider[:model]' spec string.

        Switching provider resets base_url and model to that provider's
        defaults unless the string names a model.

        Raises:
            ValidationError: If the string names an unknown provider.
        """
        provider, _, model = spec.strip().partition(":")
        provider = provider.lower()
        if provider == self.provider:
            return replace(self, model=model or self.model)
        return replace(self, provider=provider, model=model, base_url="", api_key=None)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatConfig":
        """Create config from dictionary."""
        return cls(
            provider=data.get("provider", DEFAULT_CHAT_PROVIDER),
            model=data.get("model", ""),
            base_url=data.get("base_url", ""),
            api_key=data.get("api_key"),
            timeout=data.get("timeout", DEFAULT_PROVIDER_TIMEOUT),
            temperature=data.get("temperature", DEFAULT_CHAT_TEMPERATURE),
            system_prompt=data.get("system_prompt"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "provider": self.provider,
            "model": self.model,
            "base_url": self.base_url,
            "api_key": self.api_key,
            "timeout": self.timeout,
            "temperature": self.temperature,
            "system_prompt": self.system_prompt,
        }


@dataclass
class ChunkingConfig:
    """Configuration for sentence-based chunking."""

    max_tokens: int = DEFAULT_MAX_TOKENS

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise ValidationError(
                "max_tokens must be positive",
                field="max_tokens",
                value=self.max_tokens,
                expected="positive integer",
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChunkingConfig":
        return cls(max_tokens=data.get("max_tokens", DEFAULT_MAX_TOKENS))

    def to_dict(self) -> dict[str, Any]:
        return {"max_tokens": self.max_tokens}


@dataclass
class SyncConfig:
    """Configuration for vault synchronization.

    Attributes:
        extensions: File suffixes eligible for indexing.
        embed_workers: Concurrent embedding calls (1 = sequential).
    """

    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    embed_workers: int = DEFAULT_EMBED_WORKERS

    def __post_init__(self) -> None:
        self.extensions = [
            ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in self.extensions
        ]
        if not self.extensions:
            raise ValidationError(
                "At least one file extension is required",
                field="extensions",
                value=self.extensions,
                expected="non-empty list of suffixes",
            )
        if not 1 <= self.embed_workers <= MAX_EMBED_WORKERS:
            raise ValidationError(
                "embed_workers out of range",
                field="embed_workers",
                value=self.embed_workers,
                expected=f"integer between 1 and {MAX_EMBED_WORKERS}",
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncConfig":
        return cls(
            extensions=list(data.get("extensions", DEFAULT_EXTENSIONS)),
            embed_workers=data.get("embed_workers", DEFAULT_EMBED_WORKERS),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"extensions": list(self.extensions), "embed_workers": self.embed_workers}


@dataclass
class RetrievalConfig:
    """Configuration for top-K retrieval."""

    top_k: int = DEFAULT_TOP_K

    def __post_init__(self) -> None:
        if self.top_k <= 0:
            raise ValidationError(
                "top_k must be positive",
                field="top_k",
                value=self.top_k,
                expected="positive integer",
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RetrievalConfig":
        return cls(top_k=data.get("top_k", DEFAULT_TOP_K))

    def to_dict(self) -> dict[str, Any]:
        return {"top_k": self.top_k}


@dataclass
class RetryConfig:
    """Retry policy for rate-limited provider calls.

    Attributes:
        max_attempts: Total attempts including the first call.
        default_delay_seconds: Base delay when the provider gives no hint
            (doubled on each attempt).
        max_delay_seconds: Upper bound on any single wait.
    """

    max_attempts: int = DEFAULT_RETRY_MAX_ATTEMPTS
    default_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS
    max_delay_seconds: float = DEFAULT_RETRY_MAX_DELAY_SECONDS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValidationError(
                "max_attempts must be at least 1",
                field="max_attempts",
                value=self.max_attempts,
                expected="integer >= 1",
            )
        if self.default_delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValidationError(
                "Retry delays cannot be negative",
                field="default_delay_seconds",
                value=self.default_delay_seconds,
                expected="non-negative number",
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RetryConfig":
        return cls(
            max_attempts=data.get("max_attempts", DEFAULT_RETRY_MAX_ATTEMPTS),
            default_delay_seconds=data.get("default_delay_seconds", DEFAULT_RETRY_DELAY_SECONDS),
            max_delay_seconds=data.get("max_delay_seconds", DEFAULT_RETRY_MAX_DELAY_SECONDS),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_attempts": self.max_attempts,
            "default_delay_seconds": self.default_delay_seconds,
            "max_delay_seconds": self.max_delay_seconds,
        }


@dataclass
class RagamuffinConfig:
    """Top-level ragamuffin configuration."""

    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    db_path: str = f"{RAGAMUFFIN_DIR}/{DEFAULT_DB_FILENAME}"
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str | None = None

    def __post_init__(self) -> None:
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValidationError(
                f"Invalid log level: {self.log_level}",
                field="log_level",
                value=self.log_level,
                expected=f"one of {VALID_LOG_LEVELS}",
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RagamuffinConfig":
        """Create config from dictionary.

        Raises:
            ValidationError: If any section is invalid.
        """
        return cls(
            embedding=EmbeddingConfig.from_dict(data.get("embedding") or {}),
            chat=ChatConfig.from_dict(data.get("chat") or {}),
            chunking=ChunkingConfig.from_dict(data.get("chunking") or {}),
            sync=SyncConfig.from_dict(data.get("sync") or {}),
            retrieval=RetrievalConfig.from_dict(data.get("retrieval") or {}),
            retry=RetryConfig.from_dict(data.get("retry") or {}),
            db_path=data.get("db_path", f"{RAGAMUFFIN_DIR}/{DEFAULT_DB_FILENAME}"),
            log_level=data.get("log_level", DEFAULT_LOG_LEVEL),
            log_file=data.get("log_file"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "embedding": self.embedding.to_dict(),
            "chat": self.chat.to_dict(),
            "chunking": self.chunking.to_dict(),
            "sync": self.sync.to_dict(),
            "retrieval": self.retrieval.to_dict(),
            "retry": self.retry.to_dict(),
            "db_path": self.db_path,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }

    def get_db_path(self, project_root: Path) -> Path:
        """Resolve the database path, honoring RAGAMUFFIN_DB_PATH."""
        raw = os.environ.get(ENV_DB_PATH) or self.db_path
        path = Path(raw).expanduser()
        return path if path.is_absolute() else project_root / path

    def get_log_file(self, project_root: Path) -> Path | None:
        """Resolve the log file path, honoring RAGAMUFFIN_LOG_FILE.

        Returns:
            Path of the log file, or None to log to stderr.
        """
        raw = os.environ.get(ENV_LOG_FILE) or self.log_file
        if not raw:
            return None
        path = Path(raw).expanduser()
        return path if path.is_absolute() else project_root / path

    def get_effective_log_level(self) -> str:
        """Get effective log level, considering environment variable overrides.

        Priority (highest to lowest):
        1. RAGAMUFFIN_DEBUG=1 → DEBUG
        2. RAGAMUFFIN_LOG_LEVEL environment variable
        3. Config file log_level setting
        """
        if os.environ.get(ENV_DEBUG, "").lower() in ("1", "true", "yes"):
            return LOG_LEVEL_DEBUG

        env_level = os.environ.get(ENV_LOG_LEVEL, "").upper()
        if env_level in VALID_LOG_LEVELS:
            return env_level

        return self.log_level.upper()


def config_path(project_root: Path) -> Path:
    """Location of the project config file."""
    return project_root / RAGAMUFFIN_DIR / CONFIG_FILENAME


def load_config(project_root: Path) -> RagamuffinConfig:
    """Load ragamuffin configuration from project.

    Args:
        project_root: Directory holding the .ragamuffin folder.

    Returns:
        RagamuffinConfig with settings (defaults if not configured).

    Note:
        Returns defaults on error rather than raising, so a broken config
        file never locks the user out of the CLI.
    """
    config_file = config_path(project_root)

    if not config_file.exists():
        logger.debug(f"No config file at {config_file}, using defaults")
        return RagamuffinConfig()

    try:
        with open(config_file, encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

        config = RagamuffinConfig.from_dict(config_data.get(CONFIG_ROOT_KEY) or {})
        logger.debug(
            f"Loaded config: embedding={config.embedding.provider}:{config.embedding.model}, "
            f"chat={config.chat.provider}:{config.chat.model}"
        )
        return config

    except ValidationError as e:
        logger.warning(f"Invalid config in {config_file}: {e}")
        logger.info("Using default configuration")
        return RagamuffinConfig()

    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse config YAML from {config_file}: {e}")
        return RagamuffinConfig()

    except OSError as e:
        logger.warning(f"Failed to read config from {config_file}: {e}")
        return RagamuffinConfig()


def save_config(project_root: Path, config: RagamuffinConfig) -> Path:
    """Write configuration to .ragamuffin/config.yaml.

    Returns:
        Path of the written file.
    """
    config_file = config_path(project_root)
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            {CONFIG_ROOT_KEY: config.to_dict()},
            f,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.debug(f"Saved config to {config_file}")
    return config_file
