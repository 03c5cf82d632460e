"""Constants for ragamuffin.

Centralizes magic strings and numbers. Organized by domain:
- Paths
- Chunking
- Sync
- Retrieval
- Providers
- Retry policy
- Logging
"""

from typing import Final

# =============================================================================
# Paths
# =============================================================================

RAGAMUFFIN_DIR: Final[str] = ".ragamuffin"
CONFIG_FILENAME: Final[str] = "config.yaml"
CONFIG_ROOT_KEY: Final[str] = "ragamuffin"
DEFAULT_DB_FILENAME: Final[str] = "ragamuffin.db"

ENV_DB_PATH: Final[str] = "RAGAMUFFIN_DB_PATH"
ENV_LOG_LEVEL: Final[str] = "RAGAMUFFIN_LOG_LEVEL"
ENV_DEBUG: Final[str] = "RAGAMUFFIN_DEBUG"
ENV_LOG_FILE: Final[str] = "RAGAMUFFIN_LOG_FILE"

# =============================================================================
# Chunking
# =============================================================================

DEFAULT_MAX_TOKENS: Final[int] = 6000
CHARS_PER_TOKEN: Final[int] = 3

# =============================================================================
# Sync
# =============================================================================

DEFAULT_EXTENSIONS: Final[tuple[str, ...]] = (".md",)
DEFAULT_EMBED_WORKERS: Final[int] = 1
MAX_EMBED_WORKERS: Final[int] = 32

# =============================================================================
# Retrieval
# =============================================================================

RETRIEVE_TOOL_NAME: Final[str] = "retrieve_chunks"
RETRIEVE_TOOL_DESCRIPTION: Final[str] = "Search for documents in the vector store"
DEFAULT_TOP_K: Final[int] = 4
SNIPPET_SEPARATOR: Final[str] = "\n---\n"

# =============================================================================
# Providers
# =============================================================================

PROVIDER_OPENAI: Final[str] = "openai"
PROVIDER_OLLAMA: Final[str] = "ollama"
VALID_PROVIDERS: Final[tuple[str, ...]] = (PROVIDER_OPENAI, PROVIDER_OLLAMA)

DEFAULT_OPENAI_BASE_URL: Final[str] = "https://api.openai.com/v1"
DEFAULT_OLLAMA_BASE_URL: Final[str] = "http://localhost:11434"

DEFAULT_EMBEDDING_PROVIDER: Final[str] = PROVIDER_OPENAI
DEFAULT_EMBEDDING_MODELS: Final[dict[str, str]] = {
    PROVIDER_OPENAI: "text-embedding-3-small",
    PROVIDER_OLLAMA: "nomic-embed-text",
}
DEFAULT_CHAT_PROVIDER: Final[str] = PROVIDER_OPENAI
DEFAULT_CHAT_MODELS: Final[dict[str, str]] = {
    PROVIDER_OPENAI: "gpt-4o-mini",
    PROVIDER_OLLAMA: "llama3.1",
}
DEFAULT_BASE_URLS: Final[dict[str, str]] = {
    PROVIDER_OPENAI: DEFAULT_OPENAI_BASE_URL,
    PROVIDER_OLLAMA: DEFAULT_OLLAMA_BASE_URL,
}

DEFAULT_PROVIDER_TIMEOUT: Final[float] = 60.0
DEFAULT_CHAT_TEMPERATURE: Final[float] = 0.2
OPENAI_API_KEY_ENV: Final[str] = "OPENAI_API_KEY"

HTTP_STATUS_OK: Final[int] = 200
HTTP_STATUS_TOO_MANY_REQUESTS: Final[int] = 429

# =============================================================================
# Retry policy (rate limiting)
# =============================================================================

DEFAULT_RETRY_MAX_ATTEMPTS: Final[int] = 3
DEFAULT_RETRY_DELAY_SECONDS: Final[float] = 1.0
DEFAULT_RETRY_MAX_DELAY_SECONDS: Final[float] = 60.0

# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL_DEBUG: Final[str] = "DEBUG"
LOG_LEVEL_INFO: Final[str] = "INFO"
LOG_LEVEL_WARNING: Final[str] = "WARNING"
LOG_LEVEL_ERROR: Final[str] = "ERROR"
VALID_LOG_LEVELS: Final[tuple[str, ...]] = (
    LOG_LEVEL_DEBUG,
    LOG_LEVEL_INFO,
    LOG_LEVEL_WARNING,
    LOG_LEVEL_ERROR,
)
DEFAULT_LOG_LEVEL: Final[str] = LOG_LEVEL_WARNING
LOG_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_BACKUP_COUNT: Final[int] = 3

# =============================================================================
# Chat
# =============================================================================

DEFAULT_SYSTEM_PROMPT: Final[str] = """\
You are a helpful assistant that answers questions based ONLY on the content in the user's vault.
When asked a question:
1. First, use retrieve_chunks to search for relevant information in the vault
2. Then, answer the question using ONLY the information found in the vault
3. If the vault doesn't contain relevant information, say so clearly
4. Do not make up or infer information not present in the vault
5. Do not use any external knowledge unless it's explicitly mentioned in the vault"""

CHAT_COMMAND_HELP: Final[str] = "/help"
CHAT_COMMAND_EXIT: Final[str] = "/exit"
CHAT_COMMAND_QUIT: Final[str] = "/quit"
CHAT_COMMAND_DEBUG: Final[str] = "/debug"
