"""
Server configuration.

Loads every tunable from environment variables. The defaults target a
local Ollama instance exposing its OpenAI-compatible API.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

STORE_BACKENDS = ("memory", "postgres")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class ServerConfig:
    """Configuration for the RAG server.

    Environment Variables:
        OPENAI_BASE_URL: OpenAI-compatible endpoint (default: local Ollama)
        OPENAI_API_KEY: API key sent to the endpoint (Ollama ignores it)
        LLM_MODEL: Chat completion model (default: gemma:2b)
        EMBEDDING_MODEL: Embedding model (default: nomic-embed-text)
        EMBEDDING_PROVIDER: Provider name recorded on the schema's vector field
        EMBEDDING_DIM: Vector width for the pgvector column (default: 768)
        CORPUS_PATH: Newline-delimited JSON corpus loaded at startup
        SIMILARITY_THRESHOLD: Minimum similarity for a match (default: 0.63)
        RESULT_LIMIT: Maximum matches passed to the model (default: 2)
        REQUEST_TIMEOUT_SECONDS: Timeout for each outbound API call
        STORE_BACKEND: "memory" (embedded) or "postgres"
        DATABASE_URL: PostgreSQL connection string for the postgres backend
        HOST / PORT: Listen address for the HTTP server
        LOG_LEVEL: Root logging level
        USE_MOCK_PROVIDERS: Use deterministic offline providers
    """

    openai_base_url: str = "http://localhost:11434/v1"
    openai_api_key: str = "ollama"
    llm_model: str = "gemma:2b"
    embedding_model: str = "nomic-embed-text"
    embedding_provider: str = "ollama"
    embedding_dim: int = 768
    corpus_path: str = "wiki.jsonl"
    similarity_threshold: float = 0.63
    result_limit: int = 2
    request_timeout_seconds: float = 60.0
    store_backend: str = "memory"
    database_url: str = "postgresql://localhost/wiki_rag"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    use_mock_providers: bool = False

    def __post_init__(self) -> None:
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"STORE_BACKEND must be one of {STORE_BACKENDS}, got {self.store_backend!r}"
            )
        if not -1.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(
                f"SIMILARITY_THRESHOLD must be within [-1, 1], got {self.similarity_threshold}"
            )
        if self.result_limit < 1:
            raise ValueError(f"RESULT_LIMIT must be >= 1, got {self.result_limit}")
        if self.request_timeout_seconds <= 0:
            raise ValueError(
                f"REQUEST_TIMEOUT_SECONDS must be positive, got {self.request_timeout_seconds}"
            )
        if self.embedding_dim < 1:
            raise ValueError(f"EMBEDDING_DIM must be >= 1, got {self.embedding_dim}")

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load config from environment variables."""
        return cls(
            openai_base_url=os.environ.get("OPENAI_BASE_URL", "http://localhost:11434/v1"),
            openai_api_key=os.environ.get("OPENAI_API_KEY", "ollama"),
            llm_model=os.environ.get("LLM_MODEL", "gemma:2b"),
            embedding_model=os.environ.get("EMBEDDING_MODEL", "nomic-embed-text"),
            embedding_provider=os.environ.get("EMBEDDING_PROVIDER", "ollama"),
            embedding_dim=_env_int("EMBEDDING_DIM", 768),
            corpus_path=os.environ.get("CORPUS_PATH", "wiki.jsonl"),
            similarity_threshold=_env_float("SIMILARITY_THRESHOLD", 0.63),
            result_limit=_env_int("RESULT_LIMIT", 2),
            request_timeout_seconds=_env_float("REQUEST_TIMEOUT_SECONDS", 60.0),
            store_backend=os.environ.get("STORE_BACKEND", "memory").lower(),
            database_url=os.environ.get("DATABASE_URL", "postgresql://localhost/wiki_rag"),
            host=os.environ.get("HOST", "0.0.0.0"),
            port=_env_int("PORT", 8080),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            use_mock_providers=_env_bool("USE_MOCK_PROVIDERS"),
        )
