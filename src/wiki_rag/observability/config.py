"""
Phoenix/OpenTelemetry Configuration

Tracing is off unless PHOENIX_ENABLED is set.
"""

import os
from dataclasses import dataclass


def _truthy(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


@dataclass
class PhoenixConfig:
    """Configuration for Phoenix tracing.

    Environment Variables:
        PHOENIX_ENABLED: Enable tracing (default: false)
        PHOENIX_PROJECT_NAME: Project name in Phoenix UI (default: wiki-rag)
        PHOENIX_COLLECTOR_ENDPOINT: OTLP/HTTP endpoint (optional, local UI if empty)
        PHOENIX_CAPTURE_LLM_CONTENT: Put questions and prompts on spans (default: false)
    """

    enabled: bool = False
    project_name: str = "wiki-rag"
    collector_endpoint: str | None = None
    capture_llm_content: bool = False

    @classmethod
    def from_env(cls) -> "PhoenixConfig":
        """Load config from environment variables."""
        return cls(
            enabled=_truthy(os.environ.get("PHOENIX_ENABLED", "false")),
            project_name=os.environ.get("PHOENIX_PROJECT_NAME", "wiki-rag"),
            collector_endpoint=os.environ.get("PHOENIX_COLLECTOR_ENDPOINT") or None,
            capture_llm_content=_truthy(os.environ.get("PHOENIX_CAPTURE_LLM_CONTENT", "false")),
        )


_config: PhoenixConfig | None = None


def get_config() -> PhoenixConfig:
    """Get the global Phoenix config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = PhoenixConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
