"""
Observability Module - Phoenix + OpenTelemetry Integration

USAGE:
------
# At application startup:
from wiki_rag.observability import init_phoenix

init_phoenix()  # no-op unless PHOENIX_ENABLED=true

# In code that needs tracing:
from wiki_rag.observability import get_tracer

with get_tracer().start_span("rag.retrieve", attributes={...}) as span:
    span.set_attribute("rag.match_count", 2)
"""

from __future__ import annotations

import logging

from wiki_rag.observability.config import (
    PhoenixConfig,
    get_config,
    reset_config,
)
from wiki_rag.observability.tracer import (
    TracerProtocol,
    SpanProtocol,
    NoOpTracer,
    NoOpSpan,
    get_tracer,
    reset_tracer,
)

logger = logging.getLogger(__name__)

_phoenix_initialized = False


def init_phoenix(config: PhoenixConfig | None = None) -> bool:
    """
    Initialize Phoenix tracing.

    Call once at startup, before any model call. With a collector
    endpoint, spans are exported over OTLP/HTTP; otherwise a local
    Phoenix app is launched (requires the `phoenix` extra).

    Returns:
        True if tracing was initialized, False if disabled or unavailable
    """
    global _phoenix_initialized
    if _phoenix_initialized:
        return True

    config = config or get_config()

    if not config.enabled:
        logger.debug("Phoenix observability disabled")
        return False

    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    if config.collector_endpoint:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        exporter = OTLPSpanExporter(endpoint=config.collector_endpoint)
        logger.info(f"Phoenix connecting to remote: {config.collector_endpoint}")
    else:
        try:
            import phoenix as px
        except ImportError as e:
            logger.warning(f"Phoenix not installed and no collector endpoint set, tracing disabled: {e}")
            return False
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        session = px.launch_app()
        exporter = OTLPSpanExporter(endpoint=f"{session.url.rstrip('/')}/v1/traces")
        logger.info(f"Phoenix UI available at: {session.url}")

    provider = TracerProvider(
        resource=Resource.create({"openinference.project.name": config.project_name})
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    from wiki_rag.observability.instrumentation import register_instrumentors

    register_instrumentors()
    reset_tracer()

    _phoenix_initialized = True
    return True


def shutdown_phoenix() -> None:
    """Flush spans and reset tracing state."""
    global _phoenix_initialized

    if not _phoenix_initialized:
        return

    from opentelemetry import trace

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()

    reset_tracer()
    reset_config()
    _phoenix_initialized = False


__all__ = [
    "init_phoenix",
    "shutdown_phoenix",
    "PhoenixConfig",
    "get_config",
    "reset_config",
    "TracerProtocol",
    "SpanProtocol",
    "NoOpTracer",
    "NoOpSpan",
    "get_tracer",
    "reset_tracer",
]
