"""
OpenInference auto-instrumentation for the OpenAI SDK.

Both the embedding and the completion calls go through the OpenAI client,
so one instrumentor traces every outbound model call.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_instrumented = False


def register_instrumentors() -> bool:
    """
    Register the OpenAI instrumentor once.

    Returns:
        True if instrumentation is active, False if the package is missing
    """
    global _instrumented
    if _instrumented:
        return True

    try:
        from openinference.instrumentation.openai import OpenAIInstrumentor
    except ImportError:
        logger.warning("openinference-instrumentation-openai not installed; OpenAI calls not traced")
        return False

    OpenAIInstrumentor().instrument()
    _instrumented = True
    logger.info("Registered instrumentors: openai")
    return True


def uninstrument() -> None:
    """Remove the instrumentor (useful for testing)."""
    global _instrumented
    if not _instrumented:
        return

    from openinference.instrumentation.openai import OpenAIInstrumentor

    OpenAIInstrumentor().uninstrument()
    _instrumented = False
