"""
Span attribute keys.

GenAI keys follow the OpenTelemetry semantic conventions; `rag.*` keys
are specific to this service.

Reference: https://opentelemetry.io/docs/specs/semconv/gen-ai/
"""

from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# GENAI NAMESPACE (OTel standard)
# ---------------------------------------------------------------------------

GEN_AI_SYSTEM = "gen_ai.system"
GEN_AI_REQUEST_MODEL = "gen_ai.request.model"
GEN_AI_PROMPT = "gen_ai.prompt"  # only with PHOENIX_CAPTURE_LLM_CONTENT
GEN_AI_COMPLETION = "gen_ai.completion"  # only with PHOENIX_CAPTURE_LLM_CONTENT

# ---------------------------------------------------------------------------
# RAG NAMESPACE (custom)
# ---------------------------------------------------------------------------

RAG_QUESTION = "rag.question"  # only with PHOENIX_CAPTURE_LLM_CONTENT
RAG_QUESTION_LENGTH = "rag.question_length"
RAG_COLLECTION = "rag.collection"
RAG_SIMILARITY_THRESHOLD = "rag.similarity_threshold"
RAG_RESULT_LIMIT = "rag.result_limit"
RAG_MATCH_COUNT = "rag.match_count"
RAG_TOP_SIMILARITY = "rag.top_similarity"
RAG_FALLBACK_USED = "rag.fallback_used"

INGEST_CORPUS_PATH = "ingest.corpus_path"
INGEST_DOCUMENT_COUNT = "ingest.document_count"


def retrieval_attributes(
    collection: str,
    threshold: float,
    limit: int,
) -> dict[str, Any]:
    """Attributes for a similarity query span."""
    return {
        RAG_COLLECTION: collection,
        RAG_SIMILARITY_THRESHOLD: threshold,
        RAG_RESULT_LIMIT: limit,
    }


def completion_attributes(model: str, system: str = "openai") -> dict[str, Any]:
    """Attributes for a chat completion span."""
    return {
        GEN_AI_SYSTEM: system,
        GEN_AI_REQUEST_MODEL: model,
    }
