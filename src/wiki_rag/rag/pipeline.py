"""
RAG pipeline - the only app-specific logic in the service.

Flow for one question:
1. Embed "search_query: <question>"
2. One similarity query against the Wiki collection
3. Strip the document marker from each match
4. Render the system prompt with the snippets
5. Chat completion with [system, user]
6. Return the trimmed completion

FAILURE SEMANTICS:
------------------
Embedding and query failures propagate: without a question vector there
is nothing to answer from. A completion failure is logged and replaced
by FALLBACK_ANSWER, so the caller still gets a 200. Nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from wiki_rag.core.errors import CompletionError, EmbeddingError
from wiki_rag.core.protocols import (
    ChatMessage,
    CompletionProvider,
    DocumentStore,
    EmbeddingProvider,
)
from wiki_rag.logging_config import log_latency
from wiki_rag.observability import get_config as get_tracing_config
from wiki_rag.observability import get_tracer
from wiki_rag.observability.attributes import (
    GEN_AI_COMPLETION,
    GEN_AI_PROMPT,
    RAG_FALLBACK_USED,
    RAG_MATCH_COUNT,
    RAG_QUESTION,
    RAG_QUESTION_LENGTH,
    RAG_TOP_SIMILARITY,
    completion_attributes,
    retrieval_attributes,
)
from wiki_rag.prompts import (
    FALLBACK_ANSWER,
    render_system_prompt,
    render_user_message,
)
from wiki_rag.retrieval.document import (
    QUERY_MARKER,
    WIKI_COLLECTION,
    WIKI_VECTOR_FIELD,
    strip_document_marker,
)

logger = logging.getLogger(__name__)


@dataclass
class RetrievalSettings:
    """Similarity query parameters."""

    similarity_threshold: float = 0.63
    result_limit: int = 2
    collection: str = WIKI_COLLECTION
    vector_field: str = WIKI_VECTOR_FIELD


class RAGPipeline:
    """
    Orchestrates embedding, retrieval, prompting and completion.

    Holds no per-request state, so one instance serves all request
    threads.
    """

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        store: DocumentStore,
        llm: CompletionProvider,
        settings: RetrievalSettings | None = None,
        model_name: str = "gemma:2b",
    ):
        self._embeddings = embeddings
        self._store = store
        self._llm = llm
        self.settings = settings or RetrievalSettings()
        self.model_name = model_name

    def embed_question(self, question: str):
        try:
            return self._embeddings.embed(QUERY_MARKER + question)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"embedding request failed: {e}") from e

    def retrieve(self, question: str) -> list[str]:
        """
        Return the context snippets for `question`, best match first.

        Raises:
            EmbeddingError: the question could not be embedded
            QueryError: the store failed to run the similarity query
        """
        s = self.settings
        tracer = get_tracer()
        with tracer.start_span(
            "rag.retrieve",
            attributes=retrieval_attributes(s.collection, s.similarity_threshold, s.result_limit),
        ) as span:
            query_vector = self.embed_question(question)
            matches = self._store.similarity_query(
                s.collection,
                s.vector_field,
                query_vector,
                min_similarity=s.similarity_threshold,
                limit=s.result_limit,
            )
            span.set_attribute(RAG_MATCH_COUNT, len(matches))
            if matches:
                span.set_attribute(RAG_TOP_SIMILARITY, matches[0].similarity)

        logger.info(
            f"Retrieval complete | matches={len(matches)} | "
            f"similarities={[round(m.similarity, 3) for m in matches]}"
        )
        return [strip_document_marker(m.text) for m in matches]

    def generate(self, contexts: list[str], question: str) -> str:
        """Ask the model; degrade to FALLBACK_ANSWER on any completion failure."""
        system_prompt = render_system_prompt(contexts)
        messages = [
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(role="user", content=render_user_message(question)),
        ]
        capture = get_tracing_config().capture_llm_content

        with get_tracer().start_span(
            "rag.generate", attributes=completion_attributes(self.model_name)
        ) as span:
            if capture:
                span.set_attribute(GEN_AI_PROMPT, system_prompt)
            try:
                answer = self._llm.complete(messages).strip()
            except Exception as e:
                if isinstance(e, CompletionError):
                    logger.error(f"LLM error: {e}")
                else:
                    logger.exception(f"LLM error: {e}")
                span.record_exception(e)
                span.set_attribute(RAG_FALLBACK_USED, True)
                return FALLBACK_ANSWER

            span.set_attribute(RAG_FALLBACK_USED, False)
            if capture:
                span.set_attribute(GEN_AI_COMPLETION, answer)
        return answer

    @log_latency("rag.answer")
    def answer(self, question: str) -> str:
        """
        Answer a question from the knowledge base.

        Raises:
            EmbeddingError / QueryError: retrieval failed; the request fails
        """
        logger.info(f"Query received | question_length={len(question)}")
        with get_tracer().start_span(
            "rag.answer", attributes={RAG_QUESTION_LENGTH: len(question)}
        ) as span:
            if get_tracing_config().capture_llm_content:
                span.set_attribute(RAG_QUESTION, question)
            contexts = self.retrieve(question)
            return self.generate(contexts, question)
