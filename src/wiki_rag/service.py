"""
Service wiring and one-time startup.

build_service() runs before the HTTP server listens: connect the store,
register the Wiki schema, load the corpus, assemble the pipeline. Any
failure is raised as StartupError and the process must not serve.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from wiki_rag.config import ServerConfig
from wiki_rag.core.errors import StartupError
from wiki_rag.core.protocols import CompletionProvider, DocumentStore, EmbeddingProvider
from wiki_rag.embeddings import get_embedding_provider
from wiki_rag.llm import get_completion_provider
from wiki_rag.observability import get_tracer
from wiki_rag.observability.attributes import INGEST_CORPUS_PATH, INGEST_DOCUMENT_COUNT
from wiki_rag.rag import RAGPipeline, RetrievalSettings
from wiki_rag.retrieval import StoreConfig, get_document_store, load_corpus, wiki_schema

logger = logging.getLogger(__name__)


@dataclass
class WikiRagService:
    """Everything the HTTP layer needs, constructed once."""

    config: ServerConfig
    store: DocumentStore
    pipeline: RAGPipeline
    document_count: int

    def close(self) -> None:
        self.store.close()


def build_embeddings(config: ServerConfig) -> EmbeddingProvider:
    return get_embedding_provider(
        use_mock=config.use_mock_providers,
        model=config.embedding_model,
        base_url=config.openai_base_url,
        api_key=config.openai_api_key,
        timeout=config.request_timeout_seconds,
        dimensions=config.embedding_dim,
    )


def build_completion(config: ServerConfig) -> CompletionProvider:
    return get_completion_provider(
        use_mock=config.use_mock_providers,
        model=config.llm_model,
        base_url=config.openai_base_url,
        api_key=config.openai_api_key,
        timeout=config.request_timeout_seconds,
    )


def prepare_store(
    config: ServerConfig,
    embeddings: EmbeddingProvider,
    store: DocumentStore | None = None,
) -> tuple[DocumentStore, int]:
    """
    Connect the store, register the Wiki schema and load the corpus.

    Returns:
        (store, number of documents loaded)

    Raises:
        StartupError: any step failed
    """
    if store is None:
        try:
            store = get_document_store(
                embeddings,
                use_postgres=config.store_backend == "postgres",
                config=StoreConfig(
                    connection_string=config.database_url,
                    embedding_dim=config.embedding_dim,
                ),
            )
        except ImportError as e:
            raise StartupError(str(e)) from e

    with get_tracer().start_span(
        "ingest.load_corpus", attributes={INGEST_CORPUS_PATH: config.corpus_path}
    ) as span:
        try:
            store.connect()
            store.add_schema(wiki_schema(config.embedding_provider, config.embedding_model))
            count = load_corpus(config.corpus_path, store)
        except Exception as e:
            span.record_exception(e)
            store.close()
            raise StartupError(f"failed knowledge base setup: {e}") from e
        span.set_attribute(INGEST_DOCUMENT_COUNT, count)

    return store, count


def build_service(
    config: ServerConfig,
    embeddings: EmbeddingProvider | None = None,
    llm: CompletionProvider | None = None,
    store: DocumentStore | None = None,
) -> WikiRagService:
    """Run one-time startup and return the ready service."""
    embeddings = embeddings or build_embeddings(config)
    llm = llm or build_completion(config)

    store, count = prepare_store(config, embeddings, store)

    pipeline = RAGPipeline(
        embeddings=embeddings,
        store=store,
        llm=llm,
        settings=RetrievalSettings(
            similarity_threshold=config.similarity_threshold,
            result_limit=config.result_limit,
        ),
        model_name=config.llm_model,
    )
    logger.info(f"Knowledge base initialized | documents={count} | backend={config.store_backend}")
    return WikiRagService(config=config, store=store, pipeline=pipeline, document_count=count)
