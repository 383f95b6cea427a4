"""
Retrieval module - the document store collaborator and corpus ingest.

This module provides:
- WikiArticle / wiki_schema(): the ingest record and collection schema
- StoreConfig: Configuration for the PostgreSQL store
- PgVectorDocumentStore: PostgreSQL store
- InMemoryDocumentStore: Embedded store (default)
- get_document_store(): Factory function
- load_corpus(): JSONL corpus loader
"""

from wiki_rag.retrieval.document import (
    DOCUMENT_MARKER,
    QUERY_MARKER,
    WIKI_COLLECTION,
    WIKI_VECTOR_FIELD,
    WikiArticle,
    strip_document_marker,
    wiki_schema,
)
from wiki_rag.retrieval.store import (
    StoreConfig,
    PgVectorDocumentStore,
    InMemoryDocumentStore,
    get_document_store,
)
from wiki_rag.retrieval.corpus import iter_articles, load_corpus

__all__ = [
    # Document
    "DOCUMENT_MARKER",
    "QUERY_MARKER",
    "WIKI_COLLECTION",
    "WIKI_VECTOR_FIELD",
    "WikiArticle",
    "strip_document_marker",
    "wiki_schema",
    # Stores
    "StoreConfig",
    "PgVectorDocumentStore",
    "InMemoryDocumentStore",
    "get_document_store",
    # Corpus
    "iter_articles",
    "load_corpus",
]
