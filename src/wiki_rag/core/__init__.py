"""
Core module - shared protocols, types and errors for the entire system.

USAGE:
------
from wiki_rag.core import DocumentStore, EmbeddingProvider

class MyDocumentStore:
    '''Implements DocumentStore protocol.'''
    ...
"""

from wiki_rag.core.errors import (
    WikiRagError,
    StartupError,
    CorpusError,
    SchemaError,
    MutationError,
    EmbeddingError,
    QueryError,
    CompletionError,
)
from wiki_rag.core.protocols import (
    # Protocols
    EmbeddingProvider,
    CompletionProvider,
    DocumentStore,
    # Data classes
    ChatMessage,
    CollectionSchema,
    EmbeddingField,
    SimilarityMatch,
)

__all__ = [
    # Errors
    "WikiRagError",
    "StartupError",
    "CorpusError",
    "SchemaError",
    "MutationError",
    "EmbeddingError",
    "QueryError",
    "CompletionError",
    # Protocols
    "EmbeddingProvider",
    "CompletionProvider",
    "DocumentStore",
    # Data classes
    "ChatMessage",
    "CollectionSchema",
    "EmbeddingField",
    "SimilarityMatch",
]
