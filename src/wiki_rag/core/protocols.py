"""
Core protocols defining contracts for the entire system.

All collaborators (embedding endpoint, completion endpoint, document
store) are reached through these protocols, enabling dependency
injection and easy testing.

PATTERN:
--------
- Protocol defines the contract
- Production implementation (OpenAI SDK, pgvector, embedded store)
- Test double for fast unit tests
- Factory function for instantiation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import numpy as np


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for embedding generation.

    Implementations:
    - OpenAIEmbeddings (any OpenAI-compatible endpoint, e.g. Ollama)
    - MockEmbeddings (testing)
    """

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        ...


# ---------------------------------------------------------------------------
# COMPLETION PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@dataclass
class ChatMessage:
    """One role/content pair of a chat completion request."""
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@runtime_checkable
class CompletionProvider(Protocol):
    """
    Contract for chat completion.

    Implementations:
    - OpenAIChatCompletion (any OpenAI-compatible endpoint)
    - MockCompletion (testing)
    """

    def complete(self, messages: list[ChatMessage]) -> str:
        """Return the completion text for an ordered message list."""
        ...


# ---------------------------------------------------------------------------
# DOCUMENT STORE PROTOCOL
# ---------------------------------------------------------------------------


@dataclass
class EmbeddingField:
    """
    A vector field the store derives from other fields.

    The application never writes this field; the store embeds the
    concatenated source fields with the named provider/model on create.
    """
    name: str
    source_fields: list[str]
    provider: str
    model: str


@dataclass
class CollectionSchema:
    """A collection with plain string fields and derived vector fields."""
    name: str
    text_fields: list[str]
    embedding_fields: list[EmbeddingField] = field(default_factory=list)

    def embedding_field(self, name: str) -> EmbeddingField | None:
        for emb in self.embedding_fields:
            if emb.name == name:
                return emb
        return None


@dataclass
class SimilarityMatch:
    """A stored document returned by a similarity query."""
    id: str
    fields: dict[str, str]
    similarity: float

    @property
    def text(self) -> str:
        return self.fields.get("text", "")


@runtime_checkable
class DocumentStore(Protocol):
    """
    Contract for the document store collaborator.

    Implementations:
    - InMemoryDocumentStore (embedded, default)
    - PgVectorDocumentStore (PostgreSQL with pgvector)
    """

    def connect(self) -> None:
        """Establish connection to the store."""
        ...

    def close(self) -> None:
        """Close connection to the store."""
        ...

    def add_schema(self, schema: CollectionSchema) -> None:
        """Register a collection schema."""
        ...

    def create(self, collection: str, record: dict[str, Any]) -> str:
        """Create one document and return its id."""
        ...

    def similarity_query(
        self,
        collection: str,
        vector_field: str,
        query_vector: np.ndarray,
        *,
        min_similarity: float,
        limit: int,
    ) -> list[SimilarityMatch]:
        """Return up to `limit` matches above `min_similarity`, best first."""
        ...
