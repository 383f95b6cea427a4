"""
Document model for the retrieval system.

Single responsibility: define the ingest record, the retrieval markers
and the `Wiki` collection schema registered with the document store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from wiki_rag.core.protocols import CollectionSchema, EmbeddingField

# Asymmetric embedding models (nomic-embed-text) expect these task prefixes.
DOCUMENT_MARKER = "search_document: "
QUERY_MARKER = "search_query: "

WIKI_COLLECTION = "Wiki"
WIKI_VECTOR_FIELD = "text_v"


@dataclass
class WikiArticle:
    """
    One corpus record.

    Read once from the corpus file; never persisted by this system.
    """
    text: str
    category: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WikiArticle":
        """
        Build from a decoded JSON object.

        Missing or null keys become empty strings.

        Raises:
            ValueError: `text` or `category` holds a non-string value
        """
        values = {}
        for key in ("text", "category"):
            value = data.get(key)
            if value is None:
                value = ""
            elif not isinstance(value, str):
                raise ValueError(f"field {key!r} must be a string, got {type(value).__name__}")
            values[key] = value
        return cls(**values)

    def to_record(self) -> dict[str, str]:
        """Create-mutation input with the document marker applied."""
        return {
            "text": DOCUMENT_MARKER + self.text,
            "category": self.category,
        }


def strip_document_marker(text: str) -> str:
    """Remove the document marker from stored text, if present."""
    if text.startswith(DOCUMENT_MARKER):
        return text[len(DOCUMENT_MARKER):]
    return text


def wiki_schema(provider: str = "ollama", model: str = "nomic-embed-text") -> CollectionSchema:
    """
    The `Wiki` collection: text, category, and `text_v` derived from text.
    """
    return CollectionSchema(
        name=WIKI_COLLECTION,
        text_fields=["text", "category"],
        embedding_fields=[
            EmbeddingField(
                name=WIKI_VECTOR_FIELD,
                source_fields=["text"],
                provider=provider,
                model=model,
            )
        ],
    )
