"""
Unit Tests for the Embedded Document Store

Tests schema registration, create mutations and similarity queries on
InMemoryDocumentStore.

PATTERNS:
---------
1. Mock embeddings with topic-keyed vectors so rankings are predictable
2. Verify the store, not the caller, derives vectors
3. Verify threshold, ordering and limit
"""

import pytest
from unittest.mock import MagicMock
import numpy as np

from wiki_rag.core import (
    CollectionSchema,
    EmbeddingError,
    EmbeddingField,
    MutationError,
    QueryError,
    SchemaError,
)
from wiki_rag.retrieval import InMemoryDocumentStore, get_document_store, wiki_schema


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_embeddings():
    """Create mock embeddings provider."""
    embeddings = MagicMock()

    def mock_embed(text):
        text = text.lower()
        if "paris" in text:
            return np.array([1.0, 0.0, 0.0])
        if "tower" in text:
            return np.array([0.8, 0.6, 0.0])
        if "river" in text:
            return np.array([0.6, 0.8, 0.0])
        return np.array([0.0, 0.0, 1.0])

    embeddings.embed.side_effect = mock_embed
    return embeddings


@pytest.fixture
def store(mock_embeddings):
    store = InMemoryDocumentStore(mock_embeddings)
    store.add_schema(wiki_schema())
    return store


@pytest.fixture
def store_with_docs(store):
    store.create("Wiki", {"text": "search_document: Paris facts", "category": "geo"})
    store.create("Wiki", {"text": "search_document: A tower story", "category": "landmarks"})
    store.create("Wiki", {"text": "search_document: The river Seine", "category": "geo"})
    store.create("Wiki", {"text": "search_document: Unrelated", "category": "misc"})
    return store


QUERY = np.array([1.0, 0.0, 0.0])


def stored(store):
    """Every document in the Wiki collection."""
    return store.similarity_query("Wiki", "text_v", QUERY, min_similarity=-1.0, limit=100)


# ---------------------------------------------------------------------------
# SCHEMA REGISTRATION
# ---------------------------------------------------------------------------


class TestAddSchema:
    def test_wiki_schema_shape(self):
        schema = wiki_schema("ollama", "nomic-embed-text")

        assert schema.name == "Wiki"
        assert schema.text_fields == ["text", "category"]
        vector = schema.embedding_field("text_v")
        assert vector.source_fields == ["text"]
        assert vector.provider == "ollama"
        assert vector.model == "nomic-embed-text"

    def test_duplicate_schema_rejected(self, store):
        with pytest.raises(SchemaError, match="already registered"):
            store.add_schema(wiki_schema())

    def test_unknown_source_field_rejected(self, mock_embeddings):
        store = InMemoryDocumentStore(mock_embeddings)
        schema = CollectionSchema(
            name="Bad",
            text_fields=["text"],
            embedding_fields=[EmbeddingField("v", ["body"], "ollama", "m")],
        )

        with pytest.raises(SchemaError, match="unknown fields"):
            store.add_schema(schema)

    def test_invalid_identifier_rejected(self, mock_embeddings):
        store = InMemoryDocumentStore(mock_embeddings)

        with pytest.raises(SchemaError, match="invalid identifier"):
            store.add_schema(CollectionSchema(name="Wiki; DROP", text_fields=["text"]))


# ---------------------------------------------------------------------------
# CREATE MUTATION
# ---------------------------------------------------------------------------


class TestCreate:
    def test_create_returns_doc_id(self, store):
        doc_id = store.create("Wiki", {"text": "search_document: Paris", "category": "geo"})

        assert doc_id.startswith("bae-")
        assert [d.id for d in stored(store)] == [doc_id]

    def test_ids_unique(self, store):
        a = store.create("Wiki", {"text": "x", "category": "y"})
        b = store.create("Wiki", {"text": "x", "category": "y"})

        assert a != b

    def test_vector_derived_from_text_only(self, store, mock_embeddings):
        """The store embeds the text field, not the category."""
        store.create("Wiki", {"text": "search_document: Paris", "category": "geo"})

        mock_embeddings.embed.assert_called_once_with("search_document: Paris")

    def test_vector_field_not_writable(self, store):
        with pytest.raises(MutationError, match="not writable"):
            store.create("Wiki", {"text": "x", "category": "y", "text_v": [0.1, 0.2]})

    def test_unknown_collection(self, store):
        with pytest.raises(MutationError, match="unknown collection"):
            store.create("Article", {"text": "x"})

    def test_non_string_field(self, store):
        with pytest.raises(MutationError, match="must be a string"):
            store.create("Wiki", {"text": 12, "category": "y"})

    def test_embedding_failure_is_mutation_error(self, store, mock_embeddings):
        mock_embeddings.embed.side_effect = EmbeddingError("endpoint down")

        with pytest.raises(MutationError, match="endpoint down"):
            store.create("Wiki", {"text": "x", "category": "y"})

        assert stored(store) == []


# ---------------------------------------------------------------------------
# SIMILARITY QUERY
# ---------------------------------------------------------------------------


class TestSimilarityQuery:
    def test_ranked_by_descending_similarity(self, store_with_docs):
        results = store_with_docs.similarity_query(
            "Wiki", "text_v", QUERY, min_similarity=0.5, limit=10
        )

        assert [r.fields["category"] for r in results] == ["geo", "landmarks", "geo"]
        sims = [r.similarity for r in results]
        assert sims == sorted(sims, reverse=True)
        assert sims[0] == pytest.approx(1.0)

    def test_threshold_filters(self, store_with_docs):
        """0.63 keeps the 1.0 and 0.8 matches, drops 0.6 and 0.0."""
        results = store_with_docs.similarity_query(
            "Wiki", "text_v", QUERY, min_similarity=0.63, limit=10
        )

        assert [r.text for r in results] == [
            "search_document: Paris facts",
            "search_document: A tower story",
        ]

    def test_threshold_is_strict(self, store_with_docs):
        """A similarity equal to the threshold is excluded."""
        results = store_with_docs.similarity_query(
            "Wiki", "text_v", np.array([0.0, 0.0, 1.0]), min_similarity=1.0, limit=10
        )

        assert results == []

    def test_limit(self, store_with_docs):
        results = store_with_docs.similarity_query(
            "Wiki", "text_v", QUERY, min_similarity=0.0, limit=2
        )

        assert len(results) == 2
        assert results[0].text == "search_document: Paris facts"

    def test_empty_collection(self, store):
        assert store.similarity_query("Wiki", "text_v", QUERY, min_similarity=0.63, limit=2) == []

    def test_unknown_collection(self, store):
        with pytest.raises(QueryError):
            store.similarity_query("Nope", "text_v", QUERY, min_similarity=0.6, limit=2)

    def test_unknown_vector_field(self, store):
        with pytest.raises(QueryError, match="no vector field"):
            store.similarity_query("Wiki", "body_v", QUERY, min_similarity=0.6, limit=2)

    def test_dimension_mismatch(self, store_with_docs):
        with pytest.raises(QueryError, match="shape"):
            store_with_docs.similarity_query(
                "Wiki", "text_v", np.array([1.0, 0.0]), min_similarity=0.6, limit=2
            )


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


class TestGetDocumentStore:
    def test_returns_in_memory_by_default(self, mock_embeddings):
        store = get_document_store(mock_embeddings)

        assert store.__class__.__name__ == "InMemoryDocumentStore"
        assert hasattr(store, "similarity_query")
        assert hasattr(store, "create")
