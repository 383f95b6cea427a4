"""
Document store implementations.

Pattern: Protocol -> Production impl -> Embedded impl -> Factory

This module contains:
1. StoreConfig - Configuration dataclass
2. PgVectorDocumentStore - PostgreSQL with pgvector
3. InMemoryDocumentStore - Embedded store (default, also used in tests)
4. get_document_store() - Factory function

Both stores derive vector fields themselves from the schema's source
fields on create. Callers hand over plain records and never write
vectors.
"""

from __future__ import annotations

import logging
import re
import threading
import uuid
from dataclasses import dataclass
from typing import Any

import numpy as np

from wiki_rag.core.errors import (
    EmbeddingError,
    MutationError,
    QueryError,
    SchemaError,
)
from wiki_rag.core.protocols import (
    CollectionSchema,
    EmbeddingProvider,
    SimilarityMatch,
)

# Optional: Only import psycopg if available (for local dev without postgres)
try:
    import psycopg
    from pgvector.psycopg import register_vector

    PGVECTOR_AVAILABLE = True
except ImportError:
    PGVECTOR_AVAILABLE = False

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _validate_schema(schema: CollectionSchema) -> None:
    names = [schema.name, *schema.text_fields, *(e.name for e in schema.embedding_fields)]
    for name in names:
        if not _IDENTIFIER_RE.match(name):
            raise SchemaError(f"invalid identifier in schema {schema.name!r}: {name!r}")

    all_fields = schema.text_fields + [e.name for e in schema.embedding_fields]
    if len(set(all_fields)) != len(all_fields):
        raise SchemaError(f"duplicate field names in schema {schema.name!r}")

    for emb in schema.embedding_fields:
        if not emb.source_fields:
            raise SchemaError(f"embedding field {emb.name!r} has no source fields")
        missing = [f for f in emb.source_fields if f not in schema.text_fields]
        if missing:
            raise SchemaError(
                f"embedding field {emb.name!r} references unknown fields {missing}"
            )


def _check_record(schema: CollectionSchema, record: dict[str, Any]) -> dict[str, str]:
    """Reject unknown or vector fields; fill missing text fields with ''."""
    for key, value in record.items():
        if key not in schema.text_fields:
            raise MutationError(f"field {key!r} is not writable on {schema.name}")
        if not isinstance(value, str):
            raise MutationError(f"field {key!r} must be a string")
    return {f: record.get(f, "") for f in schema.text_fields}


def _source_text(fields: dict[str, str], source_fields: list[str]) -> str:
    return "\n".join(fields[f] for f in source_fields)


def _cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Calculate cosine similarity between two vectors."""
    denom = np.linalg.norm(a) * np.linalg.norm(b)
    if denom == 0:
        return 0.0
    return float(np.dot(a, b) / denom)


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


@dataclass
class StoreConfig:
    """Configuration for the PostgreSQL document store."""

    connection_string: str = "postgresql://localhost/wiki_rag"
    embedding_dim: int = 768
    index_type: str = "hnsw"  # or "ivfflat"


# ---------------------------------------------------------------------------
# PGVECTOR STORE
# ---------------------------------------------------------------------------


class PgVectorDocumentStore:
    """
    PostgreSQL document store using pgvector.

    Each registered collection becomes one table: a TEXT column per text
    field and a vector column per embedding field, with a cosine index.
    """

    def __init__(
        self,
        config: StoreConfig,
        embeddings: EmbeddingProvider,
    ):
        """
        Initialize with injected dependencies.

        Args:
            config: Store configuration
            embeddings: Embedding provider used to derive vector fields
        """
        self.config = config
        self._embeddings = embeddings
        self._schemas: dict[str, CollectionSchema] = {}
        self._conn = None

    def connect(self) -> None:
        """Establish database connection."""
        if not PGVECTOR_AVAILABLE:
            raise ImportError(
                "pgvector not available. Install with: pip install pgvector psycopg[binary]"
            )

        self._conn = psycopg.connect(self.config.connection_string, autocommit=True)
        self._conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
        register_vector(self._conn)
        logger.info("Connected to PostgreSQL document store")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    @staticmethod
    def _table(collection: str) -> str:
        return collection.lower()

    def add_schema(self, schema: CollectionSchema) -> None:
        """Create the collection table and its vector indexes, starting empty."""
        _validate_schema(schema)
        if schema.name in self._schemas:
            raise SchemaError(f"schema {schema.name!r} already registered")
        if not self._conn:
            self.connect()

        table = self._table(schema.name)
        columns = ["_doc_id TEXT PRIMARY KEY"]
        columns += [f"{name} TEXT NOT NULL DEFAULT ''" for name in schema.text_fields]
        columns += [
            f"{emb.name} vector({self.config.embedding_dim})"
            for emb in schema.embedding_fields
        ]

        try:
            self._conn.execute(
                f"CREATE TABLE IF NOT EXISTS {table} ({', '.join(columns)})"
            )
            for emb in schema.embedding_fields:
                if self.config.index_type == "ivfflat":
                    index = f"USING ivfflat ({emb.name} vector_cosine_ops) WITH (lists = 100)"
                else:
                    index = f"USING hnsw ({emb.name} vector_cosine_ops) WITH (m = 16, ef_construction = 64)"
                self._conn.execute(
                    f"CREATE INDEX IF NOT EXISTS {table}_{emb.name}_idx ON {table} {index}"
                )
            # The corpus is loaded once per process; drop rows from earlier runs.
            self._conn.execute(f"TRUNCATE {table}")
        except psycopg.Error as e:
            raise SchemaError(f"failed to register schema {schema.name!r}: {e}") from e

        self._schemas[schema.name] = schema
        logger.info(f"Registered schema '{schema.name}' as table '{table}'")

    def create(self, collection: str, record: dict[str, Any]) -> str:
        """Insert one document, deriving its vector fields."""
        schema = self._schemas.get(collection)
        if schema is None:
            raise MutationError(f"unknown collection {collection!r}")
        if not self._conn:
            self.connect()

        fields = _check_record(schema, record)
        try:
            vectors = [
                self._embeddings.embed(_source_text(fields, emb.source_fields))
                for emb in schema.embedding_fields
            ]
        except EmbeddingError as e:
            raise MutationError(f"failed to derive vectors: {e}") from e

        doc_id = f"bae-{uuid.uuid4()}"
        columns = ["_doc_id", *schema.text_fields, *(e.name for e in schema.embedding_fields)]
        values = [doc_id, *(fields[f] for f in schema.text_fields), *vectors]
        placeholders = ", ".join(["%s"] * len(columns))

        try:
            self._conn.execute(
                f"INSERT INTO {self._table(collection)} ({', '.join(columns)}) "
                f"VALUES ({placeholders})",
                values,
            )
        except psycopg.Error as e:
            raise MutationError(f"insert into {collection} failed: {e}") from e
        return doc_id

    def similarity_query(
        self,
        collection: str,
        vector_field: str,
        query_vector: np.ndarray,
        *,
        min_similarity: float,
        limit: int,
    ) -> list[SimilarityMatch]:
        """Cosine similarity search: `1 - (field <=> query)`."""
        schema = self._schemas.get(collection)
        if schema is None:
            raise QueryError(f"unknown collection {collection!r}")
        if schema.embedding_field(vector_field) is None:
            raise QueryError(f"{collection} has no vector field {vector_field!r}")
        if not self._conn:
            self.connect()

        query_vector = np.asarray(query_vector, dtype=np.float32)
        text_cols = ", ".join(schema.text_fields)
        try:
            rows = self._conn.execute(
                f"""
                SELECT _doc_id, {text_cols}, 1 - ({vector_field} <=> %s) AS sim
                FROM {self._table(collection)}
                WHERE 1 - ({vector_field} <=> %s) > %s
                ORDER BY sim DESC
                LIMIT %s
                """,
                (query_vector, query_vector, min_similarity, limit),
            ).fetchall()
        except psycopg.Error as e:
            raise QueryError(f"similarity query on {collection} failed: {e}") from e

        n = len(schema.text_fields)
        return [
            SimilarityMatch(
                id=row[0],
                fields=dict(zip(schema.text_fields, row[1 : n + 1])),
                similarity=float(row[n + 1]),
            )
            for row in rows
        ]


# ---------------------------------------------------------------------------
# IN-MEMORY STORE (Embedded)
# ---------------------------------------------------------------------------


@dataclass
class _StoredDocument:
    id: str
    fields: dict[str, str]
    vectors: dict[str, np.ndarray]


class InMemoryDocumentStore:
    """
    Embedded document store.

    Implements the same interface as PgVectorDocumentStore but keeps
    everything in process memory. Ranks by brute-force cosine similarity.
    Safe to share across request threads.
    """

    def __init__(self, embeddings: EmbeddingProvider):
        """
        Initialize with injected embedding provider.

        Args:
            embeddings: Embedding provider used to derive vector fields
        """
        self._embeddings = embeddings
        self._schemas: dict[str, CollectionSchema] = {}
        self._documents: dict[str, list[_StoredDocument]] = {}
        self._lock = threading.Lock()

    def connect(self) -> None:
        """No-op for in-memory store."""
        pass

    def close(self) -> None:
        """No-op for in-memory store."""
        pass

    def add_schema(self, schema: CollectionSchema) -> None:
        """Register a collection."""
        _validate_schema(schema)
        with self._lock:
            if schema.name in self._schemas:
                raise SchemaError(f"schema {schema.name!r} already registered")
            self._schemas[schema.name] = schema
            self._documents[schema.name] = []
        logger.info(f"Registered schema '{schema.name}'")

    def create(self, collection: str, record: dict[str, Any]) -> str:
        """Store one document, deriving its vector fields."""
        schema = self._schemas.get(collection)
        if schema is None:
            raise MutationError(f"unknown collection {collection!r}")

        fields = _check_record(schema, record)
        try:
            vectors = {
                emb.name: np.asarray(
                    self._embeddings.embed(_source_text(fields, emb.source_fields)),
                    dtype=np.float32,
                )
                for emb in schema.embedding_fields
            }
        except EmbeddingError as e:
            raise MutationError(f"failed to derive vectors: {e}") from e

        doc = _StoredDocument(id=f"bae-{uuid.uuid4()}", fields=fields, vectors=vectors)
        with self._lock:
            self._documents[collection].append(doc)
        return doc.id

    def similarity_query(
        self,
        collection: str,
        vector_field: str,
        query_vector: np.ndarray,
        *,
        min_similarity: float,
        limit: int,
    ) -> list[SimilarityMatch]:
        """Search using cosine similarity."""
        schema = self._schemas.get(collection)
        if schema is None:
            raise QueryError(f"unknown collection {collection!r}")
        if schema.embedding_field(vector_field) is None:
            raise QueryError(f"{collection} has no vector field {vector_field!r}")

        query_vector = np.asarray(query_vector, dtype=np.float32)
        with self._lock:
            docs = list(self._documents[collection])

        scored = []
        for doc in docs:
            vec = doc.vectors[vector_field]
            if vec.shape != query_vector.shape:
                raise QueryError(
                    f"query vector has shape {query_vector.shape}, "
                    f"stored vectors have shape {vec.shape}"
                )
            score = _cosine_similarity(query_vector, vec)
            if score > min_similarity:
                scored.append((doc, score))

        # Sort by score descending
        scored.sort(key=lambda x: x[1], reverse=True)

        return [
            SimilarityMatch(id=doc.id, fields=dict(doc.fields), similarity=score)
            for doc, score in scored[:limit]
        ]


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_document_store(
    embeddings: EmbeddingProvider,
    use_postgres: bool = False,
    config: StoreConfig | None = None,
) -> PgVectorDocumentStore | InMemoryDocumentStore:
    """
    Factory function to get the appropriate document store.

    Args:
        embeddings: Embedding provider the store derives vectors with
        use_postgres: Use PostgreSQL store (default: False, embedded)
        config: Store configuration (uses defaults if not provided)

    Returns:
        DocumentStore implementation
    """
    if use_postgres:
        if not PGVECTOR_AVAILABLE:
            raise ImportError(
                "pgvector not available. Install with: pip install pgvector psycopg[binary]"
            )
        return PgVectorDocumentStore(config or StoreConfig(), embeddings)
    return InMemoryDocumentStore(embeddings)
