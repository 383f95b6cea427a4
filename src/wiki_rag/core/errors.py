"""
Exception taxonomy for the whole system.

Two families matter to callers:
- Startup errors (corpus, schema, mutation, connect) abort the process
  before the server starts listening.
- Request errors (embedding, query) surface as HTTP 500. Completion
  errors never reach the HTTP layer; the pipeline degrades to a fallback.
"""


class WikiRagError(Exception):
    """Base class for all wiki-rag errors."""


class StartupError(WikiRagError):
    """One-time initialization failed; the server must not start."""


class CorpusError(WikiRagError):
    """The corpus file could not be read or a record failed to parse."""


class SchemaError(WikiRagError):
    """Schema registration was rejected by the document store."""


class MutationError(WikiRagError):
    """The document store rejected a create mutation."""


class EmbeddingError(WikiRagError):
    """The embedding endpoint failed to produce a vector."""


class QueryError(WikiRagError):
    """The document store failed to run a similarity query."""


class CompletionError(WikiRagError):
    """The chat completion endpoint failed or returned no choices."""
