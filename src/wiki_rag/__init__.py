"""
wiki-rag: a minimal retrieval-augmented generation server.

Ingests a JSONL wiki corpus into a document store that derives vectors
from text, and answers questions over HTTP by retrieving similar
passages and asking an OpenAI-compatible chat model.
"""

__version__ = "0.1.0"
