"""RAG module - question answering over the wiki knowledge base."""

from wiki_rag.rag.pipeline import RAGPipeline, RetrievalSettings

__all__ = ["RAGPipeline", "RetrievalSettings"]
