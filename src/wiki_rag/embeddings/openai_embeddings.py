"""
Embeddings Module - Single Responsibility: Generate text embeddings.

It has ONE job: convert text to vector embeddings through an
OpenAI-compatible endpoint. Ollama serves the same `/v1/embeddings`
route, so pointing `base_url` at it is all that is needed.
"""

from __future__ import annotations

import hashlib
import logging
import re

import numpy as np
from openai import OpenAI, OpenAIError

from wiki_rag.core.errors import EmbeddingError
from wiki_rag.core.protocols import EmbeddingProvider

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+")


class OpenAIEmbeddings:
    """
    OpenAI-compatible embedding provider.

    Uses nomic-embed-text by default (768 dimensions), served by Ollama.
    SDK retries are disabled; a failure surfaces immediately as
    EmbeddingError.
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = 60.0,
        client: OpenAI | None = None,
    ):
        self.model = model
        self._client = client or OpenAI(
            base_url=base_url,
            api_key=api_key or "ollama",
            timeout=timeout,
            max_retries=0,
        )

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        try:
            response = self._client.embeddings.create(
                input=[text],
                model=self.model,
            )
        except OpenAIError as e:
            raise EmbeddingError(f"embedding request failed: {e}") from e

        if not response.data:
            raise EmbeddingError("embedding response contained no vectors")
        return np.array(response.data[0].embedding, dtype=np.float32)


class MockEmbeddings:
    """
    Mock embedding provider for testing without API calls.

    Hashes each word into a fixed-width bag-of-words vector, so texts
    sharing vocabulary land close together. NOT for production use.
    """

    def __init__(self, dimensions: int = 768):
        self._dimensions = dimensions

    def embed(self, text: str) -> np.ndarray:
        """Generate a deterministic unit vector from the words of `text`."""
        vec = np.zeros(self._dimensions, dtype=np.float32)
        for token in _TOKEN_RE.findall(text.lower()):
            h = hashlib.sha256(token.encode()).digest()
            vec[int.from_bytes(h[:4], "big") % self._dimensions] += 1.0
        norm = np.linalg.norm(vec)
        if norm > 0:
            vec /= norm
        return vec


def get_embedding_provider(
    use_mock: bool = False,
    model: str = "nomic-embed-text",
    base_url: str | None = None,
    api_key: str | None = None,
    timeout: float = 60.0,
    dimensions: int = 768,
) -> EmbeddingProvider:
    """
    Factory function to get the appropriate embedding provider.

    Args:
        use_mock: If True, return MockEmbeddings (for testing/offline runs)
    """
    if use_mock:
        logger.info("Using mock embeddings (dimensions=%d)", dimensions)
        return MockEmbeddings(dimensions=dimensions)
    return OpenAIEmbeddings(model=model, base_url=base_url, api_key=api_key, timeout=timeout)
