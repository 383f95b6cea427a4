"""
Chat completion client for an OpenAI-compatible endpoint.

The orchestrator depends only on CompletionProvider.complete(); this
module wraps the OpenAI SDK (pointed at Ollama by default) and a
deterministic test double.
"""

from __future__ import annotations

import logging

from openai import OpenAI, OpenAIError

from wiki_rag.core.errors import CompletionError
from wiki_rag.core.protocols import ChatMessage, CompletionProvider

logger = logging.getLogger(__name__)


class OpenAIChatCompletion:
    """Chat completion through `client.chat.completions.create`."""

    def __init__(
        self,
        model: str = "gemma:2b",
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

    def complete(self, messages: list[ChatMessage]) -> str:
        """Return the raw content of the first choice."""
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[m.to_dict() for m in messages],
            )
        except OpenAIError as e:
            raise CompletionError(f"chat completion failed: {e}") from e

        if not response.choices:
            raise CompletionError("chat completion returned no choices")

        content = response.choices[0].message.content
        if content is None:
            raise CompletionError("chat completion returned empty content")

        if response.usage is not None:
            logger.debug(
                f"Completion usage | model={self.model} | "
                f"input_tokens={response.usage.prompt_tokens} | "
                f"output_tokens={response.usage.completion_tokens}"
            )
        return content


class MockCompletion:
    """
    Completion double that answers with a fixed string.

    Records every message list it receives in `calls`.
    """

    def __init__(self, response: str = "This is a mock answer."):
        self.response = response
        self.calls: list[list[ChatMessage]] = []

    def complete(self, messages: list[ChatMessage]) -> str:
        self.calls.append(list(messages))
        return self.response


def get_completion_provider(
    use_mock: bool = False,
    model: str = "gemma:2b",
    base_url: str | None = None,
    api_key: str | None = None,
    timeout: float = 60.0,
) -> CompletionProvider:
    """Factory function to get the appropriate completion provider."""
    if use_mock:
        logger.info("Using mock completion provider")
        return MockCompletion()
    return OpenAIChatCompletion(model=model, base_url=base_url, api_key=api_key, timeout=timeout)
