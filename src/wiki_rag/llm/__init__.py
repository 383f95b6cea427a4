"""LLM module - chat completion against an OpenAI-compatible endpoint."""

from wiki_rag.llm.openai_chat import (
    OpenAIChatCompletion,
    MockCompletion,
    get_completion_provider,
)

__all__ = [
    "OpenAIChatCompletion",
    "MockCompletion",
    "get_completion_provider",
]
