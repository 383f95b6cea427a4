"""
System prompt for the answering model.

render_system_prompt() is a PURE FUNCTION - same contexts always produce
the same prompt - so it can be tested without any LLM call.
"""

from __future__ import annotations

from typing import Sequence

FALLBACK_ANSWER = "Sorry, I couldn't generate an answer."

BASE_PERSONA = (
    "You are a helpful assistant with access to a knowledge base, tasked with answering "
    "questions about the world and its history, people, places and other things.\n"
    "Answer the question in a very concise manner. Use an unbiased and journalistic tone. "
    "Do not repeat text. Don't make anything up. If you are not sure about something, "
    "just say that you don't know."
)

GROUNDING_INSTRUCTION = (
    "Answer the question solely based on the provided search results from the knowledge base. "
    "If the search results from the knowledge base are not relevant to the question at hand, "
    "just say that you don't know. Don't make anything up."
)

NO_LEAKAGE_INSTRUCTION = (
    "Don't mention the knowledge base, context or search results in your answer."
)

CONTEXT_OPEN = "<context>"
CONTEXT_CLOSE = "</context>"


def render_context_block(contexts: Sequence[str]) -> str:
    """Wrap snippets in a bounded <context> section, one bullet each."""
    lines = [CONTEXT_OPEN]
    lines.extend(f"    - {snippet}" for snippet in contexts)
    lines.append(CONTEXT_CLOSE)
    return "\n".join(lines)


def render_system_prompt(contexts: Sequence[str]) -> str:
    """
    Render the system prompt.

    Without contexts the model answers as a general assistant. With
    contexts it is told to answer only from them. Either way it is told
    not to reveal the retrieval step.
    """
    parts = ["", BASE_PERSONA]
    if contexts:
        parts.append(GROUNDING_INSTRUCTION)
        parts.append("")
        parts.append(render_context_block(contexts))
    parts.append(NO_LEAKAGE_INSTRUCTION)
    return "\n".join(parts) + "\n"


def render_user_message(question: str) -> str:
    return f"Question: {question}"
