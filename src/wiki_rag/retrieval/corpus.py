"""
Corpus loader: newline-delimited JSON -> create mutations.

Runs once at startup. The first failure aborts the whole load; there is
no partial-failure recovery.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from wiki_rag.core.errors import CorpusError
from wiki_rag.retrieval.document import WIKI_COLLECTION, WikiArticle

if TYPE_CHECKING:
    from wiki_rag.core import DocumentStore

logger = logging.getLogger(__name__)


def iter_articles(path: str | Path) -> Iterator[WikiArticle]:
    """
    Yield one WikiArticle per non-blank line of a JSONL file.

    Raises:
        CorpusError: the file cannot be opened, or a line is not a JSON object
    """
    path = Path(path)
    try:
        f = path.open(encoding="utf-8")
    except OSError as e:
        raise CorpusError(f"cannot open corpus {path}: {e}") from e

    with f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                raise CorpusError(f"{path}:{lineno}: invalid JSON: {e.msg}") from e
            if not isinstance(data, dict):
                raise CorpusError(
                    f"{path}:{lineno}: expected a JSON object, got {type(data).__name__}"
                )
            try:
                article = WikiArticle.from_dict(data)
            except ValueError as e:
                raise CorpusError(f"{path}:{lineno}: {e}") from e
            yield article


def load_corpus(
    path: str | Path,
    store: DocumentStore,
    collection: str = WIKI_COLLECTION,
) -> int:
    """
    Insert every corpus record into `collection`.

    Each record's text is prefixed with the document marker before the
    create mutation. MutationError from the store propagates unchanged.

    Returns:
        Number of documents created
    """
    created = 0
    for article in iter_articles(path):
        store.create(collection, article.to_record())
        created += 1

    logger.info(f"Loaded {created} articles from {path} into '{collection}'")
    return created
