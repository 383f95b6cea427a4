"""
Unit Tests for the Corpus Loader

The store is a MagicMock so each create mutation can be inspected.
"""

import json

import pytest
from unittest.mock import MagicMock

from wiki_rag.core import CorpusError, MutationError
from wiki_rag.retrieval import WikiArticle, iter_articles, load_corpus


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def corpus_file(tmp_path):
    path = tmp_path / "wiki.jsonl"
    records = [
        {"text": "Paris is the capital of France.", "category": "geography"},
        {"text": "The Eiffel Tower was completed in 1889.", "category": "landmarks"},
        {"text": "Leonardo da Vinci painted the Mona Lisa.", "category": "art"},
    ]
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def mock_store():
    store = MagicMock()
    store.create.return_value = "bae-123"
    return store


# ---------------------------------------------------------------------------
# LOAD_CORPUS
# ---------------------------------------------------------------------------


class TestLoadCorpus:
    def test_three_lines_three_mutations(self, corpus_file, mock_store):
        """A 3-line file yields exactly 3 create mutations."""
        count = load_corpus(corpus_file, mock_store)

        assert count == 3
        assert mock_store.create.call_count == 3

    def test_text_prefixed_with_document_marker(self, corpus_file, mock_store):
        load_corpus(corpus_file, mock_store)

        for c in mock_store.create.call_args_list:
            collection, record = c.args
            assert collection == "Wiki"
            assert record["text"].startswith("search_document: ")

        first = mock_store.create.call_args_list[0].args[1]
        assert first == {
            "text": "search_document: Paris is the capital of France.",
            "category": "geography",
        }

    def test_no_vectors_written(self, corpus_file, mock_store):
        """The loader never supplies the vector field."""
        load_corpus(corpus_file, mock_store)

        for c in mock_store.create.call_args_list:
            assert set(c.args[1]) == {"text", "category"}

    def test_blank_lines_skipped(self, tmp_path, mock_store):
        path = tmp_path / "wiki.jsonl"
        path.write_text('\n{"text": "a", "category": "x"}\n\n   \n{"text": "b", "category": "y"}\n')

        assert load_corpus(path, mock_store) == 2

    def test_empty_file(self, tmp_path, mock_store):
        path = tmp_path / "wiki.jsonl"
        path.write_text("")

        assert load_corpus(path, mock_store) == 0
        mock_store.create.assert_not_called()

    def test_custom_collection(self, corpus_file, mock_store):
        load_corpus(corpus_file, mock_store, collection="Articles")

        assert mock_store.create.call_args.args[0] == "Articles"


# ---------------------------------------------------------------------------
# ERROR HANDLING
# ---------------------------------------------------------------------------


class TestLoadCorpusErrors:
    def test_missing_file(self, tmp_path, mock_store):
        with pytest.raises(CorpusError, match="cannot open corpus"):
            load_corpus(tmp_path / "missing.jsonl", mock_store)

    def test_malformed_line_aborts(self, tmp_path, mock_store):
        """Load stops at the first bad record; earlier records were submitted."""
        path = tmp_path / "wiki.jsonl"
        path.write_text(
            '{"text": "ok", "category": "x"}\n'
            '{"text": broken\n'
            '{"text": "never", "category": "y"}\n'
        )

        with pytest.raises(CorpusError, match=":2:"):
            load_corpus(path, mock_store)

        assert mock_store.create.call_count == 1

    def test_non_object_record(self, tmp_path, mock_store):
        path = tmp_path / "wiki.jsonl"
        path.write_text('["not", "an", "object"]\n')

        with pytest.raises(CorpusError, match="expected a JSON object"):
            load_corpus(path, mock_store)

    @pytest.mark.parametrize(
        "record",
        [
            {"text": {"nested": 1}, "category": "x"},
            {"text": 5, "category": "x"},
            {"text": "ok", "category": ["a", "b"]},
            {"text": False, "category": "x"},
            {"text": "ok", "category": 0},
        ],
    )
    def test_non_string_field_aborts(self, tmp_path, mock_store, record):
        """A field that is not a string stops the load before any create."""
        path = tmp_path / "wiki.jsonl"
        path.write_text(json.dumps(record) + "\n")

        with pytest.raises(CorpusError, match=":1: field .* must be a string"):
            load_corpus(path, mock_store)

        mock_store.create.assert_not_called()

    def test_bad_field_after_good_line(self, tmp_path, mock_store):
        path = tmp_path / "wiki.jsonl"
        path.write_text('{"text": "ok", "category": "x"}\n{"text": 12, "category": "y"}\n')

        with pytest.raises(CorpusError, match=":2:"):
            load_corpus(path, mock_store)

        assert mock_store.create.call_count == 1

    def test_mutation_error_propagates(self, corpus_file, mock_store):
        mock_store.create.side_effect = MutationError("store rejected record")

        with pytest.raises(MutationError):
            load_corpus(corpus_file, mock_store)

        assert mock_store.create.call_count == 1


# ---------------------------------------------------------------------------
# RECORD PARSING
# ---------------------------------------------------------------------------


class TestWikiArticle:
    def test_missing_fields_default_to_empty(self):
        article = WikiArticle.from_dict({"text": "only text"})

        assert article.category == ""
        assert article.to_record() == {"text": "search_document: only text", "category": ""}

    def test_null_fields_default_to_empty(self):
        article = WikiArticle.from_dict({"text": None, "category": None})

        assert article == WikiArticle("", "")

    def test_non_string_field_rejected(self):
        with pytest.raises(ValueError, match="'text' must be a string"):
            WikiArticle.from_dict({"text": 3.14})

    def test_iter_articles(self, corpus_file):
        articles = list(iter_articles(corpus_file))

        assert [a.category for a in articles] == ["geography", "landmarks", "art"]
        assert articles[0].text == "Paris is the capital of France."
