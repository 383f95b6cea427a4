"""
Unit Tests for CLI Commands

Tests the CLI entry points with offline providers and a temporary corpus.
The HTTP server itself is never started.

PATTERNS:
---------
1. USE_MOCK_PROVIDERS=true so no model endpoint is needed
2. Patch uvicorn.run and build_service to test serve
3. Verify exit codes
"""

import json

import pytest
from unittest.mock import patch

from wiki_rag.cli import commands
from wiki_rag.core import StartupError
from wiki_rag.observability import reset_config, reset_tracer


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def offline_env(monkeypatch):
    monkeypatch.setenv("USE_MOCK_PROVIDERS", "true")
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.delenv("PHOENIX_ENABLED", raising=False)
    monkeypatch.delenv("CORPUS_PATH", raising=False)
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.delenv("SIMILARITY_THRESHOLD", raising=False)
    monkeypatch.delenv("RESULT_LIMIT", raising=False)
    reset_config()
    reset_tracer()
    yield
    reset_config()
    reset_tracer()


@pytest.fixture
def corpus_file(tmp_path):
    path = tmp_path / "wiki.jsonl"
    records = [
        {"text": "Paris is the capital of France.", "category": "geography"},
        {"text": "Leonardo da Vinci painted the Mona Lisa.", "category": "art"},
    ]
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# LOAD_ENV TESTS
# ---------------------------------------------------------------------------


class TestLoadEnv:
    def test_load_env_does_not_raise(self):
        """Should not raise when no .env file exists."""
        commands._load_env()


# ---------------------------------------------------------------------------
# MAIN CLI DISPATCH TESTS
# ---------------------------------------------------------------------------


class TestMainCliDispatch:
    """Test main CLI dispatches to correct handlers."""

    @pytest.mark.parametrize(
        "command,handler",
        [("serve", "run_serve_cli"), ("load", "run_load_cli"), ("ask", "run_ask_cli")],
    )
    def test_main_dispatches(self, command, handler):
        with patch.object(commands, handler) as mock_handler:
            mock_handler.return_value = 0
            with patch("sys.argv", ["wiki-rag", command]):
                result = commands.main()

            mock_handler.assert_called_once()
            assert result == 0

    def test_remaining_args_reinjected(self):
        """Subcommand arguments are passed on through sys.argv."""
        seen = {}

        def fake_load():
            import sys

            seen["argv"] = list(sys.argv)
            return 0

        with patch.object(commands, "run_load_cli", side_effect=fake_load):
            with patch("sys.argv", ["wiki-rag", "load", "--corpus", "x.jsonl"]):
                commands.main()

        assert seen["argv"][1:] == ["--corpus", "x.jsonl"]

    def test_main_handles_keyboard_interrupt(self):
        """Main should return 130 on KeyboardInterrupt."""
        with patch.object(commands, "run_serve_cli") as mock_serve:
            mock_serve.side_effect = KeyboardInterrupt()
            with patch("sys.argv", ["wiki-rag", "serve"]):
                result = commands.main()

            assert result == 130

    def test_unknown_command_exits(self):
        with patch("sys.argv", ["wiki-rag", "migrate"]):
            with pytest.raises(SystemExit):
                commands.main()


# ---------------------------------------------------------------------------
# LOAD
# ---------------------------------------------------------------------------


class TestLoadCli:
    def test_load_reports_count(self, corpus_file, capsys):
        with patch("sys.argv", ["wiki-rag", "--corpus", str(corpus_file)]):
            result = commands.run_load_cli()

        assert result == 0
        assert f"Loaded 2 documents from {corpus_file}" in capsys.readouterr().out

    def test_load_missing_corpus_fails(self, tmp_path):
        with patch("sys.argv", ["wiki-rag", "--corpus", str(tmp_path / "missing.jsonl")]):
            assert commands.run_load_cli() == 1

    def test_invalid_config_fails(self, corpus_file, monkeypatch):
        monkeypatch.setenv("RESULT_LIMIT", "two")

        with patch("sys.argv", ["wiki-rag", "--corpus", str(corpus_file)]):
            assert commands.run_load_cli() == 1


# ---------------------------------------------------------------------------
# ASK
# ---------------------------------------------------------------------------


class TestAskCli:
    def test_ask_prints_answer(self, corpus_file, capsys):
        with patch("sys.argv", ["wiki-rag", "What is the capital of France?", "--corpus", str(corpus_file)]):
            result = commands.run_ask_cli()

        assert result == 0
        assert "This is a mock answer." in capsys.readouterr().out

    def test_ask_show_context(self, corpus_file, capsys, monkeypatch):
        monkeypatch.setenv("SIMILARITY_THRESHOLD", "0.1")

        with patch(
            "sys.argv",
            ["wiki-rag", "capital of France", "--corpus", str(corpus_file), "--show-context"],
        ):
            result = commands.run_ask_cli()

        assert result == 0
        assert "  - Paris is the capital of France." in capsys.readouterr().out

    def test_blank_question(self, corpus_file):
        with patch("sys.argv", ["wiki-rag", "   ", "--corpus", str(corpus_file)]):
            assert commands.run_ask_cli() == 2

    def test_startup_failure(self, tmp_path):
        with patch("sys.argv", ["wiki-rag", "q", "--corpus", str(tmp_path / "missing.jsonl")]):
            assert commands.run_ask_cli() == 1


# ---------------------------------------------------------------------------
# SERVE
# ---------------------------------------------------------------------------


class TestServeCli:
    def test_startup_failure_exits_nonzero(self):
        """A failed knowledge base setup must not start the server."""
        with patch("wiki_rag.service.build_service", side_effect=StartupError("no corpus")):
            with patch("uvicorn.run") as mock_run:
                with patch("sys.argv", ["wiki-rag"]):
                    result = commands.run_serve_cli()

        assert result == 1
        mock_run.assert_not_called()

    def test_serves_after_startup(self, corpus_file):
        with patch("uvicorn.run") as mock_run:
            with patch("sys.argv", ["wiki-rag", "--corpus", str(corpus_file), "--port", "9001"]):
                result = commands.run_serve_cli()

        assert result == 0
        mock_run.assert_called_once()
        _, kwargs = mock_run.call_args
        assert kwargs["port"] == 9001
        assert kwargs["host"] == "0.0.0.0"

    def test_logs_running_line(self, corpus_file, caplog):
        with patch("uvicorn.run"):
            with patch("sys.argv", ["wiki-rag", "--corpus", str(corpus_file)]):
                with caplog.at_level("INFO", logger="wiki_rag.cli.commands"):
                    commands.run_serve_cli()

        assert "HTTP API server is running at 0.0.0.0:8080" in caplog.text
