"""
CLI commands - entry points for the RAG server.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment and configuration
3. Run one-time startup (fatal on failure)
4. Do the work
5. Return exit code
"""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from wiki_rag.config import ServerConfig
from wiki_rag.core.errors import StartupError, WikiRagError
from wiki_rag.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _load_env() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def _load_config(args: argparse.Namespace) -> ServerConfig:
    config = ServerConfig.from_env()
    if getattr(args, "corpus", None):
        config.corpus_path = args.corpus
    if getattr(args, "host", None):
        config.host = args.host
    if getattr(args, "port", None):
        config.port = args.port
    setup_logging(config.log_level)
    return config


def _add_corpus_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--corpus", help="Path to the JSONL corpus (default: $CORPUS_PATH)")


def run_serve_cli() -> int:
    """Load the knowledge base, then serve HTTP until interrupted."""
    import uvicorn

    from wiki_rag.api import create_app
    from wiki_rag.observability import init_phoenix, shutdown_phoenix
    from wiki_rag.service import build_service

    parser = argparse.ArgumentParser(description="Run the RAG HTTP server")
    _add_corpus_arg(parser)
    parser.add_argument("--host", help="Listen address (default: $HOST)")
    parser.add_argument("--port", type=int, help="Listen port (default: $PORT)")
    args = parser.parse_args()

    try:
        config = _load_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    init_phoenix()
    try:
        service = build_service(config)
    except StartupError as e:
        logger.critical(f"Failed KB setup: {e}")
        shutdown_phoenix()
        return 1

    logger.info(
        f"Knowledge base initialized and HTTP API server is running at {config.host}:{config.port}"
    )
    try:
        uvicorn.run(create_app(service), host=config.host, port=config.port, log_config=None)
    finally:
        shutdown_phoenix()
    return 0


def run_load_cli() -> int:
    """Load the corpus into the configured store and report the count."""
    from wiki_rag.service import build_embeddings, prepare_store

    parser = argparse.ArgumentParser(description="Load the corpus into the document store")
    _add_corpus_arg(parser)
    args = parser.parse_args()

    try:
        config = _load_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        store, count = prepare_store(config, build_embeddings(config))
    except StartupError as e:
        logger.critical(f"Failed KB setup: {e}")
        return 1

    store.close()
    print(f"Loaded {count} documents from {config.corpus_path}")
    return 0


def run_ask_cli() -> int:
    """Answer one question from the command line."""
    from wiki_rag.service import build_service

    parser = argparse.ArgumentParser(description="Ask a single question")
    parser.add_argument("question", help="The question to answer")
    _add_corpus_arg(parser)
    parser.add_argument("--show-context", action="store_true", help="Print retrieved snippets")
    args = parser.parse_args()

    if not args.question.strip():
        print("Question must not be empty", file=sys.stderr)
        return 2

    try:
        config = _load_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        service = build_service(config)
    except StartupError as e:
        logger.critical(f"Failed KB setup: {e}")
        return 1

    try:
        if args.show_context:
            for snippet in service.pipeline.retrieve(args.question):
                print(f"  - {snippet}")
        print(service.pipeline.answer(args.question))
    except WikiRagError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        service.close()
    return 0


def main() -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        wiki-rag serve            # Load corpus and serve HTTP on :8080
        wiki-rag load             # Load corpus only, report count
        wiki-rag ask "question"   # One-off answer
    """
    _load_env()

    parser = argparse.ArgumentParser(
        description="Wiki retrieval-augmented generation server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  serve   Load the corpus and run the HTTP API
  load    Load the corpus and print how many documents were stored
  ask     Answer one question and exit

Examples:
  wiki-rag serve --port 9000
  wiki-rag ask "Who painted the Mona Lisa?" --show-context
        """,
    )

    parser.add_argument(
        "command",
        choices=["serve", "load", "ask"],
        help="Command to run",
    )

    # Parse just the command first
    args, remaining = parser.parse_known_args()

    commands = {
        "serve": run_serve_cli,
        "load": run_load_cli,
        "ask": run_ask_cli,
    }

    # Re-inject remaining args for the subcommand
    sys.argv = [sys.argv[0]] + remaining

    try:
        return commands[args.command]()
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
