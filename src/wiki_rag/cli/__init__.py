"""
CLI module - unified command-line interface.

Provides entry points for:
- Serving the HTTP API
- Loading the corpus
- Asking a one-off question
"""

from wiki_rag.cli.commands import (
    main,
    run_serve_cli,
    run_load_cli,
    run_ask_cli,
)

__all__ = [
    "main",
    "run_serve_cli",
    "run_load_cli",
    "run_ask_cli",
]
