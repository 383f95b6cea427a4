"""HTTP API - /ask and /health."""

from wiki_rag.api.app import create_app
from wiki_rag.api.routes import AskRequest, AskResponse, router

__all__ = ["create_app", "AskRequest", "AskResponse", "router"]
