"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException

from wiki_rag.api.routes import method_not_allowed, router
from wiki_rag.service import WikiRagService


def create_app(service: WikiRagService) -> FastAPI:
    """
    Build the app around an already-initialized service.

    Startup work happens before this call, so a failed corpus load never
    produces a listening server.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        service.close()

    app = FastAPI(title="Wiki RAG", lifespan=lifespan)
    app.state.service = service
    app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # methods /ask does not list are rejected by the router itself
        if exc.status_code == 405 and request.url.path == "/ask":
            return method_not_allowed()
        return await http_exception_handler(request, exc)

    return app
