"""
HTTP routes.

Thin controllers: validate the request, hand the question to the
pipeline in Starlette's threadpool, encode the result. /ask dispatches
on method itself so that every response, 405 included, carries the same
JSON and CORS headers.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, ValidationError, field_validator
from starlette.concurrency import run_in_threadpool

from wiki_rag.core.errors import WikiRagError
from wiki_rag.rag import RAGPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

ASK_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}
PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class AskRequest(BaseModel):
    question: str

    @field_validator("question")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("question must not be empty")
        return v


class AskResponse(BaseModel):
    answer: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=ASK_HEADERS)


def method_not_allowed() -> JSONResponse:
    return _error(405, "only POST allowed")


def get_pipeline(request: Request) -> RAGPipeline:
    return request.app.state.service.pipeline


@router.api_route("/ask", methods=ALL_METHODS)
async def ask(request: Request) -> Response:
    if request.method == "OPTIONS":
        return Response(status_code=200, headers={**ASK_HEADERS, **PREFLIGHT_HEADERS})
    if request.method != "POST":
        return method_not_allowed()

    body = await request.body()
    try:
        payload = AskRequest.model_validate_json(body)
    except ValidationError:
        return _error(400, "invalid payload")

    pipeline = get_pipeline(request)
    try:
        answer = await run_in_threadpool(pipeline.answer, payload.question)
    except WikiRagError as e:
        logger.error(f"Pipeline error: {e}")
        return _error(500, f"internal error: {e}")
    except Exception as e:
        logger.exception(f"Unexpected pipeline error: {e}")
        return _error(500, f"internal error: {e}")

    return JSONResponse(
        AskResponse(answer=answer).model_dump(), status_code=200, headers=ASK_HEADERS
    )


@router.get("/health")
async def health() -> PlainTextResponse:
    return PlainTextResponse("ok")
