"""Map promptcanvas exceptions onto JSON error responses.

Configuration problems and exhausted fallback chains are 503 with a hint
about which credentials to set; missing input is 400; the rest is 500.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from promptcanvas.errors import (
    AllProvidersFailedError,
    ClassificationParseError,
    ConfigurationError,
    InvalidRequestError,
    PromptCanvasError,
)
from promptcanvas.models.responses import ErrorResponse

logger = logging.getLogger(__name__)

PROVIDER_SUGGESTION = (
    "Please configure at least one AI provider (GEMINI_API_KEY, OPENAI_API_KEY, "
    "ANTHROPIC_API_KEY, or REPLICATE_API_TOKEN) in your environment variables."
)


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


async def handle_promptcanvas_error(request: Request, exc: PromptCanvasError) -> JSONResponse:
    if isinstance(exc, InvalidRequestError):
        return _error(400, ErrorResponse(message=exc.message))

    if isinstance(exc, (ConfigurationError, AllProvidersFailedError)):
        logger.error("%s %s: %s", request.method, request.url.path, exc.message)
        return _error(503, ErrorResponse(message=exc.message, suggestion=PROVIDER_SUGGESTION))

    if isinstance(exc, ClassificationParseError):
        logger.error("Unparseable classification answer on %s", request.url.path)
        return _error(500, ErrorResponse(message=exc.message, raw_response=exc.raw_response))

    logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
    return _error(500, ErrorResponse(message=exc.message))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PromptCanvasError, handle_promptcanvas_error)
