"""Global exception handlers mapping domain exceptions to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pedibrief.exceptions import InputValidationError, PediBriefError, SummarizationError

log = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register exception-to-HTTP-status mappings."""

    @app.exception_handler(InputValidationError)
    async def handle_validation_error(request: Request, exc: InputValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"error": str(exc), "type": "validation_error"})

    @app.exception_handler(SummarizationError)
    async def handle_summarization_error(request: Request, exc: SummarizationError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"error": str(exc), "type": "summarization_error"})

    @app.exception_handler(PediBriefError)
    async def handle_generic_error(request: Request, exc: PediBriefError) -> JSONResponse:
        log.error("Unhandled %s on %s", type(exc).__name__, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Something went wrong. Please try again.", "type": "pedibrief_error"},
        )
