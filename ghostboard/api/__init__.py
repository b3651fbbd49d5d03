"""Router and error-handler wiring for the HTTP surface."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import GhostboardError, ValidationError
from .routers import ALL_ROUTERS

logger = logging.getLogger(__name__)


async def handle_ghostboard_error(request: Request, exc: GhostboardError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.payload(), status_code=exc.status_code)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report FastAPI's own parameter and body errors in the domain error shape."""

    detail = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or "body",
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return await handle_ghostboard_error(request, ValidationError("Invalid request", detail=detail))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GhostboardError, handle_ghostboard_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)


def register_routes(app: FastAPI) -> None:
    for router in ALL_ROUTERS:
        app.include_router(router)


__all__ = ["register_error_handlers", "register_routes"]
