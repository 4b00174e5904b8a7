"""
Centralized error handlers for the transport's FastAPI application.

Maps message-bus errors to HTTP responses. No stack traces or internal
details are exposed to clients: unknown errors are reported with their
message text only. All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pmg_http_transport.domain.errors import ResponseError
from pmg_http_transport.shared.errors.translator import (
    HTTP_500,
    body_for_error,
    status_for_error,
)

logger = logging.getLogger(__name__)


def error_response(exc: BaseException) -> JSONResponse:
    """Build the JSON response reporting ``exc`` to the caller."""
    status_code = status_for_error(exc)
    if status_code == HTTP_500 and not isinstance(exc, ResponseError):
        logger.error("Unexpected listener error: %s", type(exc).__name__, exc_info=exc)
    body = body_for_error(exc)
    try:
        return JSONResponse(status_code=status_code, content=body)
    except (TypeError, ValueError):
        logger.warning("Error body for %s is not JSON-serializable", type(exc).__name__)
        return JSONResponse(status_code=status_code, content={"message": body["message"]})


def register_error_handlers(app: FastAPI) -> None:
    """Register all message-bus error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(ResponseError)
    async def handle_response_error(
        _request: Request, exc: ResponseError
    ) -> JSONResponse:
        """Handle typed errors raised outside a listener, e.g. unmatched routes."""
        logger.debug("Responding %d: %s", exc.status_code, exc.message)
        return error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Keep framework-level HTTP errors in the ErrorResponse shape."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )
