"""
Bidirectional translation between the error taxonomy and HTTP status codes.

Serving side: an exception raised by a listener becomes a status code and a
JSON body. Calling side: a failed status code becomes the matching typed
error, so callers branch on error kind regardless of the transport used.
"""

from http import HTTPStatus
from typing import Any, Optional

from pmg_http_transport.domain.errors import (
    ForbiddenError,
    InvalidMessageError,
    NotFoundError,
    ResponseError,
    ResponseProcessingError,
    UnauthorizedError,
)
from pmg_http_transport.interfaces.schemas import ErrorResponse

HTTP_500 = 500

STATUS_BY_ERROR: dict[type[ResponseError], int] = {
    InvalidMessageError: 400,
    UnauthorizedError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
}

ERROR_BY_STATUS: dict[int, type[ResponseError]] = {
    status: error for error, status in STATUS_BY_ERROR.items()
}


def status_for_error(exc: BaseException) -> int:
    """Return the HTTP status a raised error is reported with."""
    for error_type, status in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return HTTP_500


def body_for_error(exc: BaseException) -> dict[str, Any]:
    """Return the JSON body a raised error is reported with.

    A structured ``response`` carried by the error is used as the body,
    with its keys converted to strings.
    Whatever the source, the body always has a ``message`` field.
    """
    message = _message_of(exc)
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        body = {str(key): value for key, value in response.items()}
        if not isinstance(body.get("message"), str):
            body["message"] = message
    else:
        body = {"message": message}
    return ErrorResponse(**body).model_dump()


def error_for_status(
    status_code: int, body: Any = None, reason: Optional[str] = None
) -> ResponseError:
    """Rebuild the typed error for a failed response.

    Args:
        status_code: Status of the failed response.
        body: Decoded response body, kept on the error for inspection.
        reason: Reason phrase, used when the body carries no message.

    Returns:
        The response error matching ``status_code``, or
        ``ResponseProcessingError`` for any unmapped status.
    """
    error_type = ERROR_BY_STATUS.get(status_code, ResponseProcessingError)
    message = None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        message = body["message"]
    if message is None:
        message = reason or _reason_phrase(status_code)
    return error_type(message, body)


def _message_of(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    if not isinstance(message, str):
        message = str(exc)
    return message or type(exc).__name__


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"HTTP {status_code}"
