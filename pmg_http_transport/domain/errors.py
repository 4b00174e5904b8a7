"""
Error taxonomy shared by every message-bus transport.

Three kinds of failure exist:
    - ValidationError: the caller passed malformed arguments. Raised locally
      and synchronously, never sent over the wire.
    - ResponseError family: the remote handler ran and reported an
      application-level outcome. Each member has a fixed HTTP status.
    - RequestError: the call never produced a response at all
      (connection refused, DNS failure, timeout, unreadable response).

No framework imports allowed.
"""

from typing import Any, Optional


class MessageBusError(Exception):
    """Base error for all message-bus errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(MessageBusError, TypeError):
    """Raised when a caller supplies an argument of the wrong type or value."""


class ResponseError(MessageBusError):
    """Base for application-level outcomes reported by a remote handler.

    Attributes:
        message: Human-readable error text.
        response: Structured body to send (serving side) or the decoded
            body that was received (calling side).
        status_code: HTTP status associated with the error kind.
    """

    status_code = 500

    def __init__(self, message: str, response: Optional[Any] = None) -> None:
        super().__init__(message)
        self.response = response


class InvalidMessageError(ResponseError):
    """Raised when a message is malformed or fails the handler's checks."""

    status_code = 400


class UnauthorizedError(ResponseError):
    """Raised when the caller is not authenticated."""

    status_code = 401


class ForbiddenError(ResponseError):
    """Raised when the caller is authenticated but not allowed."""

    status_code = 403


class NotFoundError(ResponseError):
    """Raised when no handler or resource exists for the message."""

    status_code = 404


class ResponseProcessingError(ResponseError):
    """Raised for any other failure reported by the remote side."""

    status_code = 500


class RequestError(MessageBusError):
    """Raised when a request could not be delivered or its reply not read."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause
