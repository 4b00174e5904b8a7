"""
Domain entities for the HTTP message bus.

Plain value objects describing listeners and messages.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pmg_http_transport.domain.errors import ValidationError

CORRELATION_ID_HEADER = "x-pmg-correlationid"
INITIATOR_HEADER = "x-pmg-initiator"


class HttpMethod(Enum):
    """HTTP method a listener is bound to. ``ALL`` matches every method."""

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    ALL = "all"

    @classmethod
    def parse(cls, value: Any) -> "HttpMethod":
        """Return the member named by ``value``, ignoring case.

        Raises:
            ValidationError: If ``value`` is not a supported method name.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValidationError(f"{value!r} is an unsupported method.")
        try:
            return cls(value.lower())
        except ValueError as exc:
            raise ValidationError(f"{value} is an unsupported method.") from exc

    @property
    def reads_query(self) -> bool:
        """Whether messages for this method travel in the query string."""
        return self in (HttpMethod.GET, HttpMethod.DELETE)


@dataclass(frozen=True)
class InboundMessage:
    """A message received by a listener, with its tracing metadata."""

    payload: Any
    correlation_id: Optional[str] = None
    initiator: Optional[str] = None


@dataclass(frozen=True)
class ListenerEntry:
    """A handler bound to one (method, path) pair."""

    method: HttpMethod
    path: str
    handler: Any
