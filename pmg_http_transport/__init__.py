"""
pmg-http-transport: HTTP transport for a pluggable message bus.

Routing keys map onto URL paths, listeners bind to (method, path) pairs at
runtime, and a typed error taxonomy travels as HTTP status codes.

Layers:
    - domain: Topic resolution, listener registry, errors, the transport port.
    - interfaces: Inbound dispatch adapter and Pydantic argument schemas.
    - infrastructure: Outbound httpx client and the uvicorn lifecycle.
    - shared: Cross-cutting concerns (error translation, logging).
    - core: Settings.
"""

from pmg_http_transport.domain.errors import (
    ForbiddenError,
    InvalidMessageError,
    MessageBusError,
    NotFoundError,
    RequestError,
    ResponseError,
    ResponseProcessingError,
    UnauthorizedError,
    ValidationError,
)
from pmg_http_transport.transport import HTTPTransport

__all__ = [
    "ForbiddenError",
    "HTTPTransport",
    "InvalidMessageError",
    "MessageBusError",
    "NotFoundError",
    "RequestError",
    "ResponseError",
    "ResponseProcessingError",
    "UnauthorizedError",
    "ValidationError",
]
