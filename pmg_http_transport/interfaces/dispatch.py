"""
Inbound dispatch adapter.

Wraps a business callback into an HTTP-aware handler. Per request it reads
the tracing headers, extracts the payload, invokes the callback and turns
the outcome into a JSON response. Failures are never serialized here; they
go through the centralized error translation instead.
"""

import gzip
import inspect
import json
import logging
import zlib
from typing import Any
from urllib.parse import parse_qsl

from starlette.datastructures import ImmutableMultiDict
from starlette.requests import Request
from starlette.responses import JSONResponse

from pmg_http_transport.domain.entities import (
    CORRELATION_ID_HEADER,
    INITIATOR_HEADER,
    HttpMethod,
    InboundMessage,
)
from pmg_http_transport.domain.errors import InvalidMessageError
from pmg_http_transport.domain.ports import MessageCallback
from pmg_http_transport.shared.errors.handlers import error_response

logger = logging.getLogger(__name__)

HTTP_200 = 200
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MALFORMED_BODY = "Malformed request body"


class InboundHandler:
    """HTTP handler that feeds inbound requests to a message callback.

    Args:
        callback: Called as ``callback(payload, correlation_id, initiator)``;
            may return a value or an awaitable.
        method: Method the listener was registered with. GET and DELETE
            listeners read their payload from the query string, the others
            from the body. ``ALL`` listeners decide per request.
    """

    def __init__(self, callback: MessageCallback, method: HttpMethod) -> None:
        self.callback = callback
        self.method = method

    async def __call__(self, request: Request) -> JSONResponse:
        try:
            message = await self.extract(request)
            logger.debug(
                "Dispatching %s %s, correlation_id=%s",
                request.method,
                request.url.path,
                message.correlation_id,
            )
            result = self.callback(
                message.payload, message.correlation_id, message.initiator
            )
            if inspect.isawaitable(result):
                result = await result
            return JSONResponse(
                status_code=HTTP_200, content={} if result is None else result
            )
        except Exception as exc:
            return error_response(exc)

    async def extract(self, request: Request) -> InboundMessage:
        """Build the inbound message envelope for ``request``."""
        if self._reads_query(request):
            payload = collapse_multi(request.query_params)
        else:
            payload = await read_body(request)
        return InboundMessage(
            payload=payload,
            correlation_id=request.headers.get(CORRELATION_ID_HEADER),
            initiator=request.headers.get(INITIATOR_HEADER),
        )

    def _reads_query(self, request: Request) -> bool:
        if self.method is HttpMethod.ALL:
            return request.method.upper() in ("GET", "HEAD", "DELETE")
        return self.method.reads_query

    def __repr__(self) -> str:
        name = getattr(self.callback, "__qualname__", repr(self.callback))
        return f"InboundHandler({name}, method={self.method.value})"


def collapse_multi(params: ImmutableMultiDict) -> dict[str, Any]:
    """Flatten a multi-dict: single values stay scalar, repeats become lists."""
    payload: dict[str, Any] = {}
    for key in params.keys():
        values = params.getlist(key)
        payload[key] = values[0] if len(values) == 1 else values
    return payload


async def read_body(request: Request) -> Any:
    """Parse a request body as JSON or form data.

    An empty body parses to an empty dict. Gzip-encoded bodies are
    decompressed first.

    Raises:
        InvalidMessageError: If the body cannot be decoded.
    """
    raw = await request.body()
    if request.headers.get("content-encoding", "").lower() == "gzip":
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError, zlib.error) as exc:
            raise InvalidMessageError(MALFORMED_BODY) from exc
    if not raw.strip():
        return {}

    content_type = request.headers.get("content-type", "").lower()
    try:
        if content_type.startswith(FORM_CONTENT_TYPE):
            pairs = parse_qsl(raw.decode("utf-8"), keep_blank_values=True)
            return collapse_multi(ImmutableMultiDict(pairs))
        return json.loads(raw)
    except ValueError as exc:
        raise InvalidMessageError(MALFORMED_BODY) from exc
