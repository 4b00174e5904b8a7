"""
Outbound request client.

Builds and issues HTTP calls for ``publish`` and ``request``, decodes the
reply, and turns failures into the typed error taxonomy:

    2xx                    ──▶ decoded JSON body
    400/401/403/404/other  ──▶ matching ResponseError
    no status at all       ──▶ RequestError

Calls are not pooled, queued, retried or rate limited; each one opens its
own ``httpx.AsyncClient``.
"""

import gzip
import json
import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from pmg_http_transport.core.config import settings
from pmg_http_transport.domain.entities import CORRELATION_ID_HEADER, INITIATOR_HEADER
from pmg_http_transport.domain.errors import RequestError, ValidationError
from pmg_http_transport.interfaces.schemas import RequestOptions
from pmg_http_transport.shared.errors.translator import error_for_status

logger = logging.getLogger(__name__)

QUERY_METHODS = ("GET", "DELETE")
JSON_CONTENT_TYPE = "application/json"


def build_url(
    topic: str,
    host: Optional[str] = None,
    port: Optional[int] = None,
    protocol: str = "http",
) -> str:
    """Build the target URL for a topic.

    With ``host`` the topic is the path on that host. Without it the topic's
    first segment names the host, e.g. ``"billing/invoice"`` targets path
    ``/invoice`` on host ``billing``.
    """
    path = topic.lstrip("/")
    if host:
        netloc = host if port is None else f"{host}:{port}"
        return f"{protocol}://{netloc}/{path}"
    head, sep, tail = path.partition("/")
    netloc = head if port is None else f"{head}:{port}"
    return f"{protocol}://{netloc}{sep}{tail}"


def to_query(message: Any) -> list[tuple[str, str]]:
    """Encode a message as query-string pairs.

    Lists and tuples become repeated keys. Nested objects are sent as JSON.

    Raises:
        ValidationError: If ``message`` is neither None nor a mapping.
    """
    if message is None:
        return []
    if not isinstance(message, Mapping):
        raise ValidationError('"message" should be a mapping for query-string methods.')
    pairs = []
    for key, value in message.items():
        items = value if isinstance(value, (list, tuple)) else [value]
        pairs.extend((str(key), _query_value(item)) for item in items)
    return pairs


def _query_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return json.dumps(value)


class OutboundClient:
    """Issues outbound calls on behalf of a transport.

    Args:
        send_gzip: Compress request bodies and ask for compressed replies.
        timeout: Default per-call timeout in seconds.
    """

    def __init__(
        self, send_gzip: bool = True, timeout: float = settings.request_timeout
    ) -> None:
        self.send_gzip = send_gzip
        self.timeout = timeout

    async def send(
        self,
        topic: str,
        message: Any,
        options: RequestOptions,
        correlation_id: str,
    ) -> Any:
        """Send ``message`` to ``topic`` and return the decoded reply.

        Raises:
            ValidationError: If ``message`` cannot be encoded.
            ResponseError: If the reply has a failure status.
            RequestError: If no reply could be obtained or decoded.
        """
        url = build_url(topic, options.host, options.port, options.protocol)
        headers = self._headers(options, correlation_id)
        params: list[tuple[str, str]] = []
        content: Optional[bytes] = None

        if options.method in QUERY_METHODS:
            params = to_query(message)
        else:
            content = self._encode_body(message, headers)

        logger.debug(
            "Sending %s %s, correlation_id=%s", options.method, url, correlation_id
        )
        try:
            async with httpx.AsyncClient(
                timeout=options.timeout or self.timeout
            ) as client:
                response = await client.request(
                    options.method,
                    url,
                    params=params,
                    content=content,
                    headers=headers,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("%s %s failed: %s", options.method, url, exc)
            raise RequestError(f"{options.method} {url} failed: {exc}", cause=exc) from exc

        if response.is_success:
            return self._decode_reply(response)

        logger.debug("%s %s returned %d", options.method, url, response.status_code)
        raise error_for_status(
            response.status_code, _error_body(response), response.reason_phrase
        )

    def _headers(self, options: RequestOptions, correlation_id: str) -> dict[str, str]:
        headers = dict(options.headers or {})
        headers[CORRELATION_ID_HEADER] = correlation_id
        if options.initiator is not None:
            headers[INITIATOR_HEADER] = options.initiator
        headers["accept"] = JSON_CONTENT_TYPE
        headers["accept-encoding"] = "gzip" if self.send_gzip else "identity"
        return headers

    def _encode_body(self, message: Any, headers: dict[str, str]) -> bytes:
        try:
            body = json.dumps({} if message is None else message).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ValidationError('"message" should be JSON-serializable.') from exc
        headers["content-type"] = JSON_CONTENT_TYPE
        if self.send_gzip:
            headers["content-encoding"] = "gzip"
            return gzip.compress(body)
        return body

    @staticmethod
    def _decode_reply(response: httpx.Response) -> Any:
        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RequestError("Malformed response body", cause=exc) from exc


def _error_body(response: httpx.Response) -> Any:
    """Decode a failure body, falling back to its text."""
    try:
        return response.json()
    except ValueError:
        return response.text or None
