"""
HTTP transport for the message bus.

Composition root that implements the ``MessageTransport`` contract over HTTP:
- routing keys become URL paths (``billing:invoice`` → ``/billing/invoice``)
- listeners live in a copy-on-write registry that can change at runtime
- inbound requests are dispatched through ``InboundHandler``
- outbound calls go through ``OutboundClient``
- the server is run and stopped by ``ServerLifecycle``

Usage:
    transport = HTTPTransport(port=3000)
    transport.add_listener("billing:invoice", handle_invoice, method="post")
    await transport.listen()
    reply = await transport.request(
        "billing:invoice", {"id": 7}, host="billing.internal", method="POST"
    )
    await transport.disconnect()
"""

import logging
import uuid
from typing import Any, Optional

from pmg_http_transport.core.config import settings
from pmg_http_transport.domain.errors import ResponseError
from pmg_http_transport.domain.ports import MessageCallback, MessageTransport
from pmg_http_transport.domain.registry import ListenerRegistry
from pmg_http_transport.domain.topic import resolve_topic
from pmg_http_transport.infrastructure.http_client import OutboundClient
from pmg_http_transport.infrastructure.server import ServerLifecycle
from pmg_http_transport.interfaces.dispatch import InboundHandler
from pmg_http_transport.interfaces.schemas import (
    ListenerOptions,
    RequestOptions,
    TransportOptions,
    parse_options,
)
from pmg_http_transport.main import create_app

logger = logging.getLogger(__name__)


class HTTPTransport(MessageTransport):
    """Message-bus transport speaking HTTP.

    Args:
        port: Port to listen on. ``0`` picks a free port.
        serve_gzip: Compress inbound responses.
        send_gzip: Compress outbound request bodies.
        host: Address to bind to.

    Unset arguments fall back to ``TransportSettings``.

    Raises:
        ValidationError: If an argument has the wrong type.
    """

    def __init__(
        self,
        port: Optional[int] = None,
        serve_gzip: Optional[bool] = None,
        send_gzip: Optional[bool] = None,
        host: Optional[str] = None,
    ) -> None:
        options = parse_options(
            TransportOptions,
            port=port,
            serve_gzip=serve_gzip,
            send_gzip=send_gzip,
            host=host,
        )
        self.port = settings.port if options.port is None else options.port
        self.host = settings.host if options.host is None else options.host
        self.serve_gzip = (
            settings.serve_gzip if options.serve_gzip is None else options.serve_gzip
        )
        self.send_gzip = (
            settings.send_gzip if options.send_gzip is None else options.send_gzip
        )

        self._registry = ListenerRegistry()
        self.app = create_app(lambda: self._registry, serve_gzip=self.serve_gzip)
        self._client = OutboundClient(
            send_gzip=self.send_gzip, timeout=settings.request_timeout
        )
        self._lifecycle = ServerLifecycle(
            self.app, self.host, self.port, settings.log_level
        )

    @property
    def registry(self) -> ListenerRegistry:
        """The listener table requests are currently dispatched against."""
        return self._registry

    @property
    def listening(self) -> bool:
        return self._lifecycle.running

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound while listening, or None."""
        return self._lifecycle.bound_port

    def resolve_topic(self, routing_key: str) -> str:
        return resolve_topic(routing_key)

    def add_listener(
        self, routing_key: str, callback: MessageCallback, method: str = "get"
    ) -> InboundHandler:
        """Bind ``callback`` to ``routing_key`` for one HTTP method.

        Args:
            routing_key: Routing key the listener answers.
            callback: Called as ``callback(payload, correlation_id, initiator)``.
            method: ``get``, ``post``, ``put``, ``delete`` or ``all``
                (case-insensitive). A listener already bound to the same
                method and path is replaced.

        Returns:
            The installed handler.

        Raises:
            ValidationError: If any argument is invalid. Nothing is
                registered in that case.
        """
        topic = self.resolve_topic(routing_key)
        options = parse_options(ListenerOptions, callback=callback, method=method)
        handler = InboundHandler(options.callback, options.method)

        # Built first, then swapped in one assignment.
        self._registry = self._registry.with_listener(options.method, topic, handler)
        logger.info("Added listener %s /%s", options.method.value.upper(), topic)
        return handler

    def remove_listener(self, routing_key: str) -> None:
        """Unbind every listener at ``routing_key``'s path, whatever its method.

        Removing a routing key with no listeners does nothing.

        Raises:
            ValidationError: If ``routing_key`` is not a string.
        """
        topic = self.resolve_topic(routing_key)
        self._registry = self._registry.without_path(topic)
        logger.info("Removed listeners at /%s", topic)

    async def connect(self) -> None:
        """HTTP needs no broker connection; present for the transport contract."""
        logger.debug("connect() is a no-op for HTTP transports")

    async def listen(self) -> None:
        """Start the inbound server on the configured host and port.

        Raises:
            OSError: If the port cannot be bound.
        """
        await self._lifecycle.start()

    async def disconnect(self) -> None:
        """Stop the inbound server, waiting for in-flight requests to finish."""
        await self._lifecycle.stop()

    async def wait_closed(self) -> None:
        """Block until the inbound server stops."""
        await self._lifecycle.wait_closed()

    async def publish(
        self, routing_key: str, message: Any = None, **options: Any
    ) -> None:
        """Send a fire-and-forget message.

        Takes the same options as ``request``. Failures reported by the
        receiving listener are absorbed; validation and delivery failures
        are not.

        Raises:
            ValidationError: If an argument is invalid.
            RequestError: If the message could not be delivered.
        """
        try:
            await self.request(routing_key, message, **options)
        except ResponseError as exc:
            logger.debug(
                "Ignoring %s from published %r: %s",
                type(exc).__name__,
                routing_key,
                exc.message,
            )

    async def request(
        self, routing_key: str, message: Any = None, **options: Any
    ) -> Any:
        """Send a message and return the listener's reply.

        Args:
            routing_key: Routing key of the target listener.
            message: JSON-serializable message. Sent as a query string for
                GET and DELETE, as a JSON body otherwise.
            **options: See ``RequestOptions``: ``host``, ``port``,
                ``protocol``, ``method``, ``correlation_id``, ``initiator``,
                ``headers``, ``timeout``.

        Returns:
            The decoded JSON reply.

        Raises:
            ValidationError: If an argument is invalid.
            ResponseError: The listener replied with a failure status.
            RequestError: The message could not be delivered.
        """
        topic = self.resolve_topic(routing_key)
        request_options = parse_options(RequestOptions, **options)
        correlation_id = request_options.correlation_id or str(uuid.uuid4())
        return await self._client.send(topic, message, request_options, correlation_id)
