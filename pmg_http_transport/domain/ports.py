"""
Port interface (ABC) for message-bus transports.

Every transport (HTTP, AMQP, in-process, ...) offers the same capability set
so that a message-bus coordinator can compose them without knowing which
wire protocol is underneath. Concrete transports implement this interface;
the coordinator never depends on a concrete implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Union

# (payload, correlation_id, initiator) -> response, sync or async.
MessageCallback = Callable[
    [Any, Optional[str], Optional[str]],
    Union[Any, Awaitable[Any]],
]


class MessageTransport(ABC):
    """Contract shared by all message-bus transports."""

    @property
    @abstractmethod
    def listening(self) -> bool:
        """Whether the transport is currently accepting inbound messages."""
        raise NotImplementedError

    @abstractmethod
    def resolve_topic(self, routing_key: str) -> str:
        """Convert a routing key into the transport's native address."""
        raise NotImplementedError

    @abstractmethod
    def add_listener(
        self, routing_key: str, callback: MessageCallback, method: str = "get"
    ) -> Any:
        """Bind ``callback`` to messages sent to ``routing_key``.

        Returns:
            The handler installed for the routing key.
        """
        raise NotImplementedError

    @abstractmethod
    def remove_listener(self, routing_key: str) -> None:
        """Unbind every handler registered for ``routing_key``."""
        raise NotImplementedError

    @abstractmethod
    async def connect(self) -> None:
        """Connect to any services the transport depends on."""
        raise NotImplementedError

    @abstractmethod
    async def listen(self) -> None:
        """Start delivering inbound messages to registered listeners."""
        raise NotImplementedError

    @abstractmethod
    async def disconnect(self) -> None:
        """Stop listening and release every resource the transport holds."""
        raise NotImplementedError

    @abstractmethod
    async def publish(
        self, routing_key: str, message: Any = None, **options: Any
    ) -> None:
        """Send a fire-and-forget message.

        Application-level failures reported by the receiver are not surfaced.
        """
        raise NotImplementedError

    @abstractmethod
    async def request(
        self, routing_key: str, message: Any = None, **options: Any
    ) -> Any:
        """Send a message and return the receiver's reply.

        Raises:
            ResponseError: The receiver reported an application-level failure.
            RequestError: The message could not be delivered.
        """
        raise NotImplementedError
