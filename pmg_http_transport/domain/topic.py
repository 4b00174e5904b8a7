"""
Routing key to wire path conversion.

Routing keys are hierarchical, with segments separated by ``:``.
On the wire the same hierarchy is expressed as a URL path.
"""

from typing import Any

from pmg_http_transport.domain.errors import ValidationError

HIERARCHY_SEPARATOR = ":"
PATH_SEPARATOR = "/"


def resolve_topic(routing_key: Any) -> str:
    """Convert a routing key into the path used on the wire.

    Args:
        routing_key: Hierarchical routing key, e.g. ``"billing:invoice:create"``.

    Returns:
        The key with every separator replaced, e.g. ``"billing/invoice/create"``.

    Raises:
        ValidationError: If ``routing_key`` is not a string.
    """
    if not isinstance(routing_key, str):
        raise ValidationError('"routing_key" should be a string.')
    return routing_key.replace(HIERARCHY_SEPARATOR, PATH_SEPARATOR)
