"""
Listener registry.

Maps (HTTP method, wire path) pairs to inbound handlers. A registry is an
immutable value: adding or removing a listener returns a new registry and
leaves the old one untouched, so a transport can swap its table with a
single assignment while requests are being dispatched against the old one.

Removal is path-scoped: removing a path drops its handlers under every
method, not only one.
"""

from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from pmg_http_transport.domain.entities import HttpMethod, ListenerEntry
from pmg_http_transport.domain.errors import ValidationError


def normalize_path(path: str) -> str:
    """Return ``path`` without leading or trailing slashes."""
    return path.strip("/")


class ListenerRegistry:
    """Immutable table of listeners keyed by method, then path.

    Insertion order of paths within a method is preserved. Replacing the
    handler at an existing (method, path) keeps the path's position.
    """

    def __init__(
        self, table: Optional[Mapping[HttpMethod, Mapping[str, Any]]] = None
    ) -> None:
        frozen = {}
        for method, handlers in (table or {}).items():
            if handlers:
                frozen[method] = MappingProxyType(dict(handlers))
        self._table = MappingProxyType(frozen)

    def with_listener(
        self, method: HttpMethod, path: str, handler: Any
    ) -> "ListenerRegistry":
        """Return a registry with ``handler`` installed at (method, path).

        Any handler previously installed at exactly that pair is replaced.
        """
        table = {m: dict(handlers) for m, handlers in self._table.items()}
        table.setdefault(method, {})[normalize_path(path)] = handler
        return ListenerRegistry(table)

    def without_path(self, path: str) -> "ListenerRegistry":
        """Return a registry with every listener at ``path`` removed.

        Listeners at other paths, under every method, are carried over
        into the new registry.
        """
        removed = normalize_path(path)
        table = {}
        for method, handlers in self._table.items():
            survivors = {p: h for p, h in handlers.items() if p != removed}
            if survivors:
                table[method] = survivors
        return ListenerRegistry(table)

    def lookup(self, method: str, path: str) -> Optional[Any]:
        """Return the handler serving a request, or None.

        A listener bound to the request's own method takes precedence over
        one bound with ``ALL`` at the same path. HEAD requests are served by
        GET listeners.
        """
        normalized = normalize_path(path)
        if isinstance(method, str) and method.upper() == "HEAD":
            method = HttpMethod.GET.value
        try:
            exact = HttpMethod.parse(method)
        except ValidationError:
            exact = None
        if exact is not None and exact is not HttpMethod.ALL:
            handler = self._table.get(exact, {}).get(normalized)
            if handler is not None:
                return handler
        return self._table.get(HttpMethod.ALL, {}).get(normalized)

    def entries(self) -> Iterator[ListenerEntry]:
        """Iterate over every installed listener."""
        for method, handlers in self._table.items():
            for path, handler in handlers.items():
                yield ListenerEntry(method=method, path=path, handler=handler)

    def paths(self, method: Optional[HttpMethod] = None) -> list[str]:
        """Return registered paths, optionally for a single method."""
        if method is not None:
            return list(self._table.get(method, {}))
        seen: dict[str, None] = {}
        for handlers in self._table.values():
            seen.update(dict.fromkeys(handlers))
        return list(seen)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        method, path = key
        handlers = self._table.get(method, {})
        return isinstance(path, str) and normalize_path(path) in handlers

    def __len__(self) -> int:
        return sum(len(handlers) for handlers in self._table.values())

    def __repr__(self) -> str:
        listing = ", ".join(f"{e.method.value.upper()} /{e.path}" for e in self.entries())
        return f"ListenerRegistry([{listing}])"
