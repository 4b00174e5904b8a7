"""
HTTP surface of the transport.

Creates the FastAPI application and wires together:
- A single catch-all route that dispatches through the listener registry
- Error handlers (centralized error-to-HTTP mapping)
- Response compression

The registry is read through a provider on every request, so listeners can
be added and removed while the server is running. No business logic
belongs here.
"""

import logging
from typing import Callable

from fastapi import FastAPI, Request
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import Response

from pmg_http_transport.core.config import settings
from pmg_http_transport.domain.errors import NotFoundError
from pmg_http_transport.domain.registry import ListenerRegistry
from pmg_http_transport.shared.errors.handlers import register_error_handlers

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Not Found"


def create_app(
    registry_provider: Callable[[], ListenerRegistry],
    serve_gzip: bool = True,
) -> FastAPI:
    """Create the FastAPI application serving a transport's listeners.

    Args:
        registry_provider: Returns the registry to dispatch against. It is
            called once per request.
        serve_gzip: Whether responses are gzip-compressed.

    Returns:
        A fully configured FastAPI application instance.
    """
    # Listener paths share the URL space, so no framework routes are exposed.
    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    if serve_gzip:
        app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size)

    register_error_handlers(app)

    async def dispatch(request: Request) -> Response:
        """Route a request to the listener registered for its method and path."""
        path = request.path_params.get("path", "")
        handler = registry_provider().lookup(request.method, path)
        if handler is None:
            logger.debug("No listener for %s /%s", request.method, path)
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return await handler(request)

    # Registered without a method list so every method reaches dispatch.
    app.add_route("/{path:path}", dispatch, include_in_schema=False)

    return app
