"""
Lifecycle controller for the inbound HTTP server.

Thin shell over uvicorn: runs ``uvicorn.Server.serve`` as an asyncio task on
the caller's event loop, reports when the socket is bound, and shuts the
server down gracefully. Shutdown waits for in-flight connections to finish
before completing, and a stopped controller can be started again.
"""

import asyncio
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

logger = logging.getLogger(__name__)

STARTUP_POLL_INTERVAL = 0.01


class ServerLifecycle:
    """Starts and stops a uvicorn server for one FastAPI application.

    Args:
        app: The application to serve.
        host: Bind address.
        port: Bind port. ``0`` picks a free port; see ``bound_port``.
        log_level: uvicorn log level.
    """

    def __init__(
        self, app: FastAPI, host: str, port: int, log_level: str = "info"
    ) -> None:
        self.app = app
        self.host = host
        self.port = port
        self.log_level = log_level.lower()
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def bound_port(self) -> Optional[int]:
        """Port the server is actually bound to, or None when stopped."""
        if self._server is None:
            return None
        for listener in self._server.servers:
            for sock in listener.sockets:
                return sock.getsockname()[1]
        return self.port

    async def start(self) -> None:
        """Bind the server and return once it accepts connections.

        Raises:
            OSError: If the server could not bind its socket.
        """
        if self._server is not None:
            return

        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_level=self.log_level,
            log_config=None,
            access_log=False,
            lifespan="off",
        )
        server = uvicorn.Server(config)
        task = asyncio.create_task(self._serve(server))

        try:
            while not server.started:
                if task.done():
                    task.result()
                    raise OSError(
                        f"Server on {self.host}:{self.port} exited during startup"
                    )
                await asyncio.sleep(STARTUP_POLL_INTERVAL)
        except BaseException:
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
            raise

        self._server = server
        self._task = task
        logger.info("Listening on %s:%s", self.host, self.bound_port)

    async def stop(self) -> None:
        """Close the listening socket and wait for connections to drain."""
        if self._server is None:
            return

        server, task = self._server, self._task
        server.should_exit = True
        try:
            await task
        finally:
            self._server = None
            self._task = None
        logger.info("Stopped listening on %s:%s", self.host, self.port)

    async def wait_closed(self) -> None:
        """Return once the server stops, whoever stopped it."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def _serve(self, server: uvicorn.Server) -> None:
        try:
            await server.serve()
        except SystemExit as exc:
            # uvicorn exits the process when it cannot bind.
            raise OSError(f"Unable to listen on {self.host}:{self.port}") from exc
