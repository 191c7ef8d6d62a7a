"""
Lifecycle controller for the HTTP listener.

Owns at most one running server. ``start()`` binds synchronously and serves
on a background thread; ``stop()`` drains in-flight requests within the
configured shutdown deadline.

    ABSENT --start()--> RUNNING --stop()--> ABSENT
    ABSENT --start() [bind failure]--> StartupError
    RUNNING --stop() [drain timeout]--> ShutdownTimeoutError
"""
import socket
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

import uvicorn

from vision_service.config import Config
from vision_service.exceptions import StartupError, ShutdownTimeoutError

logger = logging.getLogger(__name__)

LISTEN_BACKLOG = 2048


@dataclass
class ServerHandle:
    """A listener that is bound and serving."""
    host: str
    port: int
    read_timeout: float
    server: uvicorn.Server
    sock: socket.socket
    thread: threading.Thread

    @property
    def address(self) -> str:
        host = "" if self.host in ("0.0.0.0", "::") else self.host
        return f"{host}:{self.port}"


class LifecycleController:
    """Starts and gracefully stops the service's HTTP listener.

    The controller does not guard against ``start()`` while running; callers
    check ``running`` first. A second bind on an occupied port fails with
    StartupError instead of creating another listener.
    """

    def __init__(self, config: Config, app_factory: Callable[[], Any]):
        self.config = config
        self._app_factory = app_factory
        self._handle: Optional[ServerHandle] = None

    @property
    def handle(self) -> Optional[ServerHandle]:
        return self._handle

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> ServerHandle:
        """Bind the configured port and begin serving in the background."""
        sock = self._bind(self.config.host, self.config.port)
        port = sock.getsockname()[1]

        uv_config = uvicorn.Config(
            self._app_factory(),
            host=self.config.host,
            port=port,
            loop="asyncio",
            log_config=None,
            log_level=self._uvicorn_log_level(),
            access_log=False,
            # uvicorn has no per-request read deadline; READ_TIMEOUT bounds
            # how long an idle keep-alive connection is held open.
            timeout_keep_alive=self.config.read_timeout,
        )
        server = uvicorn.Server(uv_config)
        thread = threading.Thread(
            target=self._serve,
            args=(server, sock),
            name=f"http-listener-{port}",
            daemon=True,
        )
        handle = ServerHandle(
            host=self.config.host,
            port=port,
            read_timeout=self.config.read_timeout,
            server=server,
            sock=sock,
            thread=thread,
        )

        logger.info(f"Starting service on {handle.address}")
        thread.start()
        self._handle = handle
        return handle

    def stop(self) -> None:
        """Gracefully shut the listener down; no-op when nothing is running."""
        handle = self._handle
        if handle is None:
            return

        timeout = self.config.shutdown_timeout
        logger.info("Shutting down server...")
        handle.server.should_exit = True
        handle.thread.join(timeout=timeout)

        if handle.thread.is_alive():
            # Abandon remaining connections so the listener thread can exit.
            handle.server.force_exit = True
            handle.sock.close()
            raise ShutdownTimeoutError(
                f"Server forced to shutdown: requests did not drain within {timeout}s",
                context={"address": handle.address, "timeout": timeout},
            )

        handle.sock.close()
        self._handle = None
        logger.info("Server stopped")

    def _uvicorn_log_level(self) -> str:
        level = self.config.log_level.lower()
        return level if level in uvicorn.config.LOG_LEVELS else "info"

    @staticmethod
    def _bind(host: str, port: int) -> socket.socket:
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(LISTEN_BACKLOG)
        except (OSError, OverflowError) as e:
            # OverflowError: port outside 0-65535
            sock.close()
            raise StartupError(
                f"Failed to start server: {e}",
                context={"host": host, "port": port},
                original_error=e,
            ) from e
        return sock

    @staticmethod
    def _serve(server: uvicorn.Server, sock: socket.socket) -> None:
        try:
            server.run(sockets=[sock])
        except Exception:
            logger.critical("HTTP listener terminated unexpectedly", exc_info=True)
