"""HTTP server — one GET route per endpoint, served by uvicorn on a background thread."""

from __future__ import annotations

import logging
import socket
import threading
import time
from collections.abc import Callable, Sequence
from types import TracebackType

import uvicorn
from fastapi import FastAPI
from fastapi import Response as HTTPResponse

from . import __version__
from .config import HealthServerSettings
from .config import settings as default_settings
from .endpoint import Endpoint
from .errors import ConfigurationError, TransportError
from .report import load_report_template

logger = logging.getLogger(__name__)


# ── Helpers ──────────────────────────────────────────────────────────────────


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (``[v6]:port`` for IPv6). An empty host means all interfaces."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ConfigurationError(f"Address must be host:port, got {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port_num = int(port)
    except ValueError as e:
        raise ConfigurationError(f"Invalid port in address {address!r}") from e
    if not 0 <= port_num <= 65535:
        raise ConfigurationError(f"Port out of range in address {address!r}")
    return host or "0.0.0.0", port_num


def _make_handler(endpoint: Endpoint) -> Callable[[], HTTPResponse]:
    def handle() -> HTTPResponse:
        response = endpoint.evaluate()
        return HTTPResponse(
            content=response.body,
            status_code=response.status_code,
            media_type=response.content_type,
        )

    handle.__name__ = f"health_{endpoint.name.replace('/', '_')}"
    return handle


# ── App factory ──────────────────────────────────────────────────────────────


def create_app(endpoints: Sequence[Endpoint]) -> FastAPI:
    """Create the FastAPI app with a GET route at ``endpoint.path`` for each endpoint.

    Raises ``ConfigurationError`` if two endpoints share a name.
    """
    app = FastAPI(
        title="Health Server",
        version=__version__,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )

    seen: set[str] = set()
    for endpoint in endpoints:
        if endpoint.path in seen:
            raise ConfigurationError(f"Duplicate endpoint name: {endpoint.name}")
        seen.add(endpoint.path)

        # Sync handler, run in FastAPI's worker thread pool.
        app.add_api_route(
            endpoint.path,
            _make_handler(endpoint),
            methods=["GET"],
            name=endpoint.name,
            include_in_schema=False,
        )

    return app


# ── Server ───────────────────────────────────────────────────────────────────


class HealthServer:
    """Serves a fixed set of endpoints on one address.

    Endpoints are validated and the report template is compiled at
    construction, so configuration errors surface before anything binds.
    ``start`` returns once the socket is listening and uvicorn is serving.
    """

    def __init__(
        self,
        address: str | None = None,
        endpoints: Sequence[Endpoint] = (),
        settings: HealthServerSettings | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.address = address or self.settings.address
        self.host, self._requested_port = parse_address(self.address)
        self.endpoints = tuple(endpoints)
        self.app = create_app(self.endpoints)
        load_report_template()

        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._socket: socket.socket | None = None

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def port(self) -> int:
        """Bound port once started (resolves port 0), else the configured port."""
        if self._socket is not None:
            return self._socket.getsockname()[1]
        return self._requested_port

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}"

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self) -> None:
        """Bind the listening socket and start serving in a background thread.

        Raises:
            TransportError: If the address cannot be bound or uvicorn fails to start
            RuntimeError: If the server is already running
        """
        if self._server is not None:
            raise RuntimeError("Health server already started")

        sock = self._bind()
        config = uvicorn.Config(
            self.app,
            lifespan="off",
            log_config=None,
            access_log=False,
            timeout_graceful_shutdown=self.settings.shutdown_timeout,
        )
        server = uvicorn.Server(config)
        thread = threading.Thread(
            target=server.run,
            kwargs={"sockets": [sock]},
            name=f"healthserver-{sock.getsockname()[1]}",
            daemon=True,
        )
        thread.start()

        while not server.started:
            if not thread.is_alive():
                sock.close()
                raise TransportError(f"Health server on {self.address} failed to start")
            time.sleep(0.01)

        self._server, self._thread, self._socket = server, thread, sock
        logger.info(
            "Health server started on %s (%d endpoints)", self.url, len(self.endpoints),
        )

    def shutdown(self) -> None:
        """Stop accepting connections and drain in-flight requests. No-op if not started."""
        server, thread, sock = self._server, self._thread, self._socket
        if server is None or thread is None or sock is None:
            return

        logger.info("Shutting down health server on %s", self.url)
        server.should_exit = True
        thread.join(timeout=self.settings.shutdown_timeout + 5)
        if thread.is_alive():
            logger.warning("Health server thread did not exit within the shutdown timeout")
        sock.close()
        self._server = self._thread = self._socket = None

    def _bind(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        try:
            return socket.create_server((self.host, self._requested_port), family=family)
        except OSError as e:
            logger.error("Failed to bind to %s: %s", self.address, e)
            raise TransportError(f"Failed to bind to {self.address}: {e}") from e

    def __enter__(self) -> HealthServer:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()
