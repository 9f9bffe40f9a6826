"""HTTP server exposing the index page and the metrics endpoint."""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Callable

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST

from jail_exporter.collector import Exporter
from jail_exporter.constants import ACCESS_LOG_FORMAT
from jail_exporter.errors import BindError, CollectionError
from jail_exporter.settings import ServerConfig
from jail_exporter.templates import render_index_page
from jail_exporter.validators import parse_socket_address

logger = logging.getLogger(__name__)


class ServerState(enum.Enum):
    """Lifecycle of a Server. There is no way back from SERVING to BOUND."""

    UNBOUND = "unbound"
    BOUND = "bound"
    SERVING = "serving"
    TERMINATED = "terminated"
    FAILED = "failed"


@dataclass(frozen=True)
class AppState:
    """State shared by every request handler, built once before binding."""

    exporter: Exporter
    index_page: str


APP_STATE = web.AppKey("app_state", AppState)


async def index(request: web.Request) -> web.Response:
    """Serve the pre-rendered index page."""
    state = request.app[APP_STATE]
    return web.Response(text=state.index_page, content_type="text/html")


async def metrics(request: web.Request) -> web.Response:
    """Collect and serve the current metrics.

    A failed collection only fails this request; the server keeps running.
    """
    state = request.app[APP_STATE]

    # Collection shells out to rctl(8), keep it off the event loop
    loop = asyncio.get_running_loop()
    try:
        body = await loop.run_in_executor(None, state.exporter.render_metrics)
    except CollectionError as e:
        logger.error("Error collecting metrics: %s", e, exc_info=True)
        return web.Response(status=500, text="Error collecting metrics\n")

    return web.Response(body=body, headers={"Content-Type": CONTENT_TYPE_LATEST})


class Server:
    """Builder for configuring and running the HTTP server.

    Setters return a new Server and leave the original untouched::

        Server().bind_address("[::1]:9452").telemetry_path("/jails").run()
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        exporter_factory: Callable[[], Exporter] = Exporter,
    ) -> None:
        self.config = config or ServerConfig()
        self.exporter_factory = exporter_factory
        self.state = ServerState.UNBOUND

    def _with(self, **update: str) -> "Server":
        return Server(self.config.model_copy(update=update), self.exporter_factory)

    def bind_address(self, bind_address: str) -> "Server":
        """Set the ADDR:PORT the server listens on."""
        logger.debug("Setting server bind_address to: %s", bind_address)
        return self._with(bind_address=bind_address)

    def telemetry_path(self, telemetry_path: str) -> "Server":
        """Set the path the metrics are served under."""
        logger.debug("Setting server telemetry_path to: %s", telemetry_path)
        return self._with(telemetry_path=telemetry_path)

    def build_app(self) -> web.Application:
        """Create the shared state and register the routes.

        Raises:
            RenderError: If the index page can't be rendered
        """
        exporter = self.exporter_factory()
        index_page = render_index_page(self.config.telemetry_path)

        logger.debug("Registering HTTP app routes")
        app = web.Application()
        app[APP_STATE] = AppState(exporter=exporter, index_page=index_page)
        app.router.add_get("/", index)
        app.router.add_get(self.config.telemetry_path, metrics)

        return app

    async def start(self) -> web.AppRunner:
        """Build the application and bind the listening socket.

        Returns:
            web.AppRunner: The runner, accepting connections

        Raises:
            RenderError: If the index page can't be rendered
            BindError: If the address can't be bound
        """
        bind_address = self.config.bind_address
        try:
            host, port = parse_socket_address(bind_address)
        except ValueError as e:
            self.state = ServerState.FAILED
            raise BindError(bind_address, e) from e

        try:
            app = self.build_app()
        except Exception:
            self.state = ServerState.FAILED
            raise

        runner = web.AppRunner(app, access_log_format=ACCESS_LOG_FORMAT)
        await runner.setup()

        logger.debug("Attempting to bind to: %s", bind_address)
        site = web.TCPSite(runner, host, port)
        try:
            await site.start()
        except OSError as e:
            await runner.cleanup()
            self.state = ServerState.FAILED
            raise BindError(bind_address, e) from e

        self.state = ServerState.BOUND
        return runner

    async def serve(self) -> None:
        """Start the server and serve requests until cancelled."""
        runner = await self.start()

        logger.info("Starting HTTP server on %s", self.config.bind_address)
        self.state = ServerState.SERVING
        try:
            # aiohttp gives no transport failure to await, only cancellation ends this
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.state = ServerState.TERMINATED
            raise
        finally:
            await runner.cleanup()

    def run(self) -> None:
        """Run the HTTP server, blocking until the process is stopped."""
        asyncio.run(self.serve())
