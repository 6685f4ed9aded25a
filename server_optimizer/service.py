"""
Optimizer Service

Composition root: builds the control loop and its collaborators from the
configuration, owns their lifecycle and serves health/state over HTTP.

Responsible for:
- Loading configuration and the message catalog
- Constructing the control loop, notifier and command handler
- Starting/stopping the loop (stop leaves the host at neutral_fps)
- Health check server and graceful shutdown on SIGINT/SIGTERM
"""

import asyncio
import signal
from dataclasses import replace
from datetime import datetime, timezone

from aiohttp import web

from server_optimizer.common.config import OptimizerConfig
from server_optimizer.common.exceptions import ConfigError, ServiceError
from server_optimizer.common.logging_setup import get_service_logger
from server_optimizer.services.commands import CommandHandler, PermissionRegistry
from server_optimizer.services.config import ConfigStore
from server_optimizer.services.control import ControlLoop
from server_optimizer.services.host import HostAdapter
from server_optimizer.services.notify import FALLBACK_LANGUAGE, MessageCatalog, Notifier

logger = get_service_logger("service")


class OptimizerService:
    """
    Owns one control loop for one host.

    start() wires everything and returns; run() additionally waits for a
    shutdown signal and stops cleanly.
    """

    def __init__(
        self,
        host: HostAdapter,
        config_store: ConfigStore,
        catalog: MessageCatalog | None = None,
        health_server: bool = True,
    ):
        self.host = host
        self.config_store = config_store
        self.catalog = catalog
        self.health_server_enabled = health_server

        self.config: OptimizerConfig | None = None
        self.notifier: Notifier | None = None
        self.loop: ControlLoop | None = None
        self.permissions: PermissionRegistry | None = None
        self.commands: CommandHandler | None = None

        self._start_time = datetime.now(timezone.utc)
        self._running = False
        self._health_runner: web.AppRunner | None = None
        self._shutdown_event = asyncio.Event()

    async def start(self) -> None:
        """Load configuration, build components and start the control loop"""
        if self._running:
            return

        logger.info("Loading ServerOptimizer...")

        self.config = self.config_store.load()
        if self.catalog is None:
            self.catalog = MessageCatalog.load()
        self.config = self._resolve_language(self.config)

        self.notifier = Notifier(
            self.host,
            self.catalog,
            language=self.config.default_language,
            prefix=self.config.chat_prefix,
        )
        self.loop = ControlLoop(self.config, self.host, self.notifier, self.config_store)
        self.permissions = PermissionRegistry(self.config.permissions)
        self.commands = CommandHandler(self.loop, self.notifier, self.permissions)

        if self.health_server_enabled:
            await self._start_health_server()

        await self.loop.start()
        self._running = True
        self._start_time = datetime.now(timezone.utc)

        logger.info(
            "ServerOptimizer has been loaded successfully",
            extra={"language": self.config.default_language},
        )

    async def stop(self) -> None:
        """Stop the control loop and the health server"""
        if not self._running:
            return

        logger.info("Stopping ServerOptimizer")
        self._running = False

        if self.loop:
            await self.loop.stop()

        await self._stop_health_server()

        logger.info("ServerOptimizer has been unloaded successfully")

    async def run(self) -> None:
        """Start, wait for a shutdown signal, then stop"""
        await self.start()
        try:
            await self.wait_for_shutdown()
        finally:
            await self.stop()

    async def wait_for_shutdown(self) -> None:
        """Block until SIGINT/SIGTERM or request_shutdown()"""
        self._setup_signal_handlers()
        await self._shutdown_event.wait()

    def request_shutdown(self) -> None:
        logger.info("Received shutdown signal")
        self._shutdown_event.set()

    @property
    def running(self) -> bool:
        return self._running

    def _setup_signal_handlers(self) -> None:
        """Setup graceful shutdown signal handlers"""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except NotImplementedError:
                signal.signal(sig, lambda s, f: self.request_shutdown())

    def _resolve_language(self, config: OptimizerConfig) -> OptimizerConfig:
        """Replace an unsupported default_language with English and save"""
        logger.info(f"Default language: {config.default_language}")

        if self.catalog.supports(config.default_language):
            return config

        logger.warning(
            f"The configured language '{config.default_language}' is not supported. "
            f"Using '{FALLBACK_LANGUAGE}' instead."
        )
        config = replace(config, default_language=FALLBACK_LANGUAGE)
        try:
            self.config_store.save(config)
        except ConfigError as e:
            logger.error(f"Failed to save language fallback: {e}")
        return config

    # ── Health server ─────────────────────────────────────────────────

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/health", self._health_handler)
        app.router.add_get("/state", self._state_handler)
        return app

    async def _start_health_server(self) -> None:
        """Start the health check HTTP server"""
        settings = self.config.service
        self._health_runner = web.AppRunner(self.build_app())
        await self._health_runner.setup()

        site = web.TCPSite(self._health_runner, settings.health_host, settings.health_port)
        try:
            await site.start()
        except OSError as e:
            await self._health_runner.cleanup()
            self._health_runner = None
            raise ServiceError(
                f"cannot bind health server to {settings.health_host}:{settings.health_port}: {e}",
                service_name="health",
            ) from e

        logger.info(f"Health server started on port {settings.health_port}")

    async def _stop_health_server(self) -> None:
        """Stop the health check HTTP server"""
        if self._health_runner:
            await self._health_runner.cleanup()
            self._health_runner = None

    async def _health_handler(self, request: web.Request) -> web.Response:
        """Handle health check requests"""
        uptime = (datetime.now(timezone.utc) - self._start_time).total_seconds()
        snapshot = self.loop.status_snapshot() if self.loop else None

        return web.json_response({
            "status": "healthy" if self._running else "unhealthy",
            "service": "server_optimizer",
            "uptime": int(uptime),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "loop_state": snapshot.state.value if snapshot else "stopped",
            "current_fps": snapshot.current_value if snapshot else None,
            "players": snapshot.current_load if snapshot else 0,
        })

    async def _state_handler(self, request: web.Request) -> web.Response:
        """Return current control state"""
        if self.loop is None:
            return web.json_response({"loop_state": "stopped"})
        return web.json_response(self.loop.get_stats())
