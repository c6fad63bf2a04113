"""relaybot: FastAPI application entrypoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial

import structlog
import uvicorn
from fastapi import FastAPI

from relaybot import __version__
from relaybot.config import BotConfig, get_config
from relaybot.debug import DebugConsole
from relaybot.dispatch.dispatcher import Dispatcher
from relaybot.logging import setup_logging
from relaybot.mode import ModeGate
from relaybot.plugins.loader import load_plugins
from relaybot.plugins.registry import CommandRegistry
from relaybot.transport.base import Transport
from relaybot.transport.bridge import BridgeTransport

logger = structlog.get_logger()


async def build_dispatcher(config: BotConfig, transport: Transport) -> Dispatcher:
    """Wire registry, mode gate and debug console around a transport."""
    registry = CommandRegistry(partial(load_plugins, config.plugins_dir))
    count = await registry.reload()
    logger.info("relaybot.commands.loaded", count=count, plugins_dir=config.plugins_dir)

    debug = DebugConsole(config.debug) if config.debug.enabled else None
    if debug is None:
        logger.info("relaybot.debug.disabled")

    return Dispatcher(
        config=config,
        registry=registry,
        gate=ModeGate(),
        transport=transport,
        debug=debug,
    )


def create_app(config: BotConfig | None = None, transport: Transport | None = None) -> FastAPI:
    """Create the FastAPI application.

    ``config`` and ``transport`` default to the global config and the HTTP
    bridge transport.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cfg = config or get_config()
        logger.info("relaybot.starting", version=__version__, bot_name=cfg.bot_name)

        active_transport = transport or BridgeTransport(cfg.bridge)
        if isinstance(active_transport, BridgeTransport):
            await active_transport.start()

        dispatcher = await build_dispatcher(cfg, active_transport)

        app.state.config = cfg
        app.state.transport = active_transport
        app.state.registry = dispatcher.registry
        app.state.gate = dispatcher.gate
        app.state.dispatcher = dispatcher

        logger.info(
            "relaybot.ready",
            transport=active_transport.name,
            commands=len(dispatcher.registry),
        )

        yield

        logger.info("relaybot.shutting_down")
        if isinstance(active_transport, BridgeTransport):
            await active_transport.stop()
        logger.info("relaybot.stopped")

    app = FastAPI(
        title="relaybot",
        version=__version__,
        description="Inbound message dispatch core for chat bots.",
        lifespan=lifespan,
    )

    from relaybot.api.routes.commands import router as commands_router
    from relaybot.api.routes.events import router as events_router
    from relaybot.api.routes.health import router as health_router

    app.include_router(health_router, tags=["health"])
    app.include_router(events_router, tags=["events"])
    app.include_router(commands_router, tags=["commands"])

    return app


def main() -> None:
    """Run the server directly."""
    config = get_config()
    setup_logging(level=config.log_level, fmt=config.log_format, bot_name=config.bot_name)
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level="warning",
    )


if __name__ == "__main__":
    main()
