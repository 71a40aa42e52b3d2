"""Assemblage de l'application ASGI (FastAPI + Socket.IO)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import socketio

from .catalog import Catalog, load_catalog_or_empty
from .config import Settings, get_settings
from .events import CommandRouter
from .http import create_http_app
from .resolution import Resolver
from .sockets import Broadcaster, create_socket_server
from .state import Session
from .telemetry import TelemetrySink, TextLogWriter
from .timer import TimerEngine

logger = logging.getLogger(__name__)


@dataclass
class Server:
    """Composants partagés d'une instance du serveur."""

    settings: Settings
    catalog: Catalog
    session: Session
    sio: socketio.AsyncServer
    router: CommandRouter
    timer: TimerEngine
    telemetry: TelemetrySink
    app: socketio.ASGIApp


def build_server(settings: Optional[Settings] = None, catalog: Optional[Catalog] = None) -> Server:
    settings = settings or get_settings()
    if catalog is None:
        catalog = load_catalog_or_empty(settings.blocks_path)

    session = Session(max_time=settings.max_time, points_awarded=settings.points_awarded)
    sio = create_socket_server(settings.allowed_origins())
    broadcaster = Broadcaster(sio)
    telemetry = TelemetrySink(settings.data_dir)
    logs = TextLogWriter(settings.data_dir)
    resolver = Resolver(session, broadcaster, telemetry)
    timer = TimerEngine(session, broadcaster, resolver, tick_seconds=settings.tick_seconds)
    router = CommandRouter(
        session,
        catalog,
        broadcaster,
        timer,
        resolver,
        telemetry,
        logs,
        problems_per_block=settings.problems_per_block,
    )
    router.register(sio)

    async def shutdown() -> None:
        await timer.stop_timer()
        telemetry.close()
        logger.info("Serveur arrêté, journaux fermés")

    http_app = create_http_app(settings, catalog, session, on_shutdown=[shutdown])
    app = socketio.ASGIApp(sio, http_app)
    return Server(settings, catalog, session, sio, router, timer, telemetry, app)


def create_app(settings: Optional[Settings] = None) -> socketio.ASGIApp:
    return build_server(settings).app
