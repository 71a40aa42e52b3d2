"""Initialisation Socket.IO asynchrone et diffusion des notifications."""

from __future__ import annotations

from typing import Any, List, Optional

import socketio


def create_socket_server(cors_allowed_origins: List[str] | str = "*") -> socketio.AsyncServer:
    # Async Server pour ASGI
    return socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=cors_allowed_origins)


class Broadcaster:
    """Push sans accusé de réception ni rejeu (au plus une fois)."""

    def __init__(self, sio: Any) -> None:
        self.sio = sio

    async def emit_all(self, event: str, data: Any = None) -> None:
        await self.sio.emit(event, data)

    async def emit_others(self, sender_sid: str, event: str, data: Any = None) -> None:
        await self.sio.emit(event, data, skip_sid=sender_sid)

    async def emit_to(self, sid: Optional[str], event: str, data: Any = None) -> None:
        await self.sio.emit(event, data, to=sid)
