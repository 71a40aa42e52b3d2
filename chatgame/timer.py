"""Gestion du timer (start/stop/reset/max time) et diffusion Socket.IO.

Un seul compte à rebours par session: chaque démarrage annule et remplace la
tâche précédente, et une tâche remplacée ne diffuse plus aucun tick.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Optional

from .resolution import ResolutionKind, Resolver
from .sockets import Broadcaster
from .state import Session

logger = logging.getLogger(__name__)


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    EXPIRED = "expired"


class TimerEngine:
    def __init__(
        self,
        session: Session,
        broadcaster: Broadcaster,
        resolver: Resolver,
        tick_seconds: float = 1.0,
    ) -> None:
        self.session = session
        self.broadcaster = broadcaster
        self.resolver = resolver
        self.tick_seconds = tick_seconds
        self.state = TimerState.IDLE

    async def start_timer(self) -> None:
        await self.stop_timer()
        # Une autre commande a pu démarrer un timer pendant l'attente
        self._cancel_current()
        self.session.countdown = self.session.max_time
        self.state = TimerState.RUNNING
        self.session.timer_task = asyncio.create_task(self._timer_loop())
        await self.broadcaster.emit_all("timer update", self.session.countdown)

    async def _timer_loop(self) -> None:
        me = asyncio.current_task()
        while True:
            await asyncio.sleep(self.tick_seconds)
            if self.session.timer_task is not me:
                return
            if self.session.countdown is not None and self.session.countdown > 0:
                self.session.countdown -= 1
                await self.broadcaster.emit_all("timer update", self.session.countdown)
            else:
                await self._expire()
                return

    async def _expire(self) -> None:
        # On libère la poignée avant de résoudre: un stop_timer pendant la
        # résolution ne doit pas annuler la tâche en cours.
        self.session.timer_task = None
        self.state = TimerState.EXPIRED
        self.session.game_resolution_type = ResolutionKind.TNP.value
        await self.resolver.resolve_game()

    def _cancel_current(self) -> Optional[asyncio.Task[Any]]:
        """Détache et annule la tâche courante sans attendre sa fin."""
        task = self.session.timer_task
        self.session.timer_task = None
        if task and not task.done():
            task.cancel()
            return task
        return None

    async def stop_timer(self) -> None:
        task = self._cancel_current()
        self.state = TimerState.IDLE
        if task is not None and task is not asyncio.current_task():
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def reset_timer(self) -> None:
        self.session.countdown = self.session.max_time
        await self.broadcaster.emit_all("timer update", self.session.countdown)

    async def set_max_time(self, seconds: int) -> None:
        await self.stop_timer()
        self._cancel_current()
        self.session.max_time = seconds
        await self.broadcaster.emit_all("timer update", self.session.max_time)
        logger.info("Max time set to: %s", seconds)
