"""Gestion des événements Socket.IO (chat, sélection des problèmes, timer, etc.)."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from . import payloads
from .catalog import Catalog
from .payloads import ChatMessage, ChimesConfig, GameResolution, ProblemSelection, TelemetryEvent
from .resolution import Resolver
from .sockets import Broadcaster
from .state import Session
from .telemetry import TelemetrySink, TextLogWriter, utcnow
from .timer import TimerEngine

logger = logging.getLogger(__name__)


class CommandRouter:
    """Table de dispatch: nom d'événement -> (validation du payload, handler)."""

    def __init__(
        self,
        session: Session,
        catalog: Catalog,
        broadcaster: Broadcaster,
        timer: TimerEngine,
        resolver: Resolver,
        telemetry: TelemetrySink,
        logs: TextLogWriter,
        problems_per_block: int = 5,
    ) -> None:
        self.session = session
        self.catalog = catalog
        self.broadcaster = broadcaster
        self.timer = timer
        self.resolver = resolver
        self.telemetry = telemetry
        self.logs = logs
        self.problems_per_block = problems_per_block

        self.handlers: Dict[str, Tuple[TypeAdapter[Any], Callable[[str, Any], Awaitable[None]]]] = {
            "set participantName": (payloads.Name, self.set_participant),
            "chat message": (TypeAdapter(ChatMessage), self.post_chat_message),
            "typing": (payloads.Name, self.notify_typing),
            "clear chat": (payloads.Nothing, self.clear_chat),
            "set confederate": (payloads.Name, self.set_confederate),
            "update problem selection": (TypeAdapter(ProblemSelection), self.select_problem),
            "first block": (payloads.Nothing, self.first_block),
            "next block": (payloads.Nothing, self.next_block),
            "next problem": (payloads.Nothing, self.next_problem),
            "start timer": (payloads.Nothing, self.start_timer),
            "stop timer": (payloads.Nothing, self.stop_timer),
            "reset timer": (payloads.Nothing, self.reset_timer),
            "set max time": (payloads.Seconds, self.set_max_time),
            "set points awarded": (payloads.Points, self.set_points_awarded),
            "telemetry event": (TypeAdapter(TelemetryEvent), self.record_telemetry),
            "start game": (payloads.Nothing, self.start_game),
            "stop game": (payloads.Nothing, self.stop_game),
            "set chimes": (TypeAdapter(ChimesConfig), self.set_chimes),
            "get chimes": (payloads.Nothing, self.get_chimes),
            "set game resolution": (TypeAdapter(GameResolution), self.set_game_resolution),
            "resolve game": (payloads.Nothing, self.resolve_game),
            "block finished": (payloads.Nothing, self.block_finished),
            "tutorial problem": (TypeAdapter(TelemetryEvent), self.tutorial_problem),
            "reset points": (payloads.Nothing, self.reset_points),
            "clear answer": (payloads.Nothing, self.clear_answer),
            "tutorial done": (payloads.Tries, self.tutorial_done),
            "game ended": (payloads.Nothing, self.game_ended),
        }

    def register(self, sio: Any) -> None:
        """Attache chaque commande au serveur Socket.IO."""
        sio.on("connect", self.on_connect)
        sio.on("disconnect", self.on_disconnect)
        for event in self.handlers:
            sio.on(event, self._bind(event))

    def _bind(self, event: str) -> Callable[..., Awaitable[None]]:
        async def handler(sid: str, data: Any = None, *_extra: Any) -> None:
            await self.dispatch(event, sid, data)

        return handler

    async def dispatch(self, event: str, sid: str, data: Any = None) -> bool:
        """Valide le payload puis exécute le handler; False si rejeté."""
        try:
            adapter, handler = self.handlers[event]
        except KeyError:
            logger.warning("Commande inconnue %r (sid=%s)", event, sid)
            return False
        try:
            value = adapter.validate_python(data)
        except ValidationError as exc:
            logger.warning("Payload rejeté pour %r (sid=%s): %s", event, sid, exc.errors())
            return False
        await handler(sid, value)
        return True

    # Cycle de vie

    async def on_connect(self, sid: str, _environ: Any = None, _auth: Any = None) -> None:
        logger.info("A user connected: %s", sid)
        await self.send_current_state(sid)

    async def on_disconnect(self, sid: str, *_reason: Any) -> None:
        logger.info("A user disconnected: %s", sid)

    async def send_current_state(self, sid: str) -> None:
        session = self.session
        timer_value = session.countdown if session.countdown is not None else session.max_time
        await self.broadcaster.emit_to(sid, "timer update", timer_value)
        await self.broadcaster.emit_to(sid, "status update", session.game_is_live)
        await self.broadcaster.emit_to(sid, "chimes updated", session.chimes_config)
        await self.broadcaster.emit_to(sid, "points update", session.current_score)
        if session.confederate_name:
            await self.broadcaster.emit_to(sid, "new confederate", session.confederate_name)
        if session.current_block_index is not None:
            await self.broadcaster.emit_to(sid, "problem update", self._problem_payload())

    # Identités et chat

    async def set_participant(self, _sid: str, name: str) -> None:
        self.session.participant_name = name

    async def post_chat_message(self, _sid: str, message: ChatMessage) -> None:
        self.session.messages.append(message)
        await self.broadcaster.emit_all("chat message", message.to_wire())

    async def notify_typing(self, sid: str, username: str) -> None:
        await self.broadcaster.emit_others(sid, "user typing", username)

    async def clear_chat(self, _sid: str, _data: Any = None) -> None:
        moment = self.logs.now()
        content = format_chat_log(self.session.messages, moment.isoformat())
        self.session.messages = []
        await self.broadcaster.emit_all("chat cleared")
        await self.logs.write("chat_logs", content, moment)

    async def set_confederate(self, _sid: str, name: str) -> None:
        self.session.confederate_name = name
        await self.broadcaster.emit_all("new confederate", name)

    # Blocs et problèmes

    def _problem_payload(self) -> Dict[str, Any]:
        return self.catalog.problem_update(
            self.session.current_block_index, self.session.current_problem_index
        )

    async def refresh_game_items(self) -> None:
        await self.broadcaster.emit_all("problem update", self._problem_payload())

    async def select_problem(self, _sid: str, selection: ProblemSelection) -> None:
        self.session.select(selection.block_index, selection.problem_index)
        await self.refresh_game_items()

    async def first_block(self, _sid: str, _data: Any = None) -> None:
        self.session.select(0, 0)
        await self.refresh_game_items()

    async def next_block(self, _sid: str, _data: Any = None) -> None:
        current = self.session.current_block_index
        block_index = current + 1 if current is not None and current >= 0 else 0
        self.session.select(block_index, 0)
        await self.refresh_game_items()

    def problem_cap(self) -> int:
        """Nombre de problèmes du bloc courant (valeur par défaut hors catalogue)."""
        block = self.catalog.block(self.session.current_block_index)
        if block is not None and len(block) > 0:
            return len(block)
        return self.problems_per_block

    async def next_problem(self, _sid: str, _data: Any = None) -> None:
        session = self.session
        await self.telemetry.record(
            self._event(
                "next problem",
                text=f"block {session.current_block_index} problem {session.current_problem_index}",
            )
        )
        current = session.current_problem_index
        following = current + 1 if current is not None and current >= 0 else 0
        if following >= self.problem_cap():
            following = 0
        session.current_problem_index = following
        await self.refresh_game_items()

    # Timer

    async def start_timer(self, _sid: str, _data: Any = None) -> None:
        await self.timer.start_timer()

    async def stop_timer(self, _sid: str, _data: Any = None) -> None:
        await self.timer.stop_timer()

    async def reset_timer(self, _sid: str, _data: Any = None) -> None:
        await self.timer.reset_timer()

    async def set_max_time(self, _sid: str, seconds: int) -> None:
        await self.timer.set_max_time(seconds)

    # Points et résolution

    async def set_points_awarded(self, _sid: str, points: int) -> None:
        self.session.points_awarded = points
        logger.info("Points awarded set to: %s", points)

    async def set_game_resolution(self, _sid: str, staged: GameResolution) -> None:
        self.session.stage_resolution(staged.game_resolution_type, staged.team_answer)
        await self.broadcaster.emit_all("set answer", staged.team_answer)

    async def resolve_game(self, _sid: str, _data: Any = None) -> None:
        await self.resolver.resolve_game()

    async def clear_answer(self, _sid: str, _data: Any = None) -> None:
        await self.broadcaster.emit_all("set answer", "")

    async def reset_points(self, _sid: str, _data: Any = None) -> None:
        self.session.current_score = 0
        await self.broadcaster.emit_all("points update", self.session.current_score)

    # Télémétrie

    def _event(self, action: str, text: Optional[str] = None) -> TelemetryEvent:
        return TelemetryEvent(
            user=self.session.participant_name,
            confederate=self.session.confederate_name,
            action=action,
            text=text,
            timestamp=utcnow().isoformat(),
        )

    async def record_telemetry(self, _sid: str, event: TelemetryEvent) -> None:
        await self.telemetry.record(event)

    async def tutorial_problem(self, _sid: str, event: TelemetryEvent) -> None:
        if not event.action:
            event = event.model_copy(update={"action": "tutorial problem"})
        await self.telemetry.record(event)

    async def block_finished(self, _sid: str, _data: Any = None) -> None:
        await self.timer.stop_timer()
        await self.telemetry.record(
            self._event("block finished", text=f"block {self.session.current_block_index}")
        )

    async def tutorial_done(self, _sid: str, tries: int) -> None:
        moment = self.logs.now()
        content = (
            f"Tutorial Done - {moment.isoformat()}\n"
            f"Participant: {self.session.participant_name or ''}\n"
            f"Tries: {tries}\n"
        )
        await self.broadcaster.emit_all("tutorial done", tries)
        await self.logs.write("tutorial_done", content, moment)

    # Statut de la partie

    async def start_game(self, _sid: str, _data: Any = None) -> None:
        self.session.game_is_live = True
        await self.broadcaster.emit_all("status update", True)
        logger.info("Game is live")

    async def stop_game(self, _sid: str, _data: Any = None) -> None:
        self.session.game_is_live = False
        await self.broadcaster.emit_all("status update", False)
        logger.info("Game is not live")

    async def game_ended(self, _sid: str, _data: Any = None) -> None:
        await self.timer.stop_timer()
        self.session.game_is_live = False
        await self.broadcaster.emit_all("status update", False)
        await self.broadcaster.emit_all("show end modal")

    async def set_chimes(self, _sid: str, chimes: ChimesConfig) -> None:
        self.session.chimes_config = chimes.to_wire()
        await self.broadcaster.emit_all("chimes updated", self.session.chimes_config)

    async def get_chimes(self, _sid: str, _data: Any = None) -> None:
        await self.broadcaster.emit_all("chimes updated", self.session.chimes_config)
        logger.info("Chimes config propagated: %s", self.session.chimes_config)


def format_chat_log(messages: Iterable[ChatMessage], timestamp: str) -> str:
    lines = [f"{m.timestamp} - {m.user}: {m.text}" for m in messages]
    return f"Chat Log - {timestamp}\n\n" + "\n".join(lines) + "\n\n"
