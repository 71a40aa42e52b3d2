"""Résolution d'une manche: points, exactitude de la réponse, télémétrie."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

from .errors import UnrecognizedResolutionKind
from .payloads import TelemetryEvent
from .sockets import Broadcaster
from .state import Session
from .telemetry import TelemetrySink, utcnow

logger = logging.getLogger(__name__)


class ResolutionKind(str, Enum):
    AP = "AP"  # attaquant, réponse correcte
    DP = "DP"  # défenseur, réponse correcte
    ANP = "ANP"  # attaquant, pas de points
    DNP = "DNP"  # défenseur, pas de points
    TNP = "TNP"  # temps écoulé

    @classmethod
    def parse(cls, value: Optional[str]) -> "ResolutionKind":
        try:
            return cls(value)
        except ValueError:
            raise UnrecognizedResolutionKind(value) from None


SCORING_KINDS = frozenset({ResolutionKind.AP, ResolutionKind.DP})
MISSED_KINDS = frozenset({ResolutionKind.ANP, ResolutionKind.DNP})


class Resolver:
    def __init__(self, session: Session, broadcaster: Broadcaster, telemetry: TelemetrySink) -> None:
        self.session = session
        self.broadcaster = broadcaster
        self.telemetry = telemetry

    async def resolve_game(self) -> Dict[str, Any]:
        """Consomme le type/réponse préparés, met à jour le score et diffuse
        ``game resolved``.

        Un second appel sans nouvelle préparation est traité comme un type
        inconnu: aucun changement de score.
        """
        session = self.session
        raw_kind, team_answer = session.consume_resolution()
        resolution: Dict[str, Any] = {}

        try:
            kind: Optional[ResolutionKind] = ResolutionKind.parse(raw_kind)
        except UnrecognizedResolutionKind as exc:
            logger.warning("%s: résolution sans points", exc)
            kind = None

        if kind in SCORING_KINDS:
            session.current_score += session.points_awarded
            resolution["isAnswerCorrect"] = True
            resolution["pointsAwarded"] = session.points_awarded
        elif kind in MISSED_KINDS:
            resolution["isAnswerCorrect"] = False
            resolution["pointsAwarded"] = 0
        else:
            # TNP ou type inconnu
            resolution["isAnswerCorrect"] = False
            resolution["pointsAwarded"] = 0
            team_answer = None

        resolution["teamAnswer"] = team_answer
        resolution["currentScore"] = session.current_score

        await self.telemetry.record(
            TelemetryEvent(
                user=session.participant_name,
                confederate=session.confederate_name,
                action="game resolved",
                text=team_answer,
                timestamp=utcnow().isoformat(),
                resolution=kind.value if kind else raw_kind,
            )
        )
        await self.broadcaster.emit_all("game resolved", resolution)
        return resolution
