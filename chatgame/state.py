"""Etat de session centralisé (une seule session par processus)."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .payloads import ChatMessage


@dataclass
class Session:
    # Identités
    participant_name: Optional[str] = None
    confederate_name: str = ""

    # Chat
    messages: List[ChatMessage] = field(default_factory=list)

    # Pointeur dans le catalogue (None/None: aucun problème actif)
    current_block_index: Optional[int] = None
    current_problem_index: Optional[int] = None

    # Timer
    max_time: int = 60
    countdown: Optional[int] = None
    timer_task: Optional[asyncio.Task[Any]] = None

    # Score
    points_awarded: int = 10
    current_score: int = 0

    game_is_live: bool = False
    chimes_config: Optional[Dict[str, Any]] = None

    # Entrées de la prochaine résolution
    game_resolution_type: Optional[str] = None
    team_answer: Optional[str] = None

    def select(self, block_index: Optional[int], problem_index: Optional[int]) -> None:
        self.current_block_index = block_index
        self.current_problem_index = problem_index

    def stage_resolution(self, kind: Optional[str], answer: Optional[str]) -> None:
        self.game_resolution_type = kind
        self.team_answer = answer

    def consume_resolution(self) -> Tuple[Optional[str], Optional[str]]:
        """Retourne puis efface les entrées préparées (une seule fois)."""
        staged = (self.game_resolution_type, self.team_answer)
        self.game_resolution_type = None
        self.team_answer = None
        return staged
