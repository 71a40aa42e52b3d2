"""Exceptions du serveur.

Toutes les erreurs d'E/S sont contenues à la frontière du composant qui les
lève: elles sont journalisées, jamais renvoyées aux clients.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class ChatGameError(Exception):
    """Base de toutes les erreurs du serveur"""


class CatalogLoadError(ChatGameError):
    """Fichier des blocs absent ou mal formé"""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot load catalog {self.path}: {reason}")


class ProblemNotFound(ChatGameError):
    """Sélection bloc/problème hors du catalogue"""

    def __init__(self, block_index: Optional[int], problem_index: Optional[int]) -> None:
        self.block_index = block_index
        self.problem_index = problem_index
        super().__init__(f"No problem at block={block_index} problem={problem_index}")


class SinkWriteError(ChatGameError):
    """Echec d'écriture d'un journal (CSV ou texte)"""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Cannot write to {self.path}")


class UnrecognizedResolutionKind(ChatGameError):
    """Type de résolution inconnu (ni AP, DP, ANP, DNP, TNP)"""

    def __init__(self, kind: Any) -> None:
        self.kind = kind
        super().__init__(f"Unrecognized resolution kind: {kind!r}")
