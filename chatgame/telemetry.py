"""Journaux durables: CSV de télémétrie par (utilisateur, jour) et logs texte.

Les écritures disque partent dans un thread (asyncio.to_thread) pour ne jamais
bloquer la boucle d'événements (ticks du timer, autres clients). Un échec
d'écriture est journalisé et n'interrompt pas le traitement des commandes.
"""

from __future__ import annotations

import asyncio
import csv
import logging
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Optional, TextIO, Tuple

from .errors import SinkWriteError
from .payloads import TelemetryEvent

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("USER", "CONFEDERATE", "ACTION", "TEXT", "TIMESTAMP", "X", "Y", "RESOLUTION")
CSV_FIELDS = ("user", "confederate", "action", "text", "timestamp", "x", "y", "resolution")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def safe_filename_part(value: Optional[str], default: str = "anonymous") -> str:
    cleaned = _UNSAFE_CHARS.sub("_", (value or "").strip()).strip("._")
    return cleaned or default


def file_timestamp(moment: datetime) -> str:
    # ':' interdit dans les noms de fichiers sous Windows
    return moment.isoformat(timespec="milliseconds").replace(":", "-").replace("+00-00", "Z")


class TelemetrySink:
    """Un fichier CSV par (utilisateur, jour), ouvert à la première écriture."""

    def __init__(self, directory: Path, clock: Callable[[], datetime] = utcnow) -> None:
        self.directory = Path(directory)
        self._clock = clock
        self._handles: Dict[Tuple[str, str], TextIO] = {}
        self._lock = threading.Lock()

    def path_for(self, user: Optional[str], day: str) -> Path:
        return self.directory / f"telemetry_data_{safe_filename_part(user)}_{day}.csv"

    async def record(self, event: TelemetryEvent) -> bool:
        """Ajoute une ligne; False si l'écriture a échoué."""
        day = self._clock().date().isoformat()
        try:
            await asyncio.to_thread(self._append, event, day)
        except SinkWriteError as exc:
            logger.error("Erreur lors de l'enregistrement de la télémétrie: %s (%s)", exc, exc.__cause__)
            return False
        return True

    def _append(self, event: TelemetryEvent, day: str) -> None:
        user = safe_filename_part(event.user)
        path = self.path_for(event.user, day)
        row = ["" if getattr(event, name) is None else getattr(event, name) for name in CSV_FIELDS]
        with self._lock:
            try:
                handle = self._handles.get((user, day))
                if handle is None:
                    handle = self._open(user, day, path)
                csv.writer(handle).writerow(row)
                handle.flush()
            except OSError as exc:
                self._discard((user, day))
                raise SinkWriteError(path) from exc

    def _open(self, user: str, day: str, path: Path) -> TextIO:
        # Changement de jour: on ferme les fichiers précédents de cet utilisateur
        for key in [key for key in self._handles if key[0] == user]:
            self._discard(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        is_new = not path.exists() or path.stat().st_size == 0
        handle = open(path, "a", newline="", encoding="utf-8")
        if is_new:
            csv.writer(handle).writerow(CSV_COLUMNS)
        self._handles[(user, day)] = handle
        return handle

    def _discard(self, key: Tuple[str, str]) -> None:
        handle = self._handles.pop(key, None)
        if handle is not None:
            try:
                handle.close()
            except OSError:
                logger.warning("Fermeture impossible du fichier de télémétrie %s", key)

    def close(self) -> None:
        with self._lock:
            for key in list(self._handles):
                self._discard(key)


class TextLogWriter:
    """Fichiers texte horodatés (transcriptions du chat, fin de tutoriel)."""

    def __init__(self, directory: Path, clock: Callable[[], datetime] = utcnow) -> None:
        self.directory = Path(directory)
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    async def write(self, prefix: str, content: str, moment: Optional[datetime] = None) -> Optional[Path]:
        """Ecrit le fichier ``<prefix>_<timestamp>.txt``; None en cas d'échec."""
        path = self.directory / f"{prefix}_{file_timestamp(moment or self._clock())}.txt"
        try:
            await asyncio.to_thread(self._append, path, content)
        except SinkWriteError as exc:
            logger.error("Erreur lors de l'enregistrement du log: %s (%s)", exc, exc.__cause__)
            return None
        logger.info("Log enregistré: %s", path.name)
        return path

    @staticmethod
    def _append(path: Path, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(content)
        except OSError as exc:
            raise SinkWriteError(path) from exc
