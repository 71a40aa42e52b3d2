"""Chargement du catalogue des blocs/problèmes (lecture seule après chargement)."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import CatalogLoadError, ProblemNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Block:
    index: int
    problems: Tuple[Any, ...]
    # Objet JSON d'origine, renvoyé tel quel aux clients
    data: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __len__(self) -> int:
        return len(self.problems)


class Catalog:
    """Suite ordonnée et immuable de blocs."""

    def __init__(self, blocks: Sequence[Block] = ()) -> None:
        self._blocks: Tuple[Block, ...] = tuple(blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def block(self, block_index: Optional[int]) -> Optional[Block]:
        if block_index is None or not 0 <= block_index < len(self._blocks):
            return None
        return self._blocks[block_index]

    def get(self, block_index: Optional[int], problem_index: Optional[int]) -> Any:
        block = self.block(block_index)
        if block is None or problem_index is None or not 0 <= problem_index < len(block):
            raise ProblemNotFound(block_index, problem_index)
        return block.problems[problem_index]

    def problem_update(
        self, block_index: Optional[int], problem_index: Optional[int]
    ) -> Dict[str, Any]:
        """Payload {block, problem}; None pour toute partie hors catalogue."""
        block = self.block(block_index)
        try:
            problem = self.get(block_index, problem_index)
        except ProblemNotFound:
            problem = None
        return {"block": block.data if block else None, "problem": problem}

    def to_json(self) -> List[Dict[str, Any]]:
        return [block.data for block in self._blocks]


def load_catalog(json_path: Path | str) -> Catalog:
    """Charge le fichier JSON des blocs.

    Format attendu: liste d'objets, chacun avec une liste ``problems``.
    """
    path = Path(json_path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as exc:
        raise CatalogLoadError(path, str(exc)) from exc
    except ValueError as exc:
        raise CatalogLoadError(path, f"invalid JSON ({exc})") from exc

    if not isinstance(raw, list):
        raise CatalogLoadError(path, "top-level value must be a list of blocks")

    blocks: List[Block] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict) or not isinstance(item.get("problems"), list):
            raise CatalogLoadError(path, f"block {index} has no 'problems' list")
        blocks.append(Block(index=index, problems=tuple(item["problems"]), data=item))
    return Catalog(blocks)


def load_catalog_or_empty(json_path: Path | str) -> Catalog:
    """Comme load_catalog, mais un catalogue vide remplace un fichier illisible."""
    try:
        catalog = load_catalog(json_path)
    except CatalogLoadError as exc:
        logger.error("Erreur lors du chargement des blocs: %s", exc)
        return Catalog()
    logger.info("%d blocs chargés depuis %s", len(catalog), json_path)
    return catalog
