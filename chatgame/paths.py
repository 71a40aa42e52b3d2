"""Chemins communs pour le serveur et ses ressources."""

from __future__ import annotations

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
PUBLIC_DIR = ROOT_DIR / "public"
RESOURCES_DIR = ROOT_DIR / "resources"
BLOCKS_PATH = RESOURCES_DIR / "blocks.json"
DATA_DIR = ROOT_DIR / "data"
