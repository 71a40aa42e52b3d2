"""Configuration du serveur (variables d'environnement / fichier .env)."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .paths import BLOCKS_PATH, DATA_DIR, PUBLIC_DIR


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=4000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # Partie
    max_time: int = Field(default=60, gt=0, alias="MAX_TIME")
    points_awarded: int = Field(default=10, ge=0, alias="POINTS_AWARDED")
    problems_per_block: int = Field(default=5, gt=0, alias="PROBLEMS_PER_BLOCK")
    tick_seconds: float = Field(default=1.0, gt=0, alias="TICK_SECONDS")

    # Fichiers
    blocks_path: Path = Field(default=BLOCKS_PATH, alias="BLOCKS_PATH")
    data_dir: Path = Field(default=DATA_DIR, alias="DATA_DIR")
    public_dir: Path = Field(default=PUBLIC_DIR, alias="PUBLIC_DIR")

    def allowed_origins(self) -> List[str] | str:
        """'*' ou liste d'origines séparées par des virgules."""
        raw = self.cors_origins.strip()
        if raw == "*":
            return "*"
        return [origin.strip() for origin in raw.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
