#!/usr/bin/env python3
"""
Script de démarrage du serveur de chat
"""
import logging

import uvicorn

from chatgame.config import get_settings
from chatgame.main import create_app

if __name__ == "__main__":
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info(
        "Démarrage du serveur sur http://localhost:%s", settings.app_port
    )

    uvicorn.run(
        create_app(settings),
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )
