"""Endpoints HTTP (FastAPI): catalogue, participant et fichiers statiques."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .catalog import Catalog
from .config import Settings
from .state import Session


def create_http_app(
    settings: Settings,
    catalog: Catalog,
    session: Session,
    on_shutdown: Optional[List[Callable[[], Awaitable[None]]]] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        for callback in on_shutdown or []:
            await callback()

    app = FastAPI(title="Chat Game Server", lifespan=lifespan)

    origins = settings.allowed_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if origins == "*" else origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/blocks")
    async def get_blocks() -> JSONResponse:
        return JSONResponse(catalog.to_json())

    @app.get("/participant")
    async def get_participant() -> JSONResponse:
        return JSONResponse({"participantName": session.participant_name})

    # Statics (montés en dernier pour ne pas masquer l'API)
    if settings.public_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(settings.public_dir), html=True), name="static")

    return app
