"""FastAPI application factory and configuration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import register_error_handlers, register_routes
from .core import Settings, settings as default_settings
from .core.database import RecordStore
from .services.ghosts import GhostBlobStore, select_ghost_store


def create_app(
    settings: Optional[Settings] = None,
    ghosts: Optional[GhostBlobStore] = None,
) -> FastAPI:
    """Build the app; the record store and ghost backend are fixed here."""

    settings = settings or default_settings
    store = RecordStore(settings.records_file)
    ghosts = ghosts or select_ghost_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.load()
        yield

    app = FastAPI(title="Ghostboard API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.ghosts = ghosts

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    register_routes(app)
    return app


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=default_settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("ghostboard.app:app", host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    main()
