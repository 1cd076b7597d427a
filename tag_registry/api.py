"""
FastAPI app factory. Building the app reads settings, so nothing here runs at
import; the uvicorn entry point is `tag_registry.main:app`.
"""
from __future__ import annotations

from fastapi import FastAPI

from . import __version__
from .config import Settings, load_settings
from .db import get_db_path
from .services.tag_svc import TagStore
from .routes import base as base_routes
from .routes import tags as tags_routes


def create_app(settings: Settings | None = None, store: TagStore | None = None) -> FastAPI:
    settings = settings or load_settings()
    store = store or TagStore(get_db_path(settings.data_dir))

    app = FastAPI(title="tag-registry", version=__version__)
    app.state.settings = settings
    app.state.store = store

    @app.on_event("startup")
    def on_startup():
        app.state.store.ensure_schema()

    app.include_router(base_routes.router)
    app.include_router(tags_routes.build_router(settings.prefix))
    return app
