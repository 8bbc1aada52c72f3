"""
FastAPI application factory for the files manager service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from files_manager.config import Settings, get_settings
from files_manager.db import DocumentStore, InMemoryDocumentStore, MongoDocumentStore
from files_manager.errors import register_error_handlers
from files_manager.routes import router
from files_manager.sessions import InMemorySessionStore, RedisSessionStore, SessionStore
from files_manager.storage import BlobStorage, LocalBlobStorage

logger = logging.getLogger(__name__)


def build_db_client(settings: Settings) -> DocumentStore:
    if settings.use_in_memory_backends:
        return InMemoryDocumentStore()
    return MongoDocumentStore(
        settings.mongo_uri, settings.db_database, timeout_ms=settings.db_timeout_ms
    )


def build_session_store(settings: Settings) -> SessionStore:
    if settings.use_in_memory_backends:
        return InMemorySessionStore()
    return RedisSessionStore(settings.redis_url, timeout_seconds=settings.redis_timeout_seconds)


def create_app(
    settings: Optional[Settings] = None,
    *,
    db: Optional[DocumentStore] = None,
    sessions: Optional[SessionStore] = None,
    storage: Optional[BlobStorage] = None,
) -> FastAPI:
    """
    Build the app and its store clients.

    Clients are created here, once per process, and closed when the app
    shuts down. Pass ``db``/``sessions``/``storage`` to substitute doubles.
    """
    settings = settings or get_settings()
    db = db or build_db_client(settings)
    sessions = sessions or build_session_store(settings)
    storage = storage or LocalBlobStorage(settings.folder_path)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        try:
            yield
        finally:
            sessions.close()
            db.close()

    app = FastAPI(title="Files Manager", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db
    app.state.sessions = sessions
    app.state.storage = storage

    app.include_router(router)
    register_error_handlers(app)
    return app
