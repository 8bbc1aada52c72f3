"""
Dependency wiring for the FastAPI app.

Store clients are built once by ``create_app`` and kept on ``app.state``;
services are cheap wrappers constructed per request around them.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from files_manager.auth import AuthGuard, Identity
from files_manager.config import Settings
from files_manager.db import DocumentStore
from files_manager.files import FileService
from files_manager.sessions import SessionStore
from files_manager.status import StatusService
from files_manager.storage import BlobStorage
from files_manager.users import UserService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db_client(request: Request) -> DocumentStore:
    return request.app.state.db


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_blob_storage(request: Request) -> BlobStorage:
    return request.app.state.storage


def get_auth_guard(
    settings: Settings = Depends(get_app_settings),
    sessions: SessionStore = Depends(get_session_store),
    db: DocumentStore = Depends(get_db_client),
) -> AuthGuard:
    return AuthGuard(sessions, db, session_ttl_seconds=settings.session_ttl_seconds)


def get_current_user(
    x_token: Optional[str] = Header(None, alias="X-Token"),
    guard: AuthGuard = Depends(get_auth_guard),
) -> Identity:
    return guard.authenticate(x_token)


def get_file_service(
    settings: Settings = Depends(get_app_settings),
    db: DocumentStore = Depends(get_db_client),
    storage: BlobStorage = Depends(get_blob_storage),
) -> FileService:
    return FileService(db, storage, page_size=settings.page_size)


def get_user_service(db: DocumentStore = Depends(get_db_client)) -> UserService:
    return UserService(db)


def get_status_service(
    db: DocumentStore = Depends(get_db_client),
    sessions: SessionStore = Depends(get_session_store),
) -> StatusService:
    return StatusService(db, sessions)
