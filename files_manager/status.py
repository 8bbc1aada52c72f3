"""Liveness and usage counters."""

from __future__ import annotations

from files_manager.db import DocumentStore
from files_manager.sessions import SessionStore


class StatusService:
    def __init__(self, db: DocumentStore, sessions: SessionStore):
        self.db = db
        self.sessions = sessions

    def status(self) -> dict:
        """Report cached connection state; never round-trips to either store."""
        return {"redis": self.sessions.is_alive(), "db": self.db.is_alive()}

    def stats(self) -> dict:
        return {"users": self.db.count_users(), "files": self.db.count_files()}
