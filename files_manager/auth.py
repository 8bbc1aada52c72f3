"""
Token authentication against the session store.

A session is the key ``auth_<token>`` holding the user id as a string. Every
failure surfaces as the same ``AuthError`` so callers cannot tell a bad
token from an expired one or from a deleted user.
"""

from __future__ import annotations

import base64
import binascii
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from bson import ObjectId

from files_manager.db import DocumentStore
from files_manager.errors import AuthError
from files_manager.records import parse_object_id
from files_manager.security import verify_password
from files_manager.sessions import SessionStore

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "auth_"


def session_key(token: str) -> str:
    return f"{SESSION_KEY_PREFIX}{token}"


def parse_basic_credentials(authorization: Optional[str]) -> Optional[tuple[str, str]]:
    """Return ``(email, password)`` from a Basic ``Authorization`` header."""
    if not authorization:
        return None
    scheme, _, encoded = authorization.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    email, sep, password = decoded.partition(":")
    if not sep:
        return None
    return email, password


@dataclass
class Identity:
    id: ObjectId
    email: str
    token: str

    def as_dict(self) -> dict:
        return {"id": str(self.id), "email": self.email}


class AuthGuard:
    def __init__(
        self,
        sessions: SessionStore,
        db: DocumentStore,
        session_ttl_seconds: int = 24 * 60 * 60,
    ):
        self.sessions = sessions
        self.db = db
        self.session_ttl_seconds = session_ttl_seconds

    def authenticate(self, token: Optional[str]) -> Identity:
        if not token:
            raise AuthError()
        user_id = parse_object_id(self.sessions.get(session_key(token)))
        if user_id is None:
            logger.debug("No live session for token")
            raise AuthError()
        user = self.db.get_user(user_id)
        if user is None:
            logger.debug("Session points at missing user %s", user_id)
            raise AuthError()
        return Identity(id=user.id, email=user.email, token=token)

    def connect(self, authorization: Optional[str]) -> str:
        """Check Basic credentials and open a session, returning its token."""
        credentials = parse_basic_credentials(authorization)
        if credentials is None:
            raise AuthError()
        email, password = credentials
        user = self.db.find_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthError()
        token = str(uuid.uuid4())
        self.sessions.set(session_key(token), str(user.id), self.session_ttl_seconds)
        logger.info("Opened session for user %s", user.id)
        return token

    def disconnect(self, identity: Identity) -> None:
        self.sessions.delete(session_key(identity.token))
        logger.info("Closed session for user %s", identity.id)
