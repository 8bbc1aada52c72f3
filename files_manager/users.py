"""
User registration and profile lookup.
"""

from __future__ import annotations

import logging
from typing import Optional

from files_manager.auth import Identity
from files_manager.db import DocumentStore, DuplicateUserError
from files_manager.errors import ValidationError
from files_manager.records import UserRecord
from files_manager.security import hash_password

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: DocumentStore):
        self.db = db

    def register(self, email: Optional[str], password: Optional[str]) -> UserRecord:
        if not email:
            raise ValidationError("Missing email")
        if not password:
            raise ValidationError("Missing password")
        if self.db.find_user_by_email(email):
            raise ValidationError("Already exist")
        try:
            user = self.db.create_user(email, hash_password(password))
        except DuplicateUserError as e:
            # Lost a race against a concurrent registration.
            raise ValidationError("Already exist") from e
        logger.info("Registered user %s", user.id)
        return user

    def profile(self, identity: Identity) -> dict:
        return identity.as_dict()
