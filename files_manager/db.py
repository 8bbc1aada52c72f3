"""
Document store abstraction for MongoDB and an in-memory test implementation.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Optional, Protocol

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.errors import ConnectionFailure, DuplicateKeyError, OperationFailure

from files_manager.records import FileRecord, UserRecord

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
FILES_COLLECTION = "files"


class DuplicateUserError(Exception):
    """Raised when a user with the same email already exists."""


class DocumentStore(Protocol):
    """Interface for user and file metadata access."""

    def is_alive(self) -> bool:
        ...

    def count_users(self) -> int:
        ...

    def count_files(self) -> int:
        ...

    def get_user(self, user_id: ObjectId) -> Optional[UserRecord]:
        ...

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        ...

    def get_file(
        self, file_id: ObjectId, user_id: Optional[ObjectId] = None
    ) -> Optional[FileRecord]:
        ...

    def create_file(
        self,
        *,
        user_id: ObjectId,
        name: str,
        type: str,
        is_public: bool,
        parent_id: Optional[ObjectId],
        local_path: Optional[str] = None,
    ) -> FileRecord:
        ...

    def count_children(self, user_id: ObjectId, parent_id: Optional[ObjectId]) -> int:
        ...

    def list_children(
        self,
        user_id: ObjectId,
        parent_id: Optional[ObjectId],
        *,
        skip: int = 0,
        limit: int = 20,
    ) -> list[FileRecord]:
        ...

    def close(self) -> None:
        ...


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.users: Dict[ObjectId, UserRecord] = {}
        self.files: Dict[ObjectId, FileRecord] = {}

    def is_alive(self) -> bool:
        return True

    def count_users(self) -> int:
        return len(self.users)

    def count_files(self) -> int:
        return len(self.files)

    def get_user(self, user_id: ObjectId) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        if self.find_user_by_email(email):
            raise DuplicateUserError(email)
        record = UserRecord(id=ObjectId(), email=email, password_hash=password_hash)
        self.users[record.id] = record
        return record

    def get_file(
        self, file_id: ObjectId, user_id: Optional[ObjectId] = None
    ) -> Optional[FileRecord]:
        record = self.files.get(file_id)
        if record is None or (user_id is not None and record.user_id != user_id):
            return None
        return record

    def create_file(
        self,
        *,
        user_id: ObjectId,
        name: str,
        type: str,
        is_public: bool,
        parent_id: Optional[ObjectId],
        local_path: Optional[str] = None,
    ) -> FileRecord:
        record = FileRecord(
            id=ObjectId(),
            user_id=user_id,
            name=name,
            type=type,
            is_public=is_public,
            parent_id=parent_id,
            local_path=local_path,
        )
        self.files[record.id] = record
        return record

    def _children(self, user_id: ObjectId, parent_id: Optional[ObjectId]) -> list[FileRecord]:
        return [
            record
            for record in self.files.values()
            if record.user_id == user_id and record.parent_id == parent_id
        ]

    def count_children(self, user_id: ObjectId, parent_id: Optional[ObjectId]) -> int:
        return len(self._children(user_id, parent_id))

    def list_children(
        self,
        user_id: ObjectId,
        parent_id: Optional[ObjectId],
        *,
        skip: int = 0,
        limit: int = 20,
    ) -> list[FileRecord]:
        return self._children(user_id, parent_id)[skip : skip + limit]

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.users.clear()
        self.files.clear()

    def close(self) -> None:
        self.reset()


class MongoDocumentStore:
    """
    pymongo-backed implementation over the ``users`` and ``files`` collections.

    Connection state is cached: it is set by the ping at construction time and
    refreshed by every store call, so ``is_alive`` never blocks.
    """

    def __init__(self, uri: str, database: str, timeout_ms: int = 5000):
        self.client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        self.db = self.client[database]
        self._connected = False
        self._indexes_ready = False
        try:
            with self._connection_state():
                self.client.admin.command("ping")
            logger.info("Connected to MongoDB database: %s", database)
        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB: %s", e)

    def _ensure_indexes(self) -> None:
        """Create indexes once, on the first call that reaches the server."""
        try:
            self.db[USERS_COLLECTION].create_index([("email", ASCENDING)], unique=True)
            self.db[FILES_COLLECTION].create_index(
                [("userId", ASCENDING), ("parentId", ASCENDING)]
            )
        except ConnectionFailure as e:
            self._connected = False
            logger.warning("Index creation deferred: %s", e)
            return
        except OperationFailure as e:
            logger.error("Failed to create indexes: %s", e)
        self._indexes_ready = True

    @contextmanager
    def _connection_state(self):
        try:
            yield
        except ConnectionFailure:
            self._connected = False
            raise
        self._connected = True
        if not self._indexes_ready:
            self._ensure_indexes()

    def is_alive(self) -> bool:
        return self._connected

    def count_users(self) -> int:
        with self._connection_state():
            return self.db[USERS_COLLECTION].count_documents({})

    def count_files(self) -> int:
        with self._connection_state():
            return self.db[FILES_COLLECTION].count_documents({})

    def get_user(self, user_id: ObjectId) -> Optional[UserRecord]:
        with self._connection_state():
            doc = self.db[USERS_COLLECTION].find_one({"_id": user_id})
        return UserRecord.from_document(doc) if doc else None

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._connection_state():
            doc = self.db[USERS_COLLECTION].find_one({"email": email})
        return UserRecord.from_document(doc) if doc else None

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        record = UserRecord(id=ObjectId(), email=email, password_hash=password_hash)
        try:
            with self._connection_state():
                self.db[USERS_COLLECTION].insert_one(record.to_document())
        except DuplicateKeyError as e:
            raise DuplicateUserError(email) from e
        return record

    def get_file(
        self, file_id: ObjectId, user_id: Optional[ObjectId] = None
    ) -> Optional[FileRecord]:
        query = {"_id": file_id}
        if user_id is not None:
            query["userId"] = user_id
        with self._connection_state():
            doc = self.db[FILES_COLLECTION].find_one(query)
        return FileRecord.from_document(doc) if doc else None

    def create_file(
        self,
        *,
        user_id: ObjectId,
        name: str,
        type: str,
        is_public: bool,
        parent_id: Optional[ObjectId],
        local_path: Optional[str] = None,
    ) -> FileRecord:
        record = FileRecord(
            id=ObjectId(),
            user_id=user_id,
            name=name,
            type=type,
            is_public=is_public,
            parent_id=parent_id,
            local_path=local_path,
        )
        with self._connection_state():
            self.db[FILES_COLLECTION].insert_one(record.to_document())
        return record

    def count_children(self, user_id: ObjectId, parent_id: Optional[ObjectId]) -> int:
        with self._connection_state():
            return self.db[FILES_COLLECTION].count_documents(
                {"userId": user_id, "parentId": parent_id}
            )

    def list_children(
        self,
        user_id: ObjectId,
        parent_id: Optional[ObjectId],
        *,
        skip: int = 0,
        limit: int = 20,
    ) -> list[FileRecord]:
        with self._connection_state():
            cursor = (
                self.db[FILES_COLLECTION]
                .find({"userId": user_id, "parentId": parent_id})
                .skip(skip)
                .limit(limit)
            )
            return [FileRecord.from_document(doc) for doc in cursor]

    def close(self) -> None:
        self.client.close()
        self._connected = False
        logger.info("MongoDB connection closed")
