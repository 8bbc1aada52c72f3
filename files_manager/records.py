"""
Record types and identifier helpers shared by the stores and services.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from bson import ObjectId

FOLDER = "folder"
FILE = "file"
IMAGE = "image"
FILE_TYPES = (FOLDER, FILE, IMAGE)

# Wire value for the root parent; internally root is ``None``.
ROOT_PARENT = 0
ROOT_PARENT_ALIASES = (0, "0", "")


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return an ObjectId for a 24-hex-char string, or None if malformed."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def is_root_parent(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, bool):
        return False
    return value in ROOT_PARENT_ALIASES


def parent_to_wire(parent_id: Optional[ObjectId]) -> Union[int, str]:
    return ROOT_PARENT if parent_id is None else str(parent_id)


@dataclass
class UserRecord:
    id: ObjectId
    email: str
    password_hash: str

    def identity(self) -> dict:
        return {"id": str(self.id), "email": self.email}

    def to_document(self) -> dict:
        return {"_id": self.id, "email": self.email, "passwordHash": self.password_hash}

    @classmethod
    def from_document(cls, doc: dict) -> "UserRecord":
        return cls(
            id=doc["_id"],
            email=doc["email"],
            password_hash=doc.get("passwordHash", ""),
        )


@dataclass
class FileRecord:
    id: ObjectId
    user_id: ObjectId
    name: str
    type: str
    is_public: bool = False
    parent_id: Optional[ObjectId] = None
    local_path: Optional[str] = None

    def as_dict(self) -> dict:
        data = {
            "id": str(self.id),
            "userId": str(self.user_id),
            "name": self.name,
            "type": self.type,
            "isPublic": self.is_public,
            "parentId": parent_to_wire(self.parent_id),
        }
        if self.local_path is not None:
            data["localPath"] = self.local_path
        return data

    def to_document(self) -> dict:
        doc = {
            "_id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "type": self.type,
            "isPublic": self.is_public,
            "parentId": self.parent_id,
        }
        if self.local_path is not None:
            doc["localPath"] = self.local_path
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "FileRecord":
        return cls(
            id=doc["_id"],
            user_id=doc["userId"],
            name=doc["name"],
            type=doc["type"],
            is_public=bool(doc.get("isPublic", False)),
            parent_id=doc.get("parentId"),
            local_path=doc.get("localPath"),
        )
