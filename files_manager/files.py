"""
File and folder metadata service.

Uploads persist metadata in the document store; ``file`` and ``image``
uploads also write their decoded payload through the blob storage, and the
stored ``localPath`` points at it.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Optional

from bson import ObjectId

from files_manager.db import DocumentStore
from files_manager.errors import NotFoundError, ValidationError
from files_manager.records import (
    FILE_TYPES,
    FOLDER,
    FileRecord,
    is_root_parent,
    parse_object_id,
)
from files_manager.storage import BlobStorage

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


def decode_payload(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid data") from e


def parse_page(value: Any) -> int:
    """Page numbers are 0-indexed; anything unparsable or negative is page 0."""
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 0
    return max(page, 0)


class FileService:
    def __init__(
        self,
        db: DocumentStore,
        storage: BlobStorage,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.db = db
        self.storage = storage
        self.page_size = page_size

    def _resolve_parent(self, user_id: ObjectId, parent_id: Any) -> Optional[ObjectId]:
        if is_root_parent(parent_id):
            return None
        parent_oid = parse_object_id(parent_id)
        parent = self.db.get_file(parent_oid, user_id) if parent_oid else None
        if parent is None:
            raise ValidationError("Parent not found")
        if parent.type != FOLDER:
            raise ValidationError("Parent is not a folder")
        return parent.id

    def upload(
        self,
        user_id: ObjectId,
        *,
        name: Optional[str],
        type: Optional[str],
        data: Optional[str] = None,
        is_public: Optional[bool] = None,
        parent_id: Any = None,
    ) -> FileRecord:
        if not name:
            raise ValidationError("Missing name")
        if not type or type not in FILE_TYPES:
            raise ValidationError("Missing type")
        if type != FOLDER and not data:
            raise ValidationError("Missing data")
        parent_oid = self._resolve_parent(user_id, parent_id)

        metadata = dict(
            user_id=user_id,
            name=name,
            type=type,
            is_public=bool(is_public),
            parent_id=parent_oid,
        )
        if type == FOLDER:
            record = self.db.create_file(**metadata)
            logger.info("Created folder %s for user %s", record.id, user_id)
            return record

        payload = decode_payload(data)
        local_path = self.storage.save(payload)
        try:
            record = self.db.create_file(**metadata, local_path=local_path)
        except Exception:
            logger.error("Metadata insert failed, removing orphaned blob %s", local_path)
            self.storage.delete(local_path)
            raise
        logger.info(
            "Stored %s %s (%d bytes) for user %s", type, record.id, len(payload), user_id
        )
        return record

    def show(self, user_id: ObjectId, file_id: str) -> FileRecord:
        file_oid = parse_object_id(file_id)
        record = self.db.get_file(file_oid, user_id) if file_oid else None
        if record is None:
            raise NotFoundError()
        return record

    def index(self, user_id: ObjectId, parent_id: Any = None, page: Any = 0) -> list[FileRecord]:
        if is_root_parent(parent_id):
            parent_oid = None
        else:
            parent_oid = parse_object_id(parent_id)
            if parent_oid is None:
                return []
        count = self.db.count_children(user_id, parent_oid)
        if count == 0:
            return []
        skip = parse_page(page) * self.page_size
        if skip >= count:
            return []
        return self.db.list_children(
            user_id,
            parent_oid,
            skip=skip,
            limit=self.page_size,
        )
