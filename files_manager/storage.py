"""
Blob storage for uploaded file payloads.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class BlobStorage(Protocol):
    """Defines the operations the file service needs from payload storage."""

    def save(self, data: bytes) -> str:
        ...

    def read(self, path: str) -> bytes:
        ...

    def delete(self, path: str) -> None:
        ...


@dataclass
class LocalBlobStorage:
    """
    Writes payloads as flat files named by a uuid4 under ``root``.

    The root directory is created on first write, parents included.
    """

    root: str

    def save(self, data: bytes) -> str:
        root = Path(self.root)
        root.mkdir(parents=True, exist_ok=True)
        path = root / str(uuid.uuid4())
        path.write_bytes(data)
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return str(path)

    def read(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def delete(self, path: str) -> None:
        Path(path).unlink(missing_ok=True)
