"""
Blob storage for uploaded document bytes. The core only keeps the returned handle.
"""
from __future__ import annotations

import logging
import re
import uuid
from typing import Optional, Protocol

import fsspec

from errors import StorageError

logger = logging.getLogger(__name__)

_HANDLE_RE = re.compile(r"^[a-f0-9]{32}$")


class BlobStorage(Protocol):
    def store(self, data: bytes) -> str: ...

    def retrieve(self, handle: str) -> bytes: ...


class LocalBlobStorage:
    """
    Stores each blob as a file named by a random hex handle under `root`.
    Any fsspec filesystem works; the default is the local one.
    """

    def __init__(self, root: str, fs: Optional[fsspec.AbstractFileSystem] = None):
        self.fs = fs or fsspec.filesystem("file")
        self.root = str(root).rstrip("/")

    def _path(self, handle: str) -> str:
        if not handle or not _HANDLE_RE.match(handle):
            raise StorageError(f"Invalid storage handle: {handle!r}")
        return f"{self.root}/{handle}"

    def store(self, data: bytes) -> str:
        handle = uuid.uuid4().hex
        try:
            self.fs.makedirs(self.root, exist_ok=True)
            self.fs.pipe_file(self._path(handle), data)
        except OSError as e:
            logger.error("Failed to store blob %s: %s", handle, e)
            raise StorageError(f"Could not store file: {e}") from e
        return handle

    def retrieve(self, handle: str) -> bytes:
        path = self._path(handle)
        try:
            return self.fs.cat_file(path)
        except OSError as e:
            logger.error("Failed to read blob %s: %s", handle, e)
            raise StorageError(f"Could not read file: {e}") from e
