"""Filesystem blob storage.

Each blob is one file named by its identifier under the storage root.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname
from uuid import uuid4

from unlingo.logging import get_logger
from unlingo.storage.base import BlobStorage, BlobStorageError

logger = get_logger(__name__)


class LocalBlobStorage(BlobStorage):
    """Stores blobs as files under `root`. URLs are file:// URIs."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, blob_id: str) -> Path:
        # Identifiers are uuid hex; reject anything that could escape root
        if not blob_id or not blob_id.isalnum():
            raise BlobStorageError(f"Invalid blob id: {blob_id!r}")
        return self.root / blob_id

    def store(self, content: bytes, content_type: str = "application/octet-stream") -> str:
        blob_id = uuid4().hex
        try:
            self._path(blob_id).write_bytes(content)
        except OSError as e:
            logger.error("blob_store_failed", blob_id=blob_id, error=str(e))
            raise BlobStorageError(f"Failed to store blob: {e}") from e
        return blob_id

    def get_url(self, blob_id: str) -> Optional[str]:
        path = self._path(blob_id)
        if not path.exists():
            return None
        return path.resolve().as_uri()

    def get(self, blob_id: str) -> Optional[bytes]:
        path = self._path(blob_id)
        if not path.exists():
            return None
        return path.read_bytes()

    def delete(self, blob_id: str) -> None:
        try:
            self._path(blob_id).unlink(missing_ok=True)
        except OSError as e:
            raise BlobStorageError(f"Failed to delete blob {blob_id}: {e}") from e

    def download(self, url: str) -> bytes:
        parsed = urlparse(url)
        if parsed.scheme != "file":
            return super().download(url)
        path = Path(url2pathname(parsed.path))
        try:
            return path.read_bytes()
        except OSError as e:
            raise BlobStorageError(f"Failed to read {url}: {e}") from e
