"""Process-local blob storage for development and tests."""

import threading
from typing import Optional
from uuid import uuid4

from unlingo.storage.base import BlobStorage, BlobStorageError

URL_SCHEME = "memory://"


class MemoryBlobStorage(BlobStorage):
    """Keeps blobs in a dict. Contents are lost when the process exits."""

    def __init__(self) -> None:
        self._blobs: dict[str, tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def store(self, content: bytes, content_type: str = "application/octet-stream") -> str:
        blob_id = uuid4().hex
        with self._lock:
            self._blobs[blob_id] = (bytes(content), content_type)
        return blob_id

    def get_url(self, blob_id: str) -> Optional[str]:
        if blob_id not in self._blobs:
            return None
        return f"{URL_SCHEME}{blob_id}"

    def get(self, blob_id: str) -> Optional[bytes]:
        entry = self._blobs.get(blob_id)
        return entry[0] if entry else None

    def delete(self, blob_id: str) -> None:
        with self._lock:
            self._blobs.pop(blob_id, None)

    def download(self, url: str) -> bytes:
        if not url.startswith(URL_SCHEME):
            return super().download(url)
        content = self.get(url[len(URL_SCHEME):])
        if content is None:
            raise BlobStorageError(f"Blob not found: {url}")
        return content

    def __contains__(self, blob_id: str) -> bool:
        return blob_id in self._blobs

    def __len__(self) -> int:
        return len(self._blobs)
