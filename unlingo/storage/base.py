"""Blob storage abstraction.

Translation files, JSON schemas and screenshot images live outside the
database. Records only hold the opaque blob identifier returned by
`store()`.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from unlingo.config import EXTERNAL_HTTP_TIMEOUT


class BlobStorageError(Exception):
    """Raised when the storage backend fails an operation."""


class BlobStorage(ABC):
    """Interface for blob storage backends."""

    @abstractmethod
    def store(self, content: bytes, content_type: str = "application/octet-stream") -> str:
        """Store content and return its new blob identifier."""
        ...

    @abstractmethod
    def get_url(self, blob_id: str) -> Optional[str]:
        """Return a retrieval URL, or None if the blob does not exist."""
        ...

    @abstractmethod
    def get(self, blob_id: str) -> Optional[bytes]:
        """Return the blob content, or None if the blob does not exist."""
        ...

    @abstractmethod
    def delete(self, blob_id: str) -> None:
        """Delete a blob. Deleting a missing blob is not an error."""
        ...

    def download(self, url: str) -> bytes:
        """Fetch content from a retrieval URL returned by get_url()."""
        try:
            response = httpx.get(url, timeout=EXTERNAL_HTTP_TIMEOUT)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise BlobStorageError(f"Failed to download {url}: {e}") from e
        return response.content
