"""Blob storage backends.

The backend is selected via the BLOB_STORAGE_BACKEND environment variable:

    BLOB_STORAGE_BACKEND=local  (default) - files under BLOB_STORAGE_PATH
    BLOB_STORAGE_BACKEND=s3     - S3 or R2 bucket via boto3
    BLOB_STORAGE_BACKEND=memory - process-local, for development

Usage:
    from unlingo.storage import get_storage

    storage = get_storage()
    blob_id = storage.store(b"{}", "application/json")
"""

import os
from functools import lru_cache

from unlingo.config import BLOB_STORAGE_BACKEND, BLOB_STORAGE_PATH
from unlingo.storage.base import BlobStorage, BlobStorageError
from unlingo.storage.memory import MemoryBlobStorage


@lru_cache(maxsize=1)
def get_storage() -> BlobStorage:
    """Get the configured blob storage backend (cached singleton).

    Raises:
        ValueError: If BLOB_STORAGE_BACKEND is set to an unknown value
    """
    backend = os.getenv("BLOB_STORAGE_BACKEND", BLOB_STORAGE_BACKEND).lower()

    if backend == "local":
        from unlingo.storage.local import LocalBlobStorage

        return LocalBlobStorage(os.getenv("BLOB_STORAGE_PATH", BLOB_STORAGE_PATH))

    if backend == "s3":
        from unlingo.storage.s3 import S3BlobStorage, S3Config

        return S3BlobStorage(S3Config.from_env())

    if backend == "memory":
        return MemoryBlobStorage()

    raise ValueError(
        f"Unknown BLOB_STORAGE_BACKEND: {backend}. "
        f"Supported values: local, s3, memory"
    )


__all__ = [
    "BlobStorage",
    "BlobStorageError",
    "MemoryBlobStorage",
    "get_storage",
]
