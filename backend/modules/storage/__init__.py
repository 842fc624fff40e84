"""Storage module for DocSplit - holds session blobs in memory.

This module provides:
- Revocable handles for page previews, generated PDFs and archives
- Usage statistics to keep memory growth visible during long sessions
"""

from .blob_store import BlobStore
from .models import BlobHandle, BlobKind, StorageStats

__all__ = [
    "BlobStore",
    "BlobHandle",
    "BlobKind",
    "StorageStats",
]
