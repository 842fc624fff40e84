"""In-memory store for previews, generated PDFs and archives."""

from typing import Dict, Iterable, Optional
from uuid import uuid4

from loguru import logger

from shared.exceptions import StorageError
from .models import BlobHandle, BlobKind, StorageStats


class BlobStore:
    """Holds binary payloads behind revocable handles.

    Owners must revoke a handle once it is superseded; nothing is evicted
    automatically.
    """

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}
        self._handles: Dict[str, BlobHandle] = {}
        self._revoked_total = 0

    def put(self, data: bytes, name: str, media_type: str, kind: BlobKind) -> BlobHandle:
        """Store bytes and return a new handle.

        Args:
            data: Payload to store
            name: Download name for the payload
            media_type: MIME type of the payload
            kind: What the payload is used for

        Returns:
            Handle referencing the stored payload
        """
        handle = BlobHandle(
            id=str(uuid4()),
            name=name,
            media_type=media_type,
            kind=kind,
            size=len(data),
        )
        self._blobs[handle.id] = bytes(data)
        self._handles[handle.id] = handle
        logger.debug(f"Stored {kind.value} blob {handle.id} ({handle.size} bytes)")
        return handle

    def get(self, handle_id: str) -> bytes:
        """Return the payload of a live handle."""
        try:
            return self._blobs[handle_id]
        except KeyError:
            raise StorageError(
                f"Unknown or revoked handle: {handle_id}",
                details={"handle_id": handle_id},
            )

    def describe(self, handle_id: str) -> Optional[BlobHandle]:
        return self._handles.get(handle_id)

    def contains(self, handle_id: str) -> bool:
        return handle_id in self._blobs

    def revoke(self, handle_id: str) -> bool:
        """Release a handle.

        Returns:
            True if the handle was live, False if it was unknown
        """
        if self._blobs.pop(handle_id, None) is None:
            return False
        self._handles.pop(handle_id, None)
        self._revoked_total += 1
        logger.debug(f"Revoked blob {handle_id}")
        return True

    def revoke_many(self, handle_ids: Iterable[str]) -> int:
        """Release several handles and return how many were live."""
        return sum(1 for handle_id in list(handle_ids) if self.revoke(handle_id))

    def clear(self) -> None:
        """Release every handle."""
        count = self.revoke_many(list(self._blobs))
        if count:
            logger.info(f"Released {count} blobs")

    def stats(self) -> StorageStats:
        by_kind: Dict[BlobKind, int] = {}
        for handle in self._handles.values():
            by_kind[handle.kind] = by_kind.get(handle.kind, 0) + 1
        return StorageStats(
            live_handles=len(self._blobs),
            total_bytes=sum(len(data) for data in self._blobs.values()),
            handles_by_kind=by_kind,
            revoked_total=self._revoked_total,
        )

    def __len__(self) -> int:
        return len(self._blobs)
