"""Tests for the in-memory blob store."""

import pytest

from modules.storage.blob_store import BlobStore
from modules.storage.models import BlobKind
from shared.exceptions import StorageError


class TestBlobStore:
    """Test suite for blob handles."""

    def test_put_and_get(self, blob_store):
        handle = blob_store.put(b"%PDF-1.7", name="a.pdf", media_type="application/pdf", kind=BlobKind.OUTPUT)

        assert handle.size == 8
        assert handle.kind == BlobKind.OUTPUT
        assert blob_store.get(handle.id) == b"%PDF-1.7"
        assert blob_store.describe(handle.id).name == "a.pdf"

    def test_handles_are_unique(self, blob_store):
        first = blob_store.put(b"x", name="x", media_type="image/png", kind=BlobKind.PREVIEW)
        second = blob_store.put(b"x", name="x", media_type="image/png", kind=BlobKind.PREVIEW)

        assert first.id != second.id
        assert len(blob_store) == 2

    def test_revoke(self, blob_store):
        """Test that revoked handles can no longer be read."""
        handle = blob_store.put(b"x", name="x", media_type="image/png", kind=BlobKind.PREVIEW)

        assert blob_store.revoke(handle.id) is True
        assert blob_store.revoke(handle.id) is False
        with pytest.raises(StorageError) as exc_info:
            blob_store.get(handle.id)

        assert exc_info.value.details["handle_id"] == handle.id
        assert blob_store.describe(handle.id) is None

    def test_revoke_many_and_stats(self, blob_store):
        handles = [
            blob_store.put(b"12345", name=str(i), media_type="image/png", kind=BlobKind.PREVIEW)
            for i in range(3)
        ]
        blob_store.put(b"zip", name="all.zip", media_type="application/zip", kind=BlobKind.ARCHIVE)

        assert blob_store.revoke_many([h.id for h in handles[:2]] + ["missing"]) == 2

        stats = blob_store.stats()
        assert stats.live_handles == 2
        assert stats.total_bytes == 8
        assert stats.handles_by_kind == {BlobKind.PREVIEW: 1, BlobKind.ARCHIVE: 1}
        assert stats.revoked_total == 2

    def test_clear(self):
        store = BlobStore()
        store.put(b"a", name="a", media_type="image/png", kind=BlobKind.PREVIEW)
        store.put(b"b", name="b", media_type="image/png", kind=BlobKind.PREVIEW)

        store.clear()

        assert len(store) == 0
        assert store.stats().total_bytes == 0
