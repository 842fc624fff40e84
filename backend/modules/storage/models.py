"""Data models for the storage module."""

from datetime import datetime
from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field


class BlobKind(str, Enum):
    """What a stored blob is used for."""
    PREVIEW = "preview"
    OUTPUT = "output"
    ARCHIVE = "archive"


class BlobHandle(BaseModel):
    """Revocable reference to bytes held by the blob store."""
    id: str
    name: str
    media_type: str
    kind: BlobKind
    size: int = Field(ge=0)
    created_at: datetime = Field(default_factory=datetime.now)


class StorageStats(BaseModel):
    """Live contents of the blob store."""
    live_handles: int = 0
    total_bytes: int = 0
    handles_by_kind: Dict[BlobKind, int] = Field(default_factory=dict)
    revoked_total: int = 0
