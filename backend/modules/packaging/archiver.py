"""ZIP packaging of generated documents, one folder per source file."""

import io
import os
import zipfile
from typing import Dict, List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from api.config import get_settings
from modules.document_splitter.models import Archive, OutputDocument
from shared.exceptions import PackagingError


class ArchiveEntry(BaseModel):
    """Outputs of one source document to be placed in its own folder."""

    source_name: str
    outputs: List[OutputDocument] = Field(default_factory=list)

    @property
    def folder_name(self) -> str:
        return os.path.splitext(self.source_name)[0]


class Archiver:
    """Builds download archives from extraction outputs."""

    def __init__(self, compression_level: Optional[int] = None, batch_name: Optional[str] = None):
        settings = get_settings()
        self.compression_level = (
            settings.zip_compression_level if compression_level is None else compression_level
        )
        self.batch_name = batch_name or settings.batch_archive_name

    def archive_name(self, entries: Sequence[ArchiveEntry], batch: Optional[bool] = None) -> str:
        """Name of the archive for the given entries.

        A single document gets ``<name without extension>.zip``; several
        documents, or an explicit batch download, get the batch name.
        """
        if batch is None:
            batch = len(entries) != 1
        if batch:
            return self.batch_name
        return f"{entries[0].folder_name}.zip"

    def pack(self, entries: Sequence[ArchiveEntry], batch: Optional[bool] = None) -> Archive:
        """Write every entry's outputs into one ZIP archive.

        Args:
            entries: Source documents with their outputs
            batch: Force the batch archive name (inferred from entry count if None)

        Returns:
            Archive with its name, bytes and folder names

        Raises:
            PackagingError: If there is nothing to pack or the archive cannot be written
        """
        if not entries:
            raise PackagingError("No documents to package")

        folders = self._folder_names(entries)
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(
                buffer,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self.compression_level,
            ) as zf:
                for entry, folder in zip(entries, folders):
                    zf.writestr(f"{folder}/", b"")
                    for output in entry.outputs:
                        zf.writestr(f"{folder}/{output.file_name}", output.content)
        except Exception as e:
            logger.error(f"Failed to build archive: {e}")
            raise PackagingError(
                f"Failed to build archive: {e}",
                details={"folders": folders},
            )

        name = self.archive_name(entries, batch)
        content = buffer.getvalue()
        logger.info(f"Packaged {len(entries)} documents into {name} ({len(content)} bytes)")
        return Archive(file_name=name, content=content, folders=folders)

    @staticmethod
    def _folder_names(entries: Sequence[ArchiveEntry]) -> List[str]:
        """Folder per entry; repeated names get a numeric suffix."""
        seen: Dict[str, int] = {}
        names = []
        for entry in entries:
            base = entry.folder_name or "documento"
            count = seen.get(base, 0) + 1
            seen[base] = count
            names.append(base if count == 1 else f"{base} ({count})")
        return names
