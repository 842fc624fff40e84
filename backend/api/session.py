"""In-process session API consumed by the upload and editor front end."""

import asyncio
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Union
from uuid import uuid4

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from modules.document_splitter.classifier import classify_by_ranges
from modules.document_splitter.identifier import extract_identifier
from modules.document_splitter.models import (
    Archive,
    Category,
    DocumentConfig,
    ExtractionResult,
    PageEdit,
    RotationDirection,
    SourceDocument,
)
from modules.document_splitter.page_editor import PageEditor
from modules.document_splitter.pdf_splitter import PDFSplitter
from modules.document_splitter.renderer import open_pdf
from modules.packaging.archiver import ArchiveEntry, Archiver
from modules.storage.blob_store import BlobStore
from modules.storage.models import BlobKind
from shared.exceptions import DocumentNotFoundError, LoadError, ValidationError
from .config import Settings, get_settings


PDF_MEDIA_TYPE = "application/pdf"
ZIP_MEDIA_TYPE = "application/zip"


class DocumentSession:
    """One user's working set of loaded documents.

    Operations on the same document are serialized with a per-document lock,
    so an extraction always sees a stable classification. Different
    documents proceed independently.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.blob_store = BlobStore()
        self.editor = PageEditor(self.blob_store, zoom=self.settings.preview_zoom)
        self.splitter = PDFSplitter(garbage=self.settings.pdf_garbage_level)
        self.archiver = Archiver(
            compression_level=self.settings.zip_compression_level,
            batch_name=self.settings.batch_archive_name,
        )
        self._documents: Dict[str, SourceDocument] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._archives: List[str] = []

    # Intake

    async def load_document(self, data: bytes, name: str) -> SourceDocument:
        """Open uploaded PDF bytes and add them to the session.

        Raises:
            LoadError: If the bytes are not a readable, unencrypted PDF
        """
        self._validate_upload(data, name)

        try:
            pdf_doc = open_pdf(data)
        except Exception as e:
            logger.error(f"Failed to open {name}: {e}")
            raise LoadError(f"Could not read {name} as a PDF: {e}", details={"name": name})

        if not pdf_doc.is_pdf or pdf_doc.needs_pass:
            pdf_doc.close()
            raise LoadError(
                f"{name} is encrypted or not a PDF",
                details={"name": name},
            )
        if pdf_doc.page_count == 0:
            pdf_doc.close()
            raise LoadError(f"{name} has no pages", details={"name": name})

        document = SourceDocument(
            id=str(uuid4()),
            original_name=name,
            page_count=pdf_doc.page_count,
            page_source=pdf_doc,
            extracted_identifier=extract_identifier(name, default=self.settings.unknown_identifier),
        )
        self._documents[document.id] = document
        self._locks[document.id] = asyncio.Lock()

        logger.info(
            f"Loaded {name} ({document.page_count} pages, "
            f"identifier {document.extracted_identifier})"
        )
        await asyncio.sleep(0)
        return document

    async def remove_document(self, document_id: str) -> None:
        """Drop a document and release everything derived from it.

        Waits for any operation already running on the document to finish.
        """
        async with self._locked(document_id) as document:
            self._discard(document)

    def get_document(self, document_id: str) -> SourceDocument:
        try:
            return self._documents[document_id]
        except KeyError:
            raise DocumentNotFoundError(
                f"Document not found: {document_id}",
                details={"document_id": document_id},
            )

    def list_documents(self) -> List[SourceDocument]:
        return list(self._documents.values())

    # Editing

    async def open_editor(self, document_id: str) -> Dict[Category, List[PageEdit]]:
        """Seed the edit state of a document from the positional classification."""
        async with self._locked(document_id) as document:
            return await self.editor.initialize(document)

    async def request_rotate(
        self,
        document_id: str,
        category: Union[Category, str],
        position: int,
        direction: Union[RotationDirection, str],
    ) -> Optional[PageEdit]:
        """Rotate one page of a category and refresh its preview."""
        category = self._parse_category(category)
        direction = self._parse_direction(direction)
        async with self._locked(document_id) as document:
            return await self.editor.rotate(document, category, position, direction)

    async def request_manual_config(
        self,
        document_id: str,
        config: Union[DocumentConfig, dict],
    ) -> Dict[Category, List[PageEdit]]:
        """Replace the edit state of a document with user supplied boundaries.

        Raises:
            ValidationError: If the boundaries assign a page to two categories
        """
        document = self.get_document(document_id)
        if not isinstance(config, DocumentConfig):
            try:
                config = DocumentConfig.model_validate(config)
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Invalid page configuration: {e.error_count()} errors",
                    details={"errors": e.errors(include_url=False)},
                )

        mapping = classify_by_ranges(config, document.page_count)
        async with self._locked(document_id) as document:
            classification = await self.editor.initialize(document, mapping)
            document.edited = True
        logger.info(f"Applied manual configuration to {document.original_name}")
        return classification

    # Generation

    async def save_changes(self, document_id: str) -> ExtractionResult:
        """Extract outputs from the edited classification of a document."""
        async with self._locked(document_id) as document:
            if not document.classification:
                result = await self.splitter.extract_positional(document)
            else:
                result = await self.splitter.extract_edited(document)
            self._store_outputs(document, result)
        return result

    async def generate_documents(self, document_id: str) -> ExtractionResult:
        """Extract outputs straight from the positional classification."""
        async with self._locked(document_id) as document:
            result = await self.splitter.extract_positional(document)
            self._store_outputs(document, result)
        return result

    async def download_single(self, document_id: str) -> Archive:
        """Archive one document's outputs, generating them first if needed."""
        document = self.get_document(document_id)
        if not document.has_outputs:
            await self.generate_documents(document_id)

        archive = self.archiver.pack(
            [ArchiveEntry(source_name=document.original_name, outputs=document.outputs)],
            batch=False,
        )
        return self._store_archive(archive)

    async def download_all(self) -> Archive:
        """Archive every document under the batch name.

        Documents without outputs are generated one after another first; each
        document's outputs are kept as soon as it completes.
        """
        start_time = time.time()
        for document in self.list_documents():
            # Skip documents removed while an earlier one was generating
            if not document.has_outputs and document.id in self._documents:
                await self.generate_documents(document.id)

        entries = [
            ArchiveEntry(source_name=document.original_name, outputs=document.outputs)
            for document in self.list_documents()
        ]
        archive = self.archiver.pack(entries, batch=True)
        logger.info(
            f"Prepared {archive.file_name} for {len(entries)} documents "
            f"in {time.time() - start_time:.2f}s"
        )
        return self._store_archive(archive)

    # Handles

    def read_blob(self, handle_id: str) -> bytes:
        return self.blob_store.get(handle_id)

    def revoke(self, handle_id: str) -> bool:
        return self.blob_store.revoke(handle_id)

    def close(self) -> None:
        """Release every document and handle held by the session."""
        for document in self.list_documents():
            self._discard(document)
        self.blob_store.clear()
        self._archives.clear()
        logger.info("Session closed")

    # Internal helpers

    @asynccontextmanager
    async def _locked(self, document_id: str) -> AsyncIterator[SourceDocument]:
        """Hold a document's lock, failing if it was removed while waiting."""
        document = self.get_document(document_id)
        async with self._locks[document_id]:
            if self._documents.get(document_id) is not document:
                raise DocumentNotFoundError(
                    f"Document was removed: {document_id}",
                    details={"document_id": document_id},
                )
            yield document

    def _discard(self, document: SourceDocument) -> None:
        self.editor.release(document)
        self._revoke_outputs(document)
        document.page_source.close()
        del self._documents[document.id]
        del self._locks[document.id]
        logger.info(f"Removed {document.original_name}")

    def _validate_upload(self, data: bytes, name: str) -> None:
        if not data:
            raise LoadError(f"{name} is empty", details={"name": name})

        if len(data) > self.settings.max_upload_size:
            raise LoadError(
                f"{name} is too large. Maximum size is "
                f"{self.settings.max_upload_size / 1024 / 1024:.0f}MB",
                details={"name": name, "size": len(data)},
            )

        extension = os.path.splitext(name)[1].lstrip(".").lower()
        allowed = [ext.lower() for ext in self.settings.allowed_extensions]
        if extension not in allowed:
            raise LoadError(
                f"Only {', '.join(allowed)} files are supported: {name}",
                details={"name": name},
            )

    def _store_outputs(self, document: SourceDocument, result: ExtractionResult) -> None:
        self._revoke_outputs(document)
        for output in result.outputs:
            output.handle = self.blob_store.put(
                output.content,
                name=output.file_name,
                media_type=PDF_MEDIA_TYPE,
                kind=BlobKind.OUTPUT,
            )
        document.outputs = list(result.outputs)

    def _revoke_outputs(self, document: SourceDocument) -> None:
        self.blob_store.revoke_many(
            output.handle.id for output in document.outputs if output.handle is not None
        )
        document.outputs = []

    def _store_archive(self, archive: Archive) -> Archive:
        # Only the latest archive is kept downloadable
        self.blob_store.revoke_many(self._archives)
        archive.handle = self.blob_store.put(
            archive.content,
            name=archive.file_name,
            media_type=ZIP_MEDIA_TYPE,
            kind=BlobKind.ARCHIVE,
        )
        self._archives = [archive.handle.id]
        return archive

    @staticmethod
    def _parse_category(value: Union[Category, str]) -> Category:
        try:
            return Category(value)
        except ValueError:
            raise ValidationError(f"Unknown category: {value}", details={"category": value})

    @staticmethod
    def _parse_direction(value: Union[RotationDirection, str]) -> RotationDirection:
        try:
            return RotationDirection(value)
        except ValueError:
            raise ValidationError(f"Unknown rotation direction: {value}", details={"direction": value})
