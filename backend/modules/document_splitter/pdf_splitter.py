"""PDF splitter for breaking an applicant bundle into one PDF per category."""

import asyncio
import time
from typing import Dict, List, Mapping, Optional, Sequence, Union

import fitz  # PyMuPDF
from loguru import logger

from api.config import get_settings
from shared.exceptions import DocSplitError, ExtractionError, ValidationError
from .classifier import classify_by_position
from .models import (
    Category,
    ExtractionResult,
    OutputDocument,
    PageSpec,
    SourceDocument,
)
from .renderer import compose_pages


PageEntry = Union[int, PageSpec]
CategoryPages = Mapping[Category, Sequence[PageEntry]]


def output_file_name(identifier: str, category: Category, extension: Optional[str] = None) -> str:
    """Deterministic name of a category's output, e.g. ``12345678 - rif.pdf``."""
    if extension is None:
        extension = get_settings().output_extension
    return f"{identifier} - {category.slug}{extension}"


class PDFSplitter:
    """Composes one fresh PDF per category from a loaded source document."""

    def __init__(self, garbage: Optional[int] = None):
        settings = get_settings()
        self.garbage = settings.pdf_garbage_level if garbage is None else garbage

    async def extract(
        self,
        pdf_doc: fitz.Document,
        mapping: CategoryPages,
        identifier: str,
    ) -> ExtractionResult:
        """Extract every non-empty category of the mapping.

        A category that cannot be composed is recorded in ``failed`` and the
        remaining categories are still extracted.

        Args:
            pdf_doc: Source document to copy pages from
            mapping: Category to page entries (indices or PageSpec objects)
            identifier: Applicant identifier used in output names

        Returns:
            ExtractionResult with outputs sorted by file name
        """
        start_time = time.time()
        result = ExtractionResult()

        for category in self._ordered_categories(mapping):
            entries = mapping[category]
            if not entries:
                continue

            try:
                pages = self._normalize(entries)
                output = self._extract_category(pdf_doc, category, pages, identifier)
                result.outputs.append(output)
                logger.info(
                    f"Extracted {output.file_name} "
                    f"(pages {', '.join(str(i + 1) for i in output.page_indices)})"
                )
            except DocSplitError as e:
                logger.error(f"Failed to extract {category.value}: {e}")
                result.failed[category] = e.message
            except Exception as e:
                logger.error(f"Unexpected error extracting {category.value}: {e}")
                result.failed[category] = str(e)

            # Let other documents in the session make progress
            await asyncio.sleep(0)

        result.outputs.sort(key=lambda output: output.file_name)
        result.processing_time = time.time() - start_time

        if result.failed:
            logger.warning(
                f"Extraction finished with {len(result.failed)} failed categories: "
                f"{', '.join(c.value for c in result.failed)}"
            )
        return result

    async def extract_positional(self, document: SourceDocument) -> ExtractionResult:
        """Extract a document straight from the positional classification."""
        mapping = classify_by_position(document.page_count)
        return await self.extract(document.page_source, mapping, document.extracted_identifier)

    async def extract_edited(self, document: SourceDocument) -> ExtractionResult:
        """Extract a document from its edited classification."""
        snapshot: Dict[Category, List[PageSpec]] = {
            category: [PageSpec(source_index=e.source_index, rotation=e.rotation) for e in edits]
            for category, edits in document.classification.items()
        }
        return await self.extract(document.page_source, snapshot, document.extracted_identifier)

    def _extract_category(
        self,
        pdf_doc: fitz.Document,
        category: Category,
        pages: List[PageSpec],
        identifier: str,
    ) -> OutputDocument:
        indices = [page.source_index for page in pages]
        if len(set(indices)) != len(indices):
            raise ExtractionError(
                f"Duplicate pages in {category.value}: {indices}",
                details={"category": category.value, "pages": indices},
            )

        content = compose_pages(pdf_doc, pages, garbage=self.garbage)
        return OutputDocument(
            file_name=output_file_name(identifier, category),
            category=category,
            content=content,
            page_indices=indices,
        )

    @staticmethod
    def _ordered_categories(mapping: CategoryPages) -> List[Category]:
        unknown = [key for key in mapping if key not in Category.__members__.values()]
        if unknown:
            raise ValidationError(f"Unknown categories: {unknown}", details={"categories": unknown})
        return [category for category in Category if category in mapping]

    @staticmethod
    def _normalize(entries: Sequence[PageEntry]) -> List[PageSpec]:
        """Turn entries into PageSpec objects sorted by source page."""
        pages = [
            entry if isinstance(entry, PageSpec) else PageSpec(source_index=entry)
            for entry in entries
        ]
        return sorted(pages, key=lambda page: page.source_index)
