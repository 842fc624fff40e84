"""Document splitter module for DocSplit.

This module handles:
- Applicant identifier extraction from file names
- Positional and manual page classification
- Per-page rotation state with live previews
- Composition of one output PDF per category
"""

from .classifier import classify_by_position, classify_by_ranges
from .identifier import extract_identifier
from .models import (
    Category,
    DocumentConfig,
    ExtractionResult,
    OutputDocument,
    PageEdit,
    PageSpec,
    RotationDirection,
    SourceDocument,
)
from .page_editor import PageEditor
from .pdf_splitter import PDFSplitter, output_file_name

__all__ = [
    "classify_by_position",
    "classify_by_ranges",
    "extract_identifier",
    "output_file_name",
    "Category",
    "DocumentConfig",
    "ExtractionResult",
    "OutputDocument",
    "PageEdit",
    "PageEditor",
    "PageSpec",
    "PDFSplitter",
    "RotationDirection",
    "SourceDocument",
]
