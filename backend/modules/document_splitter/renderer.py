"""PyMuPDF helpers for page previews and page composition."""

from typing import Sequence

import fitz  # PyMuPDF

from shared.exceptions import ExtractionError, RenderError
from .models import PageSpec


def open_pdf(data: bytes) -> fitz.Document:
    """Open PDF bytes as a PyMuPDF document."""
    return fitz.open(stream=data, filetype="pdf")


def render_page_preview(
    pdf_doc: fitz.Document,
    page_index: int,
    rotation: int = 0,
    zoom: float = 1.0,
) -> bytes:
    """Rasterize one page to PNG at the given extra rotation.

    Args:
        pdf_doc: Source document
        page_index: 0-based page index
        rotation: Clockwise degrees added to the page's own rotation
        zoom: Scale factor (1.0 renders at 72 dpi)

    Returns:
        PNG bytes
    """
    if not 0 <= page_index < pdf_doc.page_count:
        raise RenderError(
            f"Page {page_index + 1} is out of range (document has {pdf_doc.page_count} pages)",
            details={"page_index": page_index},
        )

    try:
        page = pdf_doc.load_page(page_index)
        matrix = fitz.Matrix(zoom, zoom).prerotate(rotation)
        pixmap = page.get_pixmap(matrix=matrix, alpha=False)
        return pixmap.tobytes("png")
    except Exception as e:
        raise RenderError(
            f"Failed to render page {page_index + 1}: {e}",
            details={"page_index": page_index, "rotation": rotation},
        )


def compose_pages(
    pdf_doc: fitz.Document,
    pages: Sequence[PageSpec],
    garbage: int = 3,
) -> bytes:
    """Copy pages into a new PDF in the given order, applying rotations.

    Rotation is added to whatever rotation the source page already carries.

    Args:
        pdf_doc: Source document
        pages: Pages to copy, in output order
        garbage: PyMuPDF garbage collection level for the saved output

    Returns:
        Bytes of the new PDF
    """
    dest_pdf = fitz.open()
    try:
        for page in pages:
            if not 0 <= page.source_index < pdf_doc.page_count:
                raise ExtractionError(
                    f"Page {page.source_index + 1} is out of range "
                    f"(document has {pdf_doc.page_count} pages)",
                    details={"page_index": page.source_index},
                )
            dest_pdf.insert_pdf(pdf_doc, from_page=page.source_index, to_page=page.source_index)
            if page.rotation:
                copied = dest_pdf[dest_pdf.page_count - 1]
                copied.set_rotation((copied.rotation + page.rotation) % 360)

        return dest_pdf.tobytes(garbage=garbage, deflate=True)
    finally:
        dest_pdf.close()
