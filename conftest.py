"""Shared pytest fixtures for DocSplit."""

from typing import Callable, Optional, Sequence

import fitz  # PyMuPDF
import pytest

from api.config import Settings
from modules.storage.blob_store import BlobStore


def build_pdf(page_count: int, rotations: Optional[Sequence[int]] = None) -> bytes:
    """Create a PDF whose pages read "Page 1", "Page 2", ..."""
    doc = fitz.open()
    for i in range(page_count):
        page = doc.new_page(width=595, height=842)
        page.insert_text((72, 72), f"Page {i + 1}", fontsize=24)
        if rotations:
            page.set_rotation(rotations[i])
    data = doc.tobytes()
    doc.close()
    return data


def page_labels(pdf_bytes: bytes) -> list:
    """Read back the "Page N" label of every page of a PDF."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    labels = [page.get_text().strip() for page in doc]
    doc.close()
    return labels


@pytest.fixture
def pdf_factory() -> Callable[..., bytes]:
    """Build in-memory test PDFs."""
    return build_pdf


@pytest.fixture
def read_labels() -> Callable[[bytes], list]:
    """Read page labels back from generated PDFs."""
    return page_labels


@pytest.fixture
def open_pdf_doc():
    """Open test PDFs as fitz documents and close them afterwards."""
    opened = []

    def _open(page_count: int, rotations: Optional[Sequence[int]] = None) -> fitz.Document:
        doc = fitz.open(stream=build_pdf(page_count, rotations), filetype="pdf")
        opened.append(doc)
        return doc

    yield _open
    for doc in opened:
        doc.close()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the environment."""
    return Settings(log_dir=tmp_path / "logs", max_upload_size=5 * 1024 * 1024)


@pytest.fixture
def blob_store() -> BlobStore:
    return BlobStore()
