"""Packaging module for DocSplit - bundles generated PDFs into ZIP archives."""

from .archiver import ArchiveEntry, Archiver

__all__ = [
    "ArchiveEntry",
    "Archiver",
]
