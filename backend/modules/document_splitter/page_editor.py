"""Per-document page edit state: category assignment, rotation and previews."""

import asyncio
from typing import Dict, List, Mapping, Optional, Sequence

from loguru import logger

from api.config import get_settings
from modules.storage.blob_store import BlobStore
from modules.storage.models import BlobHandle, BlobKind
from shared.exceptions import RenderError
from .classifier import classify_by_position
from .models import Category, PageEdit, RotationDirection, SourceDocument
from .renderer import render_page_preview


PREVIEW_MEDIA_TYPE = "image/png"


def rotate_angle(rotation: int, direction: RotationDirection) -> int:
    """Rotation after one 90 degree step in the given direction."""
    step = -90 if direction == RotationDirection.LEFT else 90
    return (rotation + step + 360) % 360


class PageEditor:
    """Seeds and mutates the classification of loaded documents.

    Every page edit owns one preview in the blob store. A preview is revoked
    as soon as a newer render of the same page replaces it.
    """

    def __init__(self, blob_store: BlobStore, zoom: Optional[float] = None):
        self.blob_store = blob_store
        self.zoom = get_settings().preview_zoom if zoom is None else zoom

    async def initialize(
        self,
        document: SourceDocument,
        mapping: Optional[Mapping[Category, Sequence[int]]] = None,
    ) -> Dict[Category, List[PageEdit]]:
        """Build the classification of a document with zero-rotation previews.

        Args:
            document: Document to seed
            mapping: Category to page indices (positional classification if None)

        Returns:
            The new classification

        Raises:
            RenderError: If any page fails to render; the document keeps its
                previous classification
        """
        if mapping is None:
            mapping = classify_by_position(document.page_count)

        classification: Dict[Category, List[PageEdit]] = {}
        created: List[str] = []
        try:
            for category in Category:
                indices = mapping.get(category) or []
                edits = []
                for index in indices:
                    preview = self._render(document, index, 0)
                    created.append(preview.id)
                    edits.append(PageEdit(source_index=index, rotation=0, category=category, preview=preview))
                    await asyncio.sleep(0)
                if edits:
                    classification[category] = edits
        except RenderError as e:
            self.blob_store.revoke_many(created)
            logger.error(f"Failed to initialize {document.original_name}: {e}")
            raise

        self.release(document)
        document.classification = classification
        document.edited = False

        logger.info(
            f"Initialized {document.original_name}: "
            + ", ".join(f"{c.value}={len(p)}" for c, p in classification.items())
        )
        return classification

    async def rotate(
        self,
        document: SourceDocument,
        category: Category,
        position: int,
        direction: RotationDirection,
    ) -> Optional[PageEdit]:
        """Rotate one page of a category by 90 degrees and re-render its preview.

        Returns:
            The replacement PageEdit, or None if category or position is absent
        """
        edits = document.classification.get(category)
        if not edits or not 0 <= position < len(edits):
            logger.debug(
                f"Ignoring rotation of {category.value}[{position}] in {document.original_name}"
            )
            return None

        current = edits[position]
        new_rotation = rotate_angle(current.rotation, direction)
        preview = self._render(document, current.source_index, new_rotation)

        replacement = current.model_copy(update={"rotation": new_rotation, "preview": preview})
        edits[position] = replacement
        if current.preview is not None:
            self.blob_store.revoke(current.preview.id)

        document.edited = True
        logger.debug(
            f"Rotated page {current.source_index + 1} of {document.original_name} "
            f"{direction.value} to {new_rotation} degrees"
        )
        await asyncio.sleep(0)
        return replacement

    def find(self, document: SourceDocument, source_index: int) -> Optional[PageEdit]:
        """Look up the edit holding a given source page."""
        for edits in document.classification.values():
            for edit in edits:
                if edit.source_index == source_index:
                    return edit
        return None

    def position_of(self, document: SourceDocument, source_index: int) -> Optional[int]:
        """Position of a source page inside its category."""
        edit = self.find(document, source_index)
        if edit is None:
            return None
        edits = document.classification[edit.category]
        return next(i for i, e in enumerate(edits) if e.source_index == source_index)

    def release(self, document: SourceDocument) -> None:
        """Revoke every preview of a document and clear its classification."""
        handles = [
            edit.preview.id
            for edits in document.classification.values()
            for edit in edits
            if edit.preview is not None
        ]
        self.blob_store.revoke_many(handles)
        document.classification = {}

    def _render(self, document: SourceDocument, index: int, rotation: int) -> BlobHandle:
        png = render_page_preview(document.page_source, index, rotation=rotation, zoom=self.zoom)
        return self.blob_store.put(
            png,
            name=f"{document.stem} - p{index + 1}.png",
            media_type=PREVIEW_MEDIA_TYPE,
            kind=BlobKind.PREVIEW,
        )
