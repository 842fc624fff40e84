"""Pydantic models for document splitting."""

import os
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.storage.models import BlobHandle
from shared.exceptions import ExtractionPartialFailure


VALID_ROTATIONS = (0, 90, 180, 270)


class Category(str, Enum):
    """Logical documents bundled in an applicant's file.

    Member order is the order outputs are extracted in.
    """

    IDENTITY = "identity"
    TAX_ID = "tax_id"
    CREDENTIALS = "credentials"
    SERVICE_LETTER = "service_letter"
    RESUME = "resume"

    @property
    def slug(self) -> str:
        """Fragment used in output file names."""
        return _CATEGORY_SLUGS[self]

    @property
    def display_name(self) -> str:
        """Localized label shown to users."""
        return _CATEGORY_LABELS[self]


_CATEGORY_SLUGS = {
    Category.IDENTITY: "cedula",
    Category.TAX_ID: "rif",
    Category.CREDENTIALS: "titulos",
    Category.SERVICE_LETTER: "constancia",
    Category.RESUME: "curriculum",
}

_CATEGORY_LABELS = {
    Category.IDENTITY: "Cédula",
    Category.TAX_ID: "RIF",
    Category.CREDENTIALS: "Títulos",
    Category.SERVICE_LETTER: "Constancia",
    Category.RESUME: "Curriculum",
}


class RotationDirection(str, Enum):
    """Direction of a 90 degree rotation step."""

    LEFT = "left"
    RIGHT = "right"


class PageSpec(BaseModel):
    """A source page selected for an output, with its rotation."""

    source_index: int = Field(ge=0, description="0-based page index in the source PDF")
    rotation: int = Field(default=0, description="Clockwise rotation in degrees")

    @field_validator("rotation")
    @classmethod
    def _check_rotation(cls, value: int) -> int:
        if value not in VALID_ROTATIONS:
            raise ValueError(f"rotation must be one of {VALID_ROTATIONS}, got {value}")
        return value


class PageEdit(PageSpec):
    """One page inside a category while the document is being edited."""

    category: Category
    preview: Optional[BlobHandle] = Field(
        default=None, description="PNG render of the page at its current rotation"
    )


class OutputDocument(BaseModel):
    """A freshly composed PDF holding one category's pages."""

    file_name: str
    category: Category
    content: bytes = Field(repr=False)
    page_indices: List[int] = Field(default_factory=list)
    handle: Optional[BlobHandle] = None

    @property
    def page_count(self) -> int:
        return len(self.page_indices)


class SourceDocument(BaseModel):
    """A PDF loaded into the session."""

    id: str = Field(description="Session-unique document identifier")
    original_name: str
    page_count: int = Field(ge=0, frozen=True)
    page_source: Any = Field(exclude=True, repr=False, description="Open fitz.Document")
    extracted_identifier: str

    classification: Dict[Category, List[PageEdit]] = Field(default_factory=dict)
    edited: bool = False
    outputs: List[OutputDocument] = Field(default_factory=list)
    loaded_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def stem(self) -> str:
        """Original name without its extension."""
        return os.path.splitext(self.original_name)[0]

    @property
    def has_outputs(self) -> bool:
        return bool(self.outputs)


class ExtractionResult(BaseModel):
    """Result of extracting the categories of one document."""

    outputs: List[OutputDocument] = Field(default_factory=list)
    failed: Dict[Category, str] = Field(default_factory=dict)
    processing_time: float = 0.0

    @property
    def partial(self) -> bool:
        """Whether at least one category could not be extracted."""
        return bool(self.failed)

    def raise_for_failures(self) -> None:
        """Raise ExtractionPartialFailure if any category is missing."""
        if self.failed:
            missing = ", ".join(category.value for category in self.failed)
            raise ExtractionPartialFailure(
                f"Failed to extract: {missing}",
                failed=dict(self.failed),
                outputs=list(self.outputs),
            )


class DocumentConfig(BaseModel):
    """User supplied 1-based page boundaries for each category."""

    identity: int = Field(alias="cedula", ge=1)
    tax_id: int = Field(alias="rif", ge=1)
    credentials_start: int = Field(alias="tituloStart", ge=1)
    credentials_end: int = Field(alias="tituloEnd", ge=1)
    service_letter: int = Field(alias="constancia", ge=1)
    resume_start: int = Field(alias="curriculumStart", ge=1)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def default_for(cls, page_count: int) -> "DocumentConfig":
        """Initial boundaries offered by the configurator.

        Identity, tax ID, service letter and résumé each claim at least one
        page after clamping, so the defaults only stay disjoint from four
        pages up. Shorter documents need the positional classification.
        """
        return cls(
            identity=1,
            tax_id=2,
            credentials_start=3,
            credentials_end=max(1, min(4, page_count - 2)),
            service_letter=max(1, min(5, page_count - 1)),
            resume_start=max(1, min(6, page_count)),
        )


class Archive(BaseModel):
    """A ZIP bundle ready for download."""

    file_name: str
    content: bytes = Field(repr=False)
    folders: List[str] = Field(default_factory=list)
    handle: Optional[BlobHandle] = None
