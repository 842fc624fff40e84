"""Tests for positional and manual page classification."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from modules.document_splitter.classifier import (
    MAX_CREDENTIAL_PAGES,
    classify_by_position,
    classify_by_ranges,
)
from modules.document_splitter.models import Category, DocumentConfig
from shared.exceptions import ValidationError


class TestClassifyByPosition:
    """Test the greedy positional rule."""

    @pytest.mark.parametrize("page_count", range(0, 25))
    def test_partition_covers_every_page_once(self, page_count):
        """Test that categories are disjoint and cover all pages."""
        groups = classify_by_position(page_count)
        assigned = [index for pages in groups.values() for index in pages]

        assert len(assigned) == len(set(assigned))
        assert set(assigned) == set(range(page_count))
        assert all(pages for pages in groups.values())

    @pytest.mark.parametrize("page_count", [0, 1, 5, 9, 40])
    def test_deterministic(self, page_count):
        """Test that repeated runs give identical output."""
        assert classify_by_position(page_count) == classify_by_position(page_count)

    def test_zero_pages(self):
        """Test that an empty document has no categories."""
        assert classify_by_position(0) == {}

    def test_single_page(self):
        assert classify_by_position(1) == {Category.IDENTITY: [0]}

    def test_two_pages(self):
        """Test that two pages only fill identity and tax ID."""
        assert classify_by_position(2) == {
            Category.IDENTITY: [0],
            Category.TAX_ID: [1],
        }

    def test_three_pages(self):
        """Test that the third page goes to the service letter, not credentials."""
        assert classify_by_position(3) == {
            Category.IDENTITY: [0],
            Category.TAX_ID: [1],
            Category.SERVICE_LETTER: [2],
        }

    def test_seven_pages(self):
        """Test that credentials stop two pages before the end."""
        assert classify_by_position(7) == {
            Category.IDENTITY: [0],
            Category.TAX_ID: [1],
            Category.CREDENTIALS: [2, 3, 4],
            Category.SERVICE_LETTER: [5],
            Category.RESUME: [6],
        }

    def test_credentials_capped(self):
        """Test that long bundles give at most four credential pages."""
        groups = classify_by_position(12)

        assert groups[Category.CREDENTIALS] == [2, 3, 4, 5]
        assert len(groups[Category.CREDENTIALS]) == MAX_CREDENTIAL_PAGES
        assert groups[Category.SERVICE_LETTER] == [6]
        assert groups[Category.RESUME] == list(range(7, 12))

    def test_category_order(self):
        """Test that categories appear in bundle order."""
        assert list(classify_by_position(10)) == list(Category)

    def test_negative_page_count(self):
        with pytest.raises(ValidationError):
            classify_by_position(-1)


class TestClassifyByRanges:
    """Test manual boundary configuration."""

    def test_default_configuration(self):
        """Test the configurator's initial boundaries on a seven page file."""
        config = DocumentConfig.default_for(7)
        groups = classify_by_ranges(config, 7)

        assert groups == {
            Category.IDENTITY: [0],
            Category.TAX_ID: [1],
            Category.CREDENTIALS: [2, 3],
            Category.SERVICE_LETTER: [4],
            Category.RESUME: [5, 6],
        }

    def test_wire_aliases(self):
        """Test building the configuration from the front end's field names."""
        config = DocumentConfig.model_validate({
            "cedula": 2,
            "rif": 1,
            "tituloStart": 3,
            "tituloEnd": 5,
            "constancia": 6,
            "curriculumStart": 7,
        })
        groups = classify_by_ranges(config, 8)

        assert groups[Category.IDENTITY] == [1]
        assert groups[Category.TAX_ID] == [0]
        assert groups[Category.CREDENTIALS] == [2, 3, 4]
        assert groups[Category.SERVICE_LETTER] == [5]
        assert groups[Category.RESUME] == [6, 7]

    def test_inverted_credentials_range(self):
        """Test that end before start yields no credentials."""
        config = DocumentConfig(
            identity=1, tax_id=2, credentials_start=4, credentials_end=3,
            service_letter=3, resume_start=4,
        )
        groups = classify_by_ranges(config, 5)

        assert Category.CREDENTIALS not in groups
        assert groups[Category.RESUME] == [3, 4]

    def test_overlap_rejected(self):
        """Test that a page claimed twice is an error."""
        config = DocumentConfig(
            identity=1, tax_id=2, credentials_start=2, credentials_end=4,
            service_letter=5, resume_start=6,
        )
        with pytest.raises(ValidationError) as exc_info:
            classify_by_ranges(config, 8)

        assert exc_info.value.details["page"] == 2
        assert exc_info.value.details["categories"] == ["tax_id", "credentials"]

    def test_clamping_beyond_last_page(self):
        """Test that boundaries past the end are clamped to the last page."""
        config = DocumentConfig(
            identity=1, tax_id=2, credentials_start=3, credentials_end=20,
            service_letter=3, resume_start=30,
        )
        # Clamped credentials now collide with the service letter
        with pytest.raises(ValidationError):
            classify_by_ranges(config, 4)

    def test_gaps_allowed(self):
        """Test that pages outside every range are simply left out."""
        config = DocumentConfig(
            identity=1, tax_id=3, credentials_start=5, credentials_end=5,
            service_letter=7, resume_start=9,
        )
        groups = classify_by_ranges(config, 9)
        assigned = {index for pages in groups.values() for index in pages}

        assert assigned == {0, 2, 4, 6, 8}

    def test_zero_pages(self):
        assert classify_by_ranges(DocumentConfig.default_for(0), 0) == {}

    def test_non_positive_boundary_rejected(self):
        """Test that boundaries are 1-based."""
        with pytest.raises(PydanticValidationError):
            DocumentConfig(
                identity=0, tax_id=2, credentials_start=3, credentials_end=4,
                service_letter=5, resume_start=6,
            )
