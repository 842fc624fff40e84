"""Page-to-category assignment by position or by explicit boundaries.

Classification never looks at page content. The positional rule assumes the
usual bundle layout: identity card, tax ID, up to four credential pages, the
service letter, and the résumé filling the rest.
"""

from typing import Dict, List

from loguru import logger

from shared.exceptions import ValidationError
from .models import Category, DocumentConfig


MAX_CREDENTIAL_PAGES = 4
RESERVED_TRAILING_PAGES = 2

PageMapping = Dict[Category, List[int]]


def classify_by_position(page_count: int) -> PageMapping:
    """Partition page indices into categories with the greedy positional rule.

    Args:
        page_count: Total number of pages in the source PDF

    Returns:
        Category to ascending 0-based page indices; empty categories omitted
    """
    if page_count < 0:
        raise ValidationError(f"Page count cannot be negative: {page_count}")

    groups: PageMapping = {}
    cursor = 0

    if cursor < page_count:
        groups[Category.IDENTITY] = [cursor]
        cursor += 1
    if cursor < page_count:
        groups[Category.TAX_ID] = [cursor]
        cursor += 1

    # Credentials never eat into the two pages kept for the letter and résumé
    credentials_limit = min(cursor + MAX_CREDENTIAL_PAGES, page_count - RESERVED_TRAILING_PAGES)
    credentials = []
    while cursor < credentials_limit:
        credentials.append(cursor)
        cursor += 1
    if credentials:
        groups[Category.CREDENTIALS] = credentials

    if cursor < page_count:
        groups[Category.SERVICE_LETTER] = [cursor]
        cursor += 1

    resume = list(range(cursor, page_count))
    if resume:
        groups[Category.RESUME] = resume

    return groups


def classify_by_ranges(config: DocumentConfig, page_count: int) -> PageMapping:
    """Build the category mapping from user supplied 1-based boundaries.

    Boundaries are clamped to the document. An inverted credentials range
    yields no credentials category. Pages claimed by more than one category
    after clamping are rejected.

    Args:
        config: 1-based boundaries for every category
        page_count: Total number of pages in the source PDF

    Returns:
        Category to ascending 0-based page indices; empty categories omitted

    Raises:
        ValidationError: If two categories claim the same page
    """
    if page_count < 0:
        raise ValidationError(f"Page count cannot be negative: {page_count}")
    if page_count == 0:
        return {}

    last = page_count - 1

    def to_index(page_number: int) -> int:
        return max(0, min(page_number - 1, last))

    credentials_start = to_index(config.credentials_start)
    credentials_end = to_index(config.credentials_end)

    candidates: PageMapping = {
        Category.IDENTITY: [to_index(config.identity)],
        Category.TAX_ID: [to_index(config.tax_id)],
        Category.CREDENTIALS: list(range(credentials_start, credentials_end + 1)),
        Category.SERVICE_LETTER: [to_index(config.service_letter)],
        Category.RESUME: list(range(to_index(config.resume_start), page_count)),
    }
    groups = {category: pages for category, pages in candidates.items() if pages}

    owners: Dict[int, Category] = {}
    for category, pages in groups.items():
        for index in pages:
            if index in owners:
                raise ValidationError(
                    f"Page {index + 1} is assigned to both "
                    f"{owners[index].display_name} and {category.display_name}",
                    details={
                        "page": index + 1,
                        "categories": [owners[index].value, category.value],
                    },
                )
            owners[index] = category

    unassigned = [index + 1 for index in range(page_count) if index not in owners]
    if unassigned:
        logger.info(f"Pages left out by manual configuration: {unassigned}")

    return groups
