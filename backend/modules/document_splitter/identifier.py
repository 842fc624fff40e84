"""Applicant identifier extraction from source file names."""

import re
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from api.config import get_settings


MIN_IDENTIFIER_DIGITS = 7
MAX_IDENTIFIER_DIGITS = 8

_NON_DIGITS = re.compile(r"\D", re.ASCII)


@dataclass
class IdentifierPattern:
    """Pattern tried against a file name, most specific first."""
    name: str
    pattern: re.Pattern
    group: int = 1


IDENTIFIER_PATTERNS: List[IdentifierPattern] = [
    # 12.345.678 or 9.876.543
    IdentifierPattern(
        name="grouped",
        pattern=re.compile(r"(\d{1,2}\.?\d{3}\.?\d{3,4})", re.ASCII),
    ),
    # V-12.345.678, v 9876543
    IdentifierPattern(
        name="nationality_prefixed",
        pattern=re.compile(r"V[-\s]?(\d{1,2}\.?\d{3}\.?\d{3,4})", re.ASCII | re.IGNORECASE),
    ),
    IdentifierPattern(
        name="bare",
        pattern=re.compile(r"(\d{7,8})", re.ASCII),
    ),
]


def _accept(candidate: str) -> Optional[str]:
    digits = _NON_DIGITS.sub("", candidate)
    if MIN_IDENTIFIER_DIGITS <= len(digits) <= MAX_IDENTIFIER_DIGITS:
        return digits
    return None


def extract_identifier(filename: str, default: Optional[str] = None) -> str:
    """Derive the applicant's national ID number from a file name.

    Only the first match of each pattern is considered. When no pattern
    yields a 7-8 digit number, the first eight digits of the whole name are
    used if there are at least seven.

    Args:
        filename: Original name of the uploaded file
        default: Value returned when nothing is found (settings sentinel if None)

    Returns:
        Digit string, or the sentinel
    """
    for entry in IDENTIFIER_PATTERNS:
        match = entry.pattern.search(filename)
        if not match:
            continue
        identifier = _accept(match.group(entry.group) or match.group(0))
        if identifier:
            logger.debug(f"Identifier {identifier} from {filename!r} ({entry.name})")
            return identifier

    digits = _NON_DIGITS.sub("", filename)
    if len(digits) >= MIN_IDENTIFIER_DIGITS:
        return digits[:MAX_IDENTIFIER_DIGITS]

    if default is None:
        default = get_settings().unknown_identifier
    logger.warning(f"No identifier found in file name {filename!r}")
    return default
