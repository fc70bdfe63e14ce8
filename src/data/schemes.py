"""Loader for the women's welfare scheme list.

The source export is not a real CSV: it is a plain list of lines in which
each scheme name is followed by a one-line description.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

import structlog

from src.data.fallback import DEFAULT_APPLICATION_URL, fallback_schemes
from src.models.enums import SchemeCategory
from src.models.scheme import SchemeRecord

logger = structlog.get_logger(__name__)

_DEFAULT_BENEFITS: Final[str] = "Financial and social support"
_DEFAULT_ELIGIBILITY: Final[str] = "Eligible women and families"

# First matching rule wins.
_CATEGORY_KEYWORDS: Final[list[tuple[SchemeCategory, tuple[str, ...]]]] = [
    (SchemeCategory.EDUCATION, ("education", "padhao", "school")),
    (SchemeCategory.HEALTH, ("health", "matru", "medical")),
    (SchemeCategory.SAFETY, ("safety", "violence", "protection")),
    (SchemeCategory.EMPOWERMENT, ("shakti", "empowerment")),
    (SchemeCategory.ENTREPRENEURSHIP, ("entrepreneur", "loan", "stand up")),
    (SchemeCategory.FINANCIAL, ("savings", "samriddhi", "financial")),
]


def determine_category(name: str) -> SchemeCategory:
    """Guess a scheme's category from keywords in its name."""
    lower = name.lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return category
    return SchemeCategory.GENERAL


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", name.lower()).replace("(", "").replace(")", "")


def parse_schemes_csv(path: Path) -> list[SchemeRecord]:
    """Parse alternating name / description lines into scheme records.

    A trailing name without a description is dropped.  Falls back to the
    built-in scheme list when the file is missing, unreadable, or yields
    no schemes.
    """
    if not path.exists():
        logger.warning("datasets.schemes_missing", path=str(path))
        return fallback_schemes()

    try:
        content = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError):
        logger.warning("datasets.schemes_unreadable", path=str(path), exc_info=True)
        return fallback_schemes()

    lines = [line for line in content.split("\n") if line.strip()]

    schemes: list[SchemeRecord] = []
    for i in range(0, len(lines) - 1, 2):
        name = lines[i].strip()
        details = lines[i + 1].strip()
        schemes.append(
            SchemeRecord(
                name=name,
                slug=slugify(name),
                details=details,
                benefits=_DEFAULT_BENEFITS,
                eligibility=_DEFAULT_ELIGIBILITY,
                application_url=DEFAULT_APPLICATION_URL,
                documents="",
                level="Central",
                category=determine_category(name),
            )
        )

    if not schemes:
        logger.warning("datasets.schemes_empty", path=str(path))
        return fallback_schemes()

    logger.info("datasets.schemes_loaded", count=len(schemes), source=str(path))
    return schemes
