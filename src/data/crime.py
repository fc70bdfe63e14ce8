"""Loaders for NCRB crimes-against-women statistics.

Two sources are supported:

* the district-wise CSV covering 2001-2014 (``STATE/UT``, ``DISTRICT``,
  ``Year`` and one column per crime head), and
* the state-wise summary table in the published PDF, read page by page
  with pypdf (one whitespace-separated row per state and year).  A plain
  text dump of that table is accepted too.

Both keep only the most recent year for each region and classify it into
a fixed risk bucket.  The two sources use different thresholds because
the summary table aggregates whole states.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Final

import structlog
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from src.data._values import cell, int_or_zero, parse_int
from src.data.fallback import fallback_crime_records
from src.models.enums import CrimeRiskLevel
from src.models.hazard import CrimeRecord

logger = structlog.get_logger(__name__)

# (upper bound exclusive, level); anything above the last bound is critical.
_DISTRICT_RISK_BOUNDS: Final[tuple[tuple[int, CrimeRiskLevel], ...]] = (
    (500, CrimeRiskLevel.LOW),
    (2000, CrimeRiskLevel.MEDIUM),
    (5000, CrimeRiskLevel.HIGH),
)
_STATE_SUMMARY_RISK_BOUNDS: Final[tuple[tuple[int, CrimeRiskLevel], ...]] = (
    (2000, CrimeRiskLevel.LOW),
    (5000, CrimeRiskLevel.MEDIUM),
    (10000, CrimeRiskLevel.HIGH),
)

# CSV column -> CrimeRecord field, in crime-head order.
_CSV_COLUMNS: Final[dict[str, str]] = {
    "Rape": "rape",
    "Kidnapping and Abduction": "kidnapping",
    "Dowry Deaths": "dowry_death",
    "Assault on women with intent to outrage her modesty": "assault_on_women",
    "Insult to modesty of Women": "assault_on_modesty",
    "Cruelty by Husband or his Relatives": "domestic_violence",
    "Importation of Girls": "trafficking",
}

_CRIME_FIELDS: Final[tuple[str, ...]] = tuple(_CSV_COLUMNS.values())

_CSV_LABELS: Final[tuple[str, ...]] = (
    "Rape",
    "Kidnapping & Abduction",
    "Dowry Deaths",
    "Assault on Women",
    "Assault on Modesty",
    "Domestic Violence",
    "Trafficking",
)
_PDF_LABELS: Final[tuple[str, ...]] = _CSV_LABELS[:-1] + ("Women Trafficking",)

# A token above this is taken as the year that ends the state name.
_MIN_YEAR_TOKEN: Final[int] = 1900


def _bucket(total: int, bounds: tuple[tuple[int, CrimeRiskLevel], ...]) -> CrimeRiskLevel:
    for upper, level in bounds:
        if total < upper:
            return level
    return CrimeRiskLevel.CRITICAL


def classify_crime_risk(total_crimes: int) -> CrimeRiskLevel:
    """Risk bucket for a district-level (comprehensive CSV) total."""
    return _bucket(total_crimes, _DISTRICT_RISK_BOUNDS)


def classify_state_summary_risk(total_crimes: int) -> CrimeRiskLevel:
    """Risk bucket for a state-level (PDF summary) total."""
    return _bucket(total_crimes, _STATE_SUMMARY_RISK_BOUNDS)


def _dominant(counts: list[int], labels: tuple[str, ...]) -> tuple[str, int]:
    # Ties go to the earlier crime head.
    best = 0
    for i in range(1, len(counts)):
        if counts[i] > counts[best]:
            best = i
    return labels[best], counts[best]


def _build_record(
    state: str,
    district: str | None,
    year: int,
    counts: list[int],
    labels: tuple[str, ...],
    risk: CrimeRiskLevel | None = None,
) -> CrimeRecord:
    total = sum(counts)
    highest_type, highest_count = _dominant(counts, labels)
    return CrimeRecord(
        state=state,
        district=district,
        year=year,
        **dict(zip(_CRIME_FIELDS, counts)),
        total_crimes=total,
        risk_level=risk if risk is not None else classify_crime_risk(total),
        highest_crime_type=highest_type,
        highest_crime_count=highest_count,
    )


def _keep_latest(records: list[CrimeRecord]) -> list[CrimeRecord]:
    """Most recent record per region, in first-seen region order."""
    latest: dict[str, CrimeRecord] = {}
    for record in records:
        existing = latest.get(record.region_key)
        if existing is None or record.year > existing.year:
            latest[record.region_key] = record
    return list(latest.values())


# ---------------------------------------------------------------------------
# District-wise CSV
# ---------------------------------------------------------------------------


def parse_comprehensive_crime_csv(path: Path) -> list[CrimeRecord]:
    """Parse the district-wise 2001-2014 CSV.

    Rows without a state or year, and rows with no recorded crimes, are
    skipped.  Falls back to built-in state records when the file is
    missing, malformed, or yields nothing.
    """
    if not path.exists():
        logger.warning("datasets.crime_csv_missing", path=str(path))
        return fallback_crime_records()

    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            rows = list(csv.DictReader(f))
    except (OSError, UnicodeDecodeError, csv.Error):
        logger.warning("datasets.crime_csv_malformed", path=str(path), exc_info=True)
        return fallback_crime_records()

    records: list[CrimeRecord] = []
    for row in rows:
        state = cell(row, "STATE/UT").upper()
        year = parse_int(cell(row, "Year"))
        if not state or not year:
            continue

        counts = [int_or_zero(cell(row, column)) for column in _CSV_COLUMNS]
        if sum(counts) == 0:
            continue

        district = cell(row, "DISTRICT").upper() or None
        records.append(_build_record(state, district, year, counts, _CSV_LABELS))

    latest = _keep_latest(records)
    if not latest:
        logger.warning("datasets.crime_csv_empty", path=str(path))
        return fallback_crime_records()

    logger.info("datasets.crime_csv_loaded", count=len(latest), rows=len(rows), source=str(path))
    return latest


# ---------------------------------------------------------------------------
# State-wise summary (PDF text layer)
# ---------------------------------------------------------------------------


def parse_crime_summary_line(line: str) -> CrimeRecord | None:
    """Parse ``<State name> <Year> <seven counts>``; ``None`` for other lines.

    >>> parse_crime_summary_line("Tamil Nadu 2012 737 1811 110 1471 502 1965 0").state
    'TAMIL NADU'
    """
    parts = line.split()
    if len(parts) < 9 or "State" in parts or "Year" in parts:
        return None

    year_index = 0
    for i, part in enumerate(parts):
        value = parse_int(part)
        if value is not None and value > _MIN_YEAR_TOKEN:
            year_index = i
            break
    # A row must start with a state name.
    if year_index == 0:
        return None

    state = " ".join(parts[:year_index]).upper()
    year = parse_int(parts[year_index]) or 0
    counts = [
        int_or_zero(parts[year_index + offset]) if year_index + offset < len(parts) else 0
        for offset in range(1, len(_CRIME_FIELDS) + 1)
    ]
    return _build_record(
        state,
        None,
        year,
        counts,
        _PDF_LABELS,
        risk=classify_state_summary_risk(sum(counts)),
    )


def _read_summary_text(path: Path) -> str:
    if path.suffix.lower() != ".pdf":
        return path.read_text(encoding="utf-8", errors="replace")

    reader = PdfReader(path)
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def parse_crime_pdf(path: Path) -> list[CrimeRecord]:
    """Parse the state-wise summary table of the NCRB PDF.

    Files with a ``.pdf`` suffix go through pypdf text extraction; any
    other suffix is read as an already extracted text dump.
    """
    if not path.exists():
        logger.warning("datasets.crime_pdf_missing", path=str(path))
        return fallback_crime_records()

    try:
        content = _read_summary_text(path)
    except (OSError, PyPdfError):
        logger.warning("datasets.crime_pdf_unreadable", path=str(path), exc_info=True)
        return fallback_crime_records()

    records = [
        record
        for line in content.split("\n")
        if line.strip() and (record := parse_crime_summary_line(line)) is not None
    ]

    latest = _keep_latest(records)
    if not latest:
        logger.warning("datasets.crime_pdf_empty", path=str(path))
        return fallback_crime_records()

    logger.info("datasets.crime_pdf_loaded", count=len(latest), source=str(path))
    return latest
