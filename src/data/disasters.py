"""Loader for the EM-DAT disaster export for India."""

from __future__ import annotations

import csv
from pathlib import Path

import structlog

from src.data._values import cell, float_or_zero, parse_float, parse_int
from src.models.enums import DisasterRiskLevel
from src.models.hazard import DisasterRecord

logger = structlog.get_logger(__name__)


def classify_disaster_risk(deaths: float, affected: float) -> DisasterRiskLevel:
    """Both deaths and affected must stay under a bucket's limits to qualify."""
    if deaths < 10 and affected < 1_000:
        return DisasterRiskLevel.LOW
    if deaths < 100 and affected < 10_000:
        return DisasterRiskLevel.MODERATE
    if deaths < 1_000 and affected < 100_000:
        return DisasterRiskLevel.HIGH
    return DisasterRiskLevel.SEVERE


def _parse_row(row: dict[str, str | None]) -> DisasterRecord | None:
    disaster_type = cell(row, "Disaster Type")
    year = parse_int(cell(row, "Start Year"))
    if not disaster_type or not year:
        return None

    deaths = float_or_zero(cell(row, "Total Deaths"))
    affected = float_or_zero(cell(row, "Total Affected")) or float_or_zero(cell(row, "No. Affected"))
    month = cell(row, "Start Month")
    latitude = cell(row, "Latitude")
    longitude = cell(row, "Longitude")

    return DisasterRecord(
        location=cell(row, "Location") or "Unknown",
        disaster_type=disaster_type,
        disaster_subtype=cell(row, "Disaster Subtype") or disaster_type,
        year=year,
        month=parse_int(month) if month else None,
        deaths=deaths,
        affected=affected,
        latitude=parse_float(latitude) if latitude else None,
        longitude=parse_float(longitude) if longitude else None,
        risk_level=classify_disaster_risk(deaths, affected),
    )


def parse_disaster_csv(path: Path) -> list[DisasterRecord]:
    """Parse disaster events, newest year first.

    Events of the same year keep their location grouping (locations in
    first-seen order).  A missing or malformed file yields an empty list;
    there is no built-in disaster data.
    """
    if not path.exists():
        logger.warning("datasets.disaster_csv_missing", path=str(path))
        return []

    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            rows = list(csv.DictReader(f))
    except (OSError, UnicodeDecodeError, csv.Error):
        logger.warning("datasets.disaster_csv_malformed", path=str(path), exc_info=True)
        return []

    by_location: dict[str, list[DisasterRecord]] = {}
    for row in rows:
        record = _parse_row(row)
        if record is not None:
            by_location.setdefault(record.location, []).append(record)

    disasters = [record for records in by_location.values() for record in records]
    disasters.sort(key=lambda record: record.year, reverse=True)

    logger.info("datasets.disaster_csv_loaded", count=len(disasters), source=str(path))
    return disasters
