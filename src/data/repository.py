"""In-memory index over all loaded government datasets."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from src.data.crime import parse_comprehensive_crime_csv, parse_crime_pdf
from src.data.disasters import parse_disaster_csv
from src.data.schemes import parse_schemes_csv

if TYPE_CHECKING:
    from config.settings import Settings
    from src.models.enums import SchemeCategory
    from src.models.hazard import CrimeRecord, DisasterRecord
    from src.models.scheme import SchemeRecord

logger = structlog.get_logger(__name__)


class DatasetRepository:
    """Loads every dataset once and serves records keyed by region.

    Crime records from the district-wise CSV are keyed ``STATE`` or
    ``STATE:DISTRICT``; the PDF summary is kept separately, keyed by
    state.  Disasters are grouped by their free-text location.

    Parameters
    ----------
    config:
        Settings providing the dataset paths.  Defaults to the
        application settings.
    """

    def __init__(self, config: Settings | None = None) -> None:
        if config is None:
            from config.settings import settings as config

        self._config = config
        self._schemes: list[SchemeRecord] = []
        self._crime_by_region: dict[str, CrimeRecord] = {}
        self._state_summaries: dict[str, CrimeRecord] = {}
        self._disasters: list[DisasterRecord] = []
        self._disasters_by_location: dict[str, list[DisasterRecord]] = {}
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> DatasetRepository:
        """(Re)load every dataset from disk.  Never raises on bad data."""
        self._schemes = parse_schemes_csv(self._config.schemes_path)
        self._crime_by_region = {
            record.region_key: record
            for record in parse_comprehensive_crime_csv(self._config.crime_csv_path)
        }
        self._state_summaries = {
            record.state: record for record in parse_crime_pdf(self._config.crime_pdf_path)
        }
        self._disasters = parse_disaster_csv(self._config.disaster_csv_path)

        self._disasters_by_location = {}
        for record in self._disasters:
            self._disasters_by_location.setdefault(record.location.upper(), []).append(record)

        self._loaded = True
        logger.info("datasets.repository_loaded", **self.summary())
        return self

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def summary(self) -> dict[str, int]:
        return {
            "schemes": len(self._schemes),
            "crime_regions": len(self._crime_by_region),
            "state_summaries": len(self._state_summaries),
            "disasters": len(self._disasters),
        }

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def schemes(self) -> list[SchemeRecord]:
        return list(self._schemes)

    @property
    def crime_by_region(self) -> dict[str, CrimeRecord]:
        return dict(self._crime_by_region)

    @property
    def disasters(self) -> list[DisasterRecord]:
        return list(self._disasters)

    def schemes_in_category(self, category: SchemeCategory) -> list[SchemeRecord]:
        return [scheme for scheme in self._schemes if scheme.category == category]

    def crime_for_region(self, state: str, district: str | None = None) -> CrimeRecord | None:
        key = state.upper().strip()
        if district:
            key = f"{key}:{district.upper().strip()}"
        return self._crime_by_region.get(key)

    def crime_for_state(self, state: str) -> CrimeRecord | None:
        """Best available record for a whole state.

        Prefers a state-level CSV row, then the PDF summary, then the
        state's district with the most recorded crimes.
        """
        key = state.upper().strip()
        record = self._crime_by_region.get(key) or self._state_summaries.get(key)
        if record is not None:
            return record

        districts = [r for r in self._crime_by_region.values() if r.state == key]
        return max(districts, key=lambda r: r.total_crimes, default=None)

    def disasters_at(self, location: str) -> list[DisasterRecord]:
        return list(self._disasters_by_location.get(location.upper().strip(), []))
