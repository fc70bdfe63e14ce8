"""Built-in records served when a dataset file is missing or unreadable."""

from __future__ import annotations

from typing import Final

from src.models.enums import CrimeRiskLevel, SchemeCategory
from src.models.hazard import CrimeRecord
from src.models.scheme import SchemeRecord

FALLBACK_SCHEME_COUNT: Final[int] = 100
DEFAULT_APPLICATION_URL: Final[str] = "https://india.gov.in"

_BASE_SCHEMES: Final[list[dict[str, str]]] = [
    {
        "name": "Beti Bachao Beti Padhao",
        "category": SchemeCategory.EDUCATION,
        "details": "Government scheme to save and educate girl children",
        "benefits": "Financial support for girl child education",
        "eligibility": "Families with girl children",
    },
    {
        "name": "Pradhan Mantri Matru Vandana Yojana",
        "category": SchemeCategory.HEALTH,
        "details": "Maternity benefit scheme for pregnant mothers",
        "benefits": "Cash incentive of Rs 5000",
        "eligibility": "Pregnant mothers",
    },
    {
        "name": "Sukanya Samriddhi Yojana",
        "category": SchemeCategory.FINANCIAL,
        "details": "Savings scheme for girl child",
        "benefits": "High interest savings account",
        "eligibility": "Girl child under 10 years",
    },
    {
        "name": "Mahila Shakti Kendra",
        "category": SchemeCategory.EMPOWERMENT,
        "details": "Women empowerment program",
        "benefits": "Skill development and training",
        "eligibility": "Rural women",
    },
    {
        "name": "One Stop Centre",
        "category": SchemeCategory.SAFETY,
        "details": "Support for women facing violence",
        "benefits": "Legal aid and counseling",
        "eligibility": "Women in distress",
    },
    {
        "name": "Women Helpline",
        "category": SchemeCategory.SAFETY,
        "details": "24x7 helpline for women",
        "benefits": "Emergency support",
        "eligibility": "All women",
    },
    {
        "name": "Ujjawala Scheme",
        "category": SchemeCategory.SAFETY,
        "details": "Prevention of trafficking",
        "benefits": "Rehabilitation support",
        "eligibility": "Trafficked women",
    },
    {
        "name": "Swadhar Greh",
        "category": SchemeCategory.SAFETY,
        "details": "Shelter for women in distress",
        "benefits": "Temporary accommodation",
        "eligibility": "Homeless women",
    },
    {
        "name": "Working Women Hostel",
        "category": SchemeCategory.SAFETY,
        "details": "Safe accommodation for working women",
        "benefits": "Affordable housing",
        "eligibility": "Working women",
    },
    {
        "name": "Mahila Police Volunteers",
        "category": SchemeCategory.SAFETY,
        "details": "Community policing program",
        "benefits": "Safety awareness",
        "eligibility": "Women volunteers",
    },
]


def fallback_schemes() -> list[SchemeRecord]:
    """One hundred schemes cycling through ten well-known central schemes."""
    schemes: list[SchemeRecord] = []
    for i in range(FALLBACK_SCHEME_COUNT):
        base = _BASE_SCHEMES[i % len(_BASE_SCHEMES)]
        base_slug = "-".join(base["name"].lower().split())
        schemes.append(
            SchemeRecord(
                name=f"{base['name']} {i // 10 + 1}",
                slug=f"{base_slug}-{i + 1}",
                details=base["details"],
                benefits=base["benefits"],
                eligibility=base["eligibility"],
                application_url=DEFAULT_APPLICATION_URL,
                level="Central",
                category=base["category"],
            )
        )
    return schemes


def _crime(
    state: str,
    rape: int,
    kidnapping: int,
    dowry_death: int,
    assault_on_women: int,
    assault_on_modesty: int,
    domestic_violence: int,
    trafficking: int,
    total_crimes: int,
    risk_level: CrimeRiskLevel,
) -> CrimeRecord:
    return CrimeRecord(
        state=state,
        year=2020,
        rape=rape,
        kidnapping=kidnapping,
        dowry_death=dowry_death,
        assault_on_women=assault_on_women,
        assault_on_modesty=assault_on_modesty,
        domestic_violence=domestic_violence,
        trafficking=trafficking,
        total_crimes=total_crimes,
        risk_level=risk_level,
        highest_crime_type="Domestic Violence",
        highest_crime_count=domestic_violence,
    )


def fallback_crime_records() -> list[CrimeRecord]:
    # Risk levels are curated, not derived from the totals.
    return [
        _crime("DELHI", 1200, 800, 100, 500, 300, 1500, 100, 4500, CrimeRiskLevel.CRITICAL),
        _crime("MAHARASHTRA", 1400, 900, 120, 600, 350, 1800, 80, 5250, CrimeRiskLevel.CRITICAL),
        _crime("UTTAR PRADESH", 2000, 1200, 200, 800, 500, 2500, 100, 7300, CrimeRiskLevel.CRITICAL),
        _crime("WEST BENGAL", 1100, 700, 90, 450, 280, 1400, 80, 4100, CrimeRiskLevel.HIGH),
        _crime("KARNATAKA", 600, 400, 50, 250, 150, 800, 50, 2300, CrimeRiskLevel.MEDIUM),
    ]
