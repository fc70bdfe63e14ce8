"""Static coordinate tables for Indian states and major districts.

Coordinates are approximate administrative centroids used to place
dataset records on a map and to find the state nearest to a user.
"""

from __future__ import annotations

import math
import random
from typing import Final

from src.models.alert import Coordinate

_EARTH_RADIUS_KM: Final[float] = 6371.0

# Geographic centre of India; used when a state is unknown.
INDIA_CENTROID: Final[Coordinate] = Coordinate(lat=20.5937, lng=78.9629)

# Maximum jitter (degrees) applied to unknown districts in each direction.
_DISTRICT_JITTER_DEGREES: Final[float] = 0.25

STATE_COORDINATES: Final[dict[str, Coordinate]] = {
    "DELHI": Coordinate(lat=28.7041, lng=77.1025),
    "MAHARASHTRA": Coordinate(lat=19.7515, lng=75.7139),
    "UTTAR PRADESH": Coordinate(lat=26.8467, lng=80.9462),
    "WEST BENGAL": Coordinate(lat=22.9868, lng=87.8550),
    "KARNATAKA": Coordinate(lat=15.3173, lng=75.7139),
    "TAMIL NADU": Coordinate(lat=11.1271, lng=78.6569),
    "BIHAR": Coordinate(lat=25.0961, lng=85.3131),
    "GUJARAT": Coordinate(lat=22.2587, lng=71.1924),
    "PUNJAB": Coordinate(lat=31.1471, lng=75.3412),
    "RAJASTHAN": Coordinate(lat=27.0238, lng=74.2179),
    "ANDHRA PRADESH": Coordinate(lat=15.9129, lng=79.7400),
    "ASSAM": Coordinate(lat=26.2006, lng=92.9376),
    "CHHATTISGARH": Coordinate(lat=21.2787, lng=81.8661),
    "GOA": Coordinate(lat=15.2993, lng=74.1240),
    "HARYANA": Coordinate(lat=29.0588, lng=76.0856),
    "HIMACHAL PRADESH": Coordinate(lat=31.1048, lng=77.1734),
    "JAMMU & KASHMIR": Coordinate(lat=33.7782, lng=76.5762),
    "JHARKHAND": Coordinate(lat=23.6102, lng=85.2799),
    "KERALA": Coordinate(lat=10.8505, lng=76.2711),
    "MADHYA PRADESH": Coordinate(lat=22.9734, lng=78.6569),
    "MEGHALAYA": Coordinate(lat=25.4670, lng=91.3662),
    "ODISHA": Coordinate(lat=20.9517, lng=85.0985),
    "TELANGANA": Coordinate(lat=18.1124, lng=79.0193),
    "TRIPURA": Coordinate(lat=23.9408, lng=91.9882),
    "UTTARAKHAND": Coordinate(lat=30.0668, lng=79.0193),
    "ARUNACHAL PRADESH": Coordinate(lat=28.2180, lng=94.7278),
    "MANIPUR": Coordinate(lat=24.6637, lng=93.9063),
    "MIZORAM": Coordinate(lat=23.1645, lng=92.9376),
    "NAGALAND": Coordinate(lat=26.1584, lng=94.5624),
    "SIKKIM": Coordinate(lat=27.5330, lng=88.5122),
    "CHANDIGARH": Coordinate(lat=30.7333, lng=76.7794),
}

# Keyed by "STATE:DISTRICT".
DISTRICT_COORDINATES: Final[dict[str, Coordinate]] = {
    "CHANDIGARH:CHANDIGARH": Coordinate(lat=30.7333, lng=76.7794),
    "PUNJAB:MOHALI": Coordinate(lat=30.7046, lng=76.7179),
    "PUNJAB:PATIALA": Coordinate(lat=30.3398, lng=76.3869),
    "PUNJAB:LUDHIANA": Coordinate(lat=30.9010, lng=75.8573),
    "HARYANA:GURGAON": Coordinate(lat=28.4595, lng=77.0266),
    "HARYANA:FARIDABAD": Coordinate(lat=28.4089, lng=77.3178),
    "DELHI:NEW DELHI": Coordinate(lat=28.6139, lng=77.2090),
    "DELHI:SOUTH DELHI": Coordinate(lat=28.5244, lng=77.1855),
    "UTTAR PRADESH:NOIDA": Coordinate(lat=28.5355, lng=77.3910),
    "UTTAR PRADESH:LUCKNOW": Coordinate(lat=26.8467, lng=80.9462),
    "MAHARASHTRA:MUMBAI": Coordinate(lat=19.0760, lng=72.8777),
    "MAHARASHTRA:PUNE": Coordinate(lat=18.5204, lng=73.8567),
    "KARNATAKA:BANGALORE": Coordinate(lat=12.9716, lng=77.5946),
    "TAMIL NADU:CHENNAI": Coordinate(lat=13.0827, lng=80.2707),
}


def _region(name: str) -> str:
    return name.upper().strip()


def get_state_coordinates(state: str) -> Coordinate:
    """Centroid of *state* (case-insensitive), or the centre of India."""
    return STATE_COORDINATES.get(_region(state), INDIA_CENTROID)


def get_district_coordinates(
    state: str,
    district: str,
    rng: random.Random | None = None,
) -> Coordinate:
    """Coordinates of a known district.

    Unknown districts are placed near their state's centroid, offset by up
    to a quarter degree on each axis so that several of them do not stack
    on one map marker.  Pass a seeded *rng* for reproducible placement.
    """
    known = DISTRICT_COORDINATES.get(f"{_region(state)}:{_region(district)}")
    if known is not None:
        return known

    rng = rng or random.Random()
    base = get_state_coordinates(state)
    span = _DISTRICT_JITTER_DEGREES * 2
    return Coordinate(
        lat=base.lat + (rng.random() - 0.5) * span,
        lng=base.lng + (rng.random() - 0.5) * span,
    )


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    lat1_rad = math.radians(a.lat)
    lat2_rad = math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlon = math.radians(b.lng - a.lng)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    )
    return _EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def nearest_state(point: Coordinate) -> tuple[str, float]:
    """State that most likely contains *point*, with the distance to its anchor.

    Anchors are the known districts and every state centroid; the state of
    the closest anchor wins.
    """
    best_state = ""
    best_distance = math.inf
    for key, anchor in DISTRICT_COORDINATES.items():
        distance = haversine_km(point, anchor)
        if distance < best_distance:
            best_state, best_distance = key.split(":", 1)[0], distance

    for state, centroid in STATE_COORDINATES.items():
        distance = haversine_km(point, centroid)
        if distance < best_distance:
            best_state, best_distance = state, distance
    return best_state, best_distance
