"""Sales coverage regions across the Indonesian archipelago."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from shapely.geometry import Point, box

UNKNOWN_REGION = "Unknown"

# (name, lat_min, lat_max, lon_min, lon_max). Boxes overlap at the edges, so
# order matters: the first matching region wins.
_REGION_BOUNDS: tuple[tuple[str, float, float, float, float], ...] = (
    ("Java", -8.5, -5.5, 105.0, 114.5),
    ("Sumatra", -0.5, 6.0, 95.0, 106.0),
    ("Kalimantan", -4.0, 7.0, 108.0, 119.0),
    ("Sulawesi", -6.0, 2.0, 118.0, 125.0),
    ("Papua", -11.0, 0.0, 130.0, 141.0),
    ("Bali & Nusa Tenggara", -9.5, -7.5, 114.0, 125.0),
    ("Maluku", -6.0, 2.0, 125.0, 130.0),
)

REGIONS = tuple(
    (name, box(lon_min, lat_min, lon_max, lat_max))
    for name, lat_min, lat_max, lon_min, lon_max in _REGION_BOUNDS
)


def classify_region(lat: float, lon: float) -> str:
    """Return the coverage region containing the point (boundaries inclusive)."""

    point = Point(lon, lat)
    for name, polygon in REGIONS:
        if polygon.intersects(point):
            return name
    return UNKNOWN_REGION


def region_counts(points: Iterable[tuple[float, float]]) -> dict[str, int]:
    """Count (lat, lon) points per region."""

    counts = Counter(classify_region(lat, lon) for lat, lon in points)
    return dict(counts)
