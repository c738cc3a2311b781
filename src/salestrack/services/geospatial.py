"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute great-circle distance in meters using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return haversine_m(lat1, lon1, lat2, lon2) / 1000.0


def is_finite_coordinate(lat: float, lon: float) -> bool:
    return math.isfinite(lat) and math.isfinite(lon)


def path_length_m(path: Sequence[tuple[float, float]]) -> float:
    """Total length of a (lng, lat) polyline in meters."""

    total = 0.0
    for (lon1, lat1), (lon2, lat2) in zip(path, path[1:]):
        total += haversine_m(lat1, lon1, lat2, lon2)
    return total
