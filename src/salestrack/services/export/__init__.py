"""Export services."""

from .geojson import route_tracking_to_geojson

__all__ = ["route_tracking_to_geojson"]
