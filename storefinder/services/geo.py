"""Geospatial helpers for near-me store lookup.

Distances are great-circle (haversine) metres on a spherical Earth, computed
in SQL so PostgreSQL can filter and order. A lat/lng bounding box computed in
Python narrows the candidate rows first (uses ix_stores_lat_lng).
"""

import math
from dataclasses import dataclass

from sqlalchemy import ColumnElement, func

EARTH_RADIUS_M = 6_371_008.8


@dataclass(frozen=True)
class BoundingBox:
    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float


def bounding_box(lng: float, lat: float, radius_m: float) -> BoundingBox:
    """Smallest lat/lng box containing the circle of ``radius_m`` around a point.

    Longitude span widens towards the poles; near a pole (or when the circle
    crosses the antimeridian) the box covers all longitudes.
    """
    delta_lat = math.degrees(radius_m / EARTH_RADIUS_M)
    min_lat = max(lat - delta_lat, -90.0)
    max_lat = min(lat + delta_lat, 90.0)

    cos_lat = math.cos(math.radians(lat))
    if max_lat >= 90.0 or min_lat <= -90.0 or cos_lat <= 1e-12:
        return BoundingBox(-180.0, min_lat, 180.0, max_lat)

    delta_lng = math.degrees(radius_m / (EARTH_RADIUS_M * cos_lat))
    min_lng = lng - delta_lng
    max_lng = lng + delta_lng
    if min_lng < -180.0 or max_lng > 180.0:
        return BoundingBox(-180.0, min_lat, 180.0, max_lat)
    return BoundingBox(min_lng, min_lat, max_lng, max_lat)


def distance_m(
    lng_col: ColumnElement[float],
    lat_col: ColumnElement[float],
    lng: float,
    lat: float,
) -> ColumnElement[float]:
    """SQL expression: haversine distance in metres from (lng, lat) to the row's point."""
    d_lat = func.radians(lat_col - lat)
    d_lng = func.radians(lng_col - lng)
    a = func.power(func.sin(d_lat / 2), 2) + func.cos(math.radians(lat)) * func.cos(
        func.radians(lat_col)
    ) * func.power(func.sin(d_lng / 2), 2)
    # least() guards asin against float drift slightly above 1.0
    return 2 * EARTH_RADIUS_M * func.asin(func.sqrt(func.least(a, 1.0)))
