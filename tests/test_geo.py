import math

from sqlalchemy import column
from sqlalchemy.dialects import postgresql

from storefinder.services.geo import EARTH_RADIUS_M, bounding_box, distance_m


def test_bounding_box_contains_radius():
    box = bounding_box(-79.38, 43.65, 10_000)
    delta_lat = math.degrees(10_000 / EARTH_RADIUS_M)

    assert math.isclose(box.max_lat - 43.65, delta_lat)
    assert math.isclose(43.65 - box.min_lat, delta_lat)
    # Longitude degrees are shorter away from the equator
    assert (box.max_lng - box.min_lng) > (box.max_lat - box.min_lat)
    assert box.min_lng < -79.38 < box.max_lng


def test_bounding_box_near_pole_covers_all_longitudes():
    box = bounding_box(10.0, 89.99, 10_000)
    assert box.min_lng == -180.0
    assert box.max_lng == 180.0
    assert box.max_lat == 90.0


def test_bounding_box_across_antimeridian_covers_all_longitudes():
    box = bounding_box(179.99, 0.0, 10_000)
    assert (box.min_lng, box.max_lng) == (-180.0, 180.0)


def test_distance_expression_compiles_for_postgres():
    expr = distance_m(column("longitude"), column("latitude"), -79.38, 43.65)
    sql = str(expr.compile(dialect=postgresql.dialect()))
    assert "asin" in sql
    assert "least" in sql
