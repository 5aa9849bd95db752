"""Great-circle geodesy and nearest-vertex proximity scans."""

import math
from collections.abc import Sequence

from eclipsemap.models import CityRecord, ClosestPoint, Coord, GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_distance_km(p1: GeoPoint, p2: GeoPoint) -> float:
    """Great-circle distance in km on a sphere of mean Earth radius."""
    d_lat = math.radians(p2.lat - p1.lat)
    d_lng = math.radians(p2.lng - p1.lng)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(p1.lat))
        * math.cos(math.radians(p2.lat))
        * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def initial_bearing_degrees(p1: GeoPoint, p2: GeoPoint) -> float:
    """Compass bearing from p1 toward p2 along the great circle, in [0, 360)."""
    phi1 = math.radians(p1.lat)
    phi2 = math.radians(p2.lat)
    d_lambda = math.radians(p2.lng - p1.lng)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(
        d_lambda
    )
    bearing = math.degrees(math.atan2(y, x)) % 360
    # -0.0 % 360 and tiny negatives can round up to exactly 360.0
    return 0.0 if bearing >= 360 else bearing


def closest_point_on_polyline(query: GeoPoint, polyline: Sequence[Coord]) -> ClosestPoint:
    """Nearest vertex of ``polyline`` to ``query``.

    Vertices are (lng, lat) pairs. This is a nearest-vertex scan, not a
    projection onto segments; source paths are sampled densely enough for it.
    Ties keep the first vertex seen. An empty polyline yields
    ``ClosestPoint(None, inf, -1)``.
    """
    best = ClosestPoint(point=None, distance_km=math.inf, index=-1)
    for i, coord in enumerate(polyline):
        distance = haversine_distance_km(query, GeoPoint.from_coord(coord))
        if distance < best.distance_km:
            best = ClosestPoint(point=coord, distance_km=distance, index=i)
    return best


def find_nearest_city(
    query: GeoPoint, cities: Sequence[CityRecord]
) -> tuple[CityRecord | None, float]:
    """Closest city by great-circle distance. ``(None, inf)`` when there are no cities."""
    nearest: CityRecord | None = None
    min_distance = math.inf
    for city in cities:
        distance = haversine_distance_km(query, city.point)
        if distance < min_distance:
            nearest = city
            min_distance = distance
    return nearest, min_distance
