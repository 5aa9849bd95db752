"""Spherical Web Mercator projection between geography, tile space, and screen pixels.

Tile coordinates are fractional slippy-map indices: at zoom ``z`` the world is
``2**z`` tiles of ``TILE_SIZE`` pixels on each side. Latitude inputs must stay
within ``|lat| < 85.05`` (the Mercator cut-off); nothing here guards it.
"""

import math

from eclipsemap.models import GeoPoint

TILE_SIZE = 256
MAX_MERCATOR_LAT = 85.05


def lng_to_tile_x(lng: float, zoom: float) -> float:
    return ((lng + 180) / 360) * 2**zoom


def lat_to_tile_y(lat: float, zoom: float) -> float:
    lat_rad = math.radians(lat)
    merc = math.log(math.tan(lat_rad) + 1 / math.cos(lat_rad))
    return ((1 - merc / math.pi) / 2) * 2**zoom


def tile_x_to_lng(x: float, zoom: float) -> float:
    return (x / 2**zoom) * 360 - 180


def tile_y_to_lat(y: float, zoom: float) -> float:
    n = math.pi - (2 * math.pi * y) / 2**zoom
    return math.degrees(math.atan(math.sinh(n)))


def geo_to_screen(
    lng: float,
    lat: float,
    center: GeoPoint,
    zoom: float,
    viewport: tuple[float, float],
) -> tuple[float, float]:
    """Pixel position of (lng, lat) in a viewport of (width, height) centred on ``center``."""
    width, height = viewport
    x = width / 2 + (lng_to_tile_x(lng, zoom) - lng_to_tile_x(center.lng, zoom)) * TILE_SIZE
    y = height / 2 + (lat_to_tile_y(lat, zoom) - lat_to_tile_y(center.lat, zoom)) * TILE_SIZE
    return x, y


def screen_to_geo(
    x: float,
    y: float,
    center: GeoPoint,
    zoom: float,
    viewport: tuple[float, float],
) -> GeoPoint:
    """Inverse of :func:`geo_to_screen`."""
    width, height = viewport
    tile_x = lng_to_tile_x(center.lng, zoom) + (x - width / 2) / TILE_SIZE
    tile_y = lat_to_tile_y(center.lat, zoom) + (y - height / 2) / TILE_SIZE
    return GeoPoint(lat=tile_y_to_lat(tile_y, zoom), lng=tile_x_to_lng(tile_x, zoom))
