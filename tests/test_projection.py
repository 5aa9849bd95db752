import pytest

from eclipsemap.models import GeoPoint
from eclipsemap.projection import (
    TILE_SIZE,
    geo_to_screen,
    lat_to_tile_y,
    lng_to_tile_x,
    screen_to_geo,
    tile_x_to_lng,
    tile_y_to_lat,
)

CENTER = GeoPoint(lat=41.5, lng=-3.5)
VIEWPORT = (800, 600)


def test_tile_origin_and_extent():
    assert lng_to_tile_x(-180, 3) == 0
    assert lng_to_tile_x(180, 3) == 8
    assert lat_to_tile_y(0, 3) == pytest.approx(4)


@pytest.mark.parametrize("lng", [-179.5, -8.41, 0.0, 4.27, 120.0])
@pytest.mark.parametrize("zoom", [4, 7, 12])
def test_lng_tile_inverse(lng, zoom):
    assert tile_x_to_lng(lng_to_tile_x(lng, zoom), zoom) == pytest.approx(lng, abs=1e-9)


@pytest.mark.parametrize("lat", [-85.0, -33.9, 0.0, 43.36, 85.0])
@pytest.mark.parametrize("zoom", [4, 7, 12])
def test_lat_tile_inverse(lat, zoom):
    assert tile_y_to_lat(lat_to_tile_y(lat, zoom), zoom) == pytest.approx(lat, abs=1e-9)


def test_center_maps_to_viewport_middle():
    x, y = geo_to_screen(CENTER.lng, CENTER.lat, CENTER, 6, VIEWPORT)
    assert (x, y) == pytest.approx((400, 300))


def test_north_is_up_and_east_is_right():
    x_east, _ = geo_to_screen(CENTER.lng + 1, CENTER.lat, CENTER, 6, VIEWPORT)
    _, y_north = geo_to_screen(CENTER.lng, CENTER.lat + 1, CENTER, 6, VIEWPORT)
    assert x_east > 400
    assert y_north < 300


def test_one_tile_offset_is_tile_size_pixels():
    east = tile_x_to_lng(lng_to_tile_x(CENTER.lng, 6) + 1, 6)
    x, _ = geo_to_screen(east, CENTER.lat, CENTER, 6, VIEWPORT)
    assert x == pytest.approx(400 + TILE_SIZE)


@pytest.mark.parametrize("x,y", [(0, 0), (400, 300), (799, 1), (123.5, 456.25)])
def test_screen_geo_round_trip(x, y):
    point = screen_to_geo(x, y, CENTER, 8, VIEWPORT)
    assert geo_to_screen(point.lng, point.lat, CENTER, 8, VIEWPORT) == pytest.approx(
        (x, y), abs=1e-6
    )
