import pytest

from eclipsemap.mapview import DEFAULT_CENTER, MAX_ZOOM, MIN_ZOOM, MapView
from eclipsemap.models import GeoPoint
from eclipsemap.projection import TILE_SIZE, lng_to_tile_x


@pytest.fixture
def view():
    return MapView(width=800, height=600)


def test_defaults(view):
    assert view.center == DEFAULT_CENTER
    assert view.zoom == 6
    assert not view.dragging


def test_wheel_keeps_point_under_cursor(view):
    anchor = view.screen_to_geo(200, 150)
    zoomed = view.wheel(200, 150, delta_y=-100)
    assert zoomed.zoom == 7
    assert zoomed.geo_to_screen(anchor.lng, anchor.lat) == pytest.approx((200, 150), abs=1e-6)


def test_wheel_down_zooms_out(view):
    assert view.wheel(400, 300, delta_y=100).zoom == 5


@pytest.mark.parametrize("zoom,delta", [(MAX_ZOOM, -1), (MIN_ZOOM, 1)])
def test_wheel_at_limit_is_noop(zoom, delta):
    v = MapView(zoom=zoom)
    assert v.wheel(10, 10, delta) is v


def test_zoom_buttons_clamp():
    assert MapView(zoom=MAX_ZOOM).zoom_in().zoom == MAX_ZOOM
    assert MapView(zoom=MIN_ZOOM).zoom_out().zoom == MIN_ZOOM
    assert MapView(zoom=6).zoom_in().zoom == 7


def test_drag_moves_map_with_pointer(view):
    grabbed = view.screen_to_geo(100, 100)
    dragged = view.start_drag(100, 100).drag_to(160, 140)
    assert dragged.geo_to_screen(grabbed.lng, grabbed.lat) == pytest.approx((160, 140), abs=1e-6)
    assert dragged.drag.moved


def test_drag_to_without_drag_is_noop(view):
    assert view.drag_to(50, 50) is view


def test_click_after_drag_is_swallowed(view):
    dragged = view.start_drag(100, 100).drag_to(150, 100).end_drag()
    assert dragged.just_dragged
    assert dragged.click(150, 100) is None


def test_click_without_movement_selects(view):
    clicked = view.start_drag(100, 100).drag_to(100, 100).end_drag()
    assert not clicked.just_dragged
    point = clicked.click(400, 300)
    assert point.lat == pytest.approx(view.center.lat)
    assert point.lng == pytest.approx(view.center.lng)


def test_pan_by_shifts_center_east(view):
    panned = view.pan_by(TILE_SIZE, 0)
    assert lng_to_tile_x(panned.center.lng, 6) == pytest.approx(
        lng_to_tile_x(view.center.lng, 6) + 1
    )
    assert panned.drag is None


def test_fly_to_and_reset(view):
    target = GeoPoint(lat=43.36, lng=-8.41)
    flown = view.fly_to(target, 20)
    assert flown.center == target
    assert flown.zoom == MAX_ZOOM
    reset = flown.resize(1024, 700).reset()
    assert reset.center == DEFAULT_CENTER
    assert reset.zoom == 6
    assert (reset.width, reset.height) == (1024, 700)


def test_visible_tiles_cover_viewport(view):
    tiles = view.visible_tiles("dark")
    assert len(tiles) == 6 * 5
    assert all(t.zoom == 6 for t in tiles)
    assert min(t.left for t in tiles) <= 0
    assert max(t.left for t in tiles) + TILE_SIZE >= view.width
    assert min(t.top for t in tiles) <= 0
    assert max(t.top for t in tiles) + TILE_SIZE >= view.height
    first = tiles[0]
    assert first.url == f"https://a.basemaps.cartocdn.com/dark_all/6/{first.x}/{first.y}.png"


def test_visible_tiles_wrap_columns_and_skip_rows():
    v = MapView(center=GeoPoint(lat=84, lng=-179), zoom=4, width=800, height=600)
    tiles = v.visible_tiles("satellite")
    assert all(0 <= t.y < 16 for t in tiles)
    assert any(t.x < 0 for t in tiles)
    assert all(f"/tile/4/{t.y}/{t.x % 16}" in t.url for t in tiles)


def test_is_on_screen(view):
    assert view.is_on_screen(-50, 650)
    assert not view.is_on_screen(-51, 300)


def test_polyline_path(view):
    assert view.polyline_path([]) == ""
    path = view.polyline_path([(view.center.lng, view.center.lat), (view.center.lng, view.center.lat)])
    assert path == "M 400.0 300.0 L 400.0 300.0"


def test_band_polygon_is_closed(view):
    north = [(-4.0, 43.0), (-2.0, 42.0)]
    south = [(-4.0, 41.0), (-2.0, 40.0)]
    path = view.band_polygon_path(north, south)
    assert path.startswith("M ")
    assert path.endswith(" Z")
    assert path.count("L") == 3
    assert view.band_polygon_path([], []) == ""
