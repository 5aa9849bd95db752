"""Map view state machine for the tile map: viewport, drag and zoom, overlay geometry.

Every transition returns a new ``MapView``; nothing mutates in place. Derived
render values (tile placement, SVG path data) are recomputed from the current
state on each call.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace

from eclipsemap.config import TILE_STYLES
from eclipsemap.models import Coord, GeoPoint
from eclipsemap.projection import (
    TILE_SIZE,
    geo_to_screen,
    lat_to_tile_y,
    lng_to_tile_x,
    screen_to_geo,
    tile_x_to_lng,
    tile_y_to_lat,
)

MIN_ZOOM = 4
MAX_ZOOM = 12
DEFAULT_CENTER = GeoPoint(lat=41.5, lng=-3.5)
DEFAULT_ZOOM = 6


def clamp_zoom(zoom: int) -> int:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


@dataclass(frozen=True)
class DragOrigin:
    """Pointer position and map centre captured at mouse-down."""

    x: float
    y: float
    center: GeoPoint
    moved: bool = False


@dataclass(frozen=True)
class Tile:
    x: int  # Unwrapped column, used for placement
    y: int
    zoom: int
    url: str
    left: float  # Screen position of the tile's top-left corner
    top: float


@dataclass(frozen=True)
class MapView:
    center: GeoPoint = DEFAULT_CENTER
    zoom: int = DEFAULT_ZOOM
    width: float = 800
    height: float = 600
    drag: DragOrigin | None = None
    just_dragged: bool = False  # The last drag moved; swallow the click that ends it

    @property
    def viewport(self) -> tuple[float, float]:
        return self.width, self.height

    @property
    def dragging(self) -> bool:
        return self.drag is not None

    # --- Conversions ---

    def geo_to_screen(self, lng: float, lat: float) -> tuple[float, float]:
        return geo_to_screen(lng, lat, self.center, self.zoom, self.viewport)

    def screen_to_geo(self, x: float, y: float) -> GeoPoint:
        return screen_to_geo(x, y, self.center, self.zoom, self.viewport)

    def is_on_screen(self, x: float, y: float, margin: float = 50) -> bool:
        return -margin <= x <= self.width + margin and -margin <= y <= self.height + margin

    # --- Transitions ---

    def resize(self, width: float, height: float) -> "MapView":
        return replace(self, width=width, height=height)

    def start_drag(self, x: float, y: float) -> "MapView":
        return replace(
            self, drag=DragOrigin(x=x, y=y, center=self.center), just_dragged=False
        )

    def drag_to(self, x: float, y: float) -> "MapView":
        """Pan so the point under the mouse-down position follows the pointer."""
        if self.drag is None:
            return self
        origin = self.drag
        tile_x = lng_to_tile_x(origin.center.lng, self.zoom) - (x - origin.x) / TILE_SIZE
        tile_y = lat_to_tile_y(origin.center.lat, self.zoom) - (y - origin.y) / TILE_SIZE
        moved = origin.moved or x != origin.x or y != origin.y
        return replace(
            self,
            center=GeoPoint(
                lat=tile_y_to_lat(tile_y, self.zoom), lng=tile_x_to_lng(tile_x, self.zoom)
            ),
            drag=replace(origin, moved=moved),
        )

    def end_drag(self) -> "MapView":
        moved = self.drag is not None and self.drag.moved
        return replace(self, drag=None, just_dragged=moved)

    def wheel(self, x: float, y: float, delta_y: float) -> "MapView":
        """Zoom one level toward the cursor; scrolling down (positive delta) zooms out."""
        new_zoom = clamp_zoom(self.zoom + (-1 if delta_y > 0 else 1))
        if new_zoom == self.zoom:
            return self
        anchor = self.screen_to_geo(x, y)
        tile_x = lng_to_tile_x(anchor.lng, new_zoom) - (x - self.width / 2) / TILE_SIZE
        tile_y = lat_to_tile_y(anchor.lat, new_zoom) - (y - self.height / 2) / TILE_SIZE
        return replace(
            self,
            zoom=new_zoom,
            center=GeoPoint(
                lat=tile_y_to_lat(tile_y, new_zoom), lng=tile_x_to_lng(tile_x, new_zoom)
            ),
        )

    def zoom_in(self) -> "MapView":
        return replace(self, zoom=clamp_zoom(self.zoom + 1))

    def zoom_out(self) -> "MapView":
        return replace(self, zoom=clamp_zoom(self.zoom - 1))

    def pan_by(self, dx: float, dy: float) -> "MapView":
        """Shift the view by a pixel offset (used by arrow buttons)."""
        return replace(self.start_drag(0, 0).drag_to(-dx, -dy), drag=None)

    def fly_to(self, point: GeoPoint, zoom: int | None = None) -> "MapView":
        return replace(
            self,
            center=point,
            zoom=self.zoom if zoom is None else clamp_zoom(zoom),
            drag=None,
        )

    def reset(self) -> "MapView":
        return MapView(width=self.width, height=self.height)

    def click(self, x: float, y: float) -> GeoPoint | None:
        """Geographic point under a click; None when the click ends a drag that moved."""
        if self.just_dragged or (self.drag is not None and self.drag.moved):
            return None
        return self.screen_to_geo(x, y)

    # --- Derived render values ---

    def visible_tiles(self, style: str = "dark") -> list[Tile]:
        """Tiles covering the viewport plus a one-tile border.

        Columns wrap around the antimeridian for the URL; rows outside the
        world are skipped.
        """
        template = TILE_STYLES[style]
        center_x = lng_to_tile_x(self.center.lng, self.zoom)
        center_y = lat_to_tile_y(self.center.lat, self.zoom)
        tiles_x = math.ceil(self.width / TILE_SIZE) + 2
        tiles_y = math.ceil(self.height / TILE_SIZE) + 2
        start_x = math.floor(center_x - tiles_x / 2)
        start_y = math.floor(center_y - tiles_y / 2)
        max_tile = 2**self.zoom

        tiles: list[Tile] = []
        for x in range(start_x, start_x + tiles_x):
            for y in range(start_y, start_y + tiles_y):
                if not 0 <= y < max_tile:
                    continue
                wrapped_x = x % max_tile
                tiles.append(
                    Tile(
                        x=x,
                        y=y,
                        zoom=self.zoom,
                        url=template.format(z=self.zoom, x=wrapped_x, y=y),
                        left=self.width / 2 + (x - center_x) * TILE_SIZE,
                        top=self.height / 2 + (y - center_y) * TILE_SIZE,
                    )
                )
        return tiles

    def polyline_path(self, coords: Sequence[Coord]) -> str:
        """SVG path data ("M x y L x y ...") for a (lng, lat) polyline."""
        parts = []
        for i, (lng, lat) in enumerate(coords):
            x, y = self.geo_to_screen(lng, lat)
            parts.append(f"{'M' if i == 0 else 'L'} {x:.1f} {y:.1f}")
        return " ".join(parts)

    def band_polygon_path(self, north: Sequence[Coord], south: Sequence[Coord]) -> str:
        """Closed SVG path: the north limit forward, then the south limit reversed."""
        if not north and not south:
            return ""
        return self.polyline_path(list(north) + list(reversed(south))) + " Z"
