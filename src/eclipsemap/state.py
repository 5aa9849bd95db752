"""Application state and its controller.

``AppState`` is a single immutable snapshot of everything the user can
change. ``EclipseStore`` owns the current snapshot and exposes one named
method per user action; derived results (eclipse data, alignment) are
recomputed from the snapshot on every read so they can never outlive the
event or location they were computed for.
"""

import logging
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Literal

from eclipsemap import sun
from eclipsemap.catalog import filter_pois, get_event, load_points_of_interest
from eclipsemap.compute import CoordinateError, calculate_eclipse_data, parse_coordinates
from eclipsemap.mapview import MapView
from eclipsemap.models import (
    AlignmentMode,
    AlignmentResult,
    AlignmentState,
    CityPopup,
    CityRecord,
    EclipseCalculationResult,
    EclipseEvent,
    GeoPoint,
    POICategory,
    PointOfInterest,
    PoiPopup,
    PopupContent,
)

log = logging.getLogger(__name__)

FLY_TO_ZOOM = 9

LayerName = Literal["path", "cities", "pois"]


@dataclass(frozen=True)
class Layers:
    path: bool = True
    cities: bool = True
    pois: bool = True


@dataclass(frozen=True)
class AppState:
    event_id: str
    view: MapView = field(default_factory=MapView)
    selected_location: GeoPoint | None = None
    popup: PopupContent | None = None
    categories: frozenset[POICategory] = frozenset(POICategory)
    layers: Layers = field(default_factory=Layers)
    alignment: AlignmentState = field(default_factory=AlignmentState)


class EclipseStore:
    """Single owner of ``AppState``. Every mutation goes through a named transition."""

    def __init__(self, event_id: str, sun_model: sun.SunModel | None = None):
        get_event(event_id)  # fail fast on an unknown id
        self.state = AppState(event_id=event_id)
        self._sun_model = sun_model
        self._last_map_seq: str | None = None

    # --- Derived values ---

    @property
    def event(self) -> EclipseEvent:
        return get_event(self.state.event_id)

    @property
    def calculation(self) -> EclipseCalculationResult | None:
        if self.state.selected_location is None:
            return None
        return calculate_eclipse_data(self.state.selected_location, self.event)

    @property
    def alignment_result(self) -> AlignmentResult | None:
        return sun.compute_alignment(self.state.alignment, self.event, self._sun_model)

    @property
    def best_alignment(self) -> tuple[int, float] | None:
        return sun.best_alignment_offset(self.state.alignment, self.event, self._sun_model)

    @property
    def visible_pois(self) -> tuple[PointOfInterest, ...]:
        if not self.state.layers.pois:
            return ()
        return filter_pois(load_points_of_interest(), self.state.categories)

    @property
    def visible_cities(self) -> tuple[CityRecord, ...]:
        return self.event.cities if self.state.layers.cities else ()

    # --- Event and filters ---

    def select_event(self, event_id: str) -> None:
        """Swap the eclipse. Popups showing the previous event's cities are dropped."""
        get_event(event_id)
        self.state = replace(self.state, event_id=event_id, popup=None)

    def toggle_category(self, category: POICategory) -> None:
        self.state = replace(self.state, categories=self.state.categories ^ {category})

    def toggle_layer(self, name: LayerName) -> None:
        if name not in {f.name for f in fields(Layers)}:
            raise ValueError(f"Unknown layer: {name!r}")
        layers = self.state.layers
        self.state = replace(
            self.state, layers=replace(layers, **{name: not getattr(layers, name)})
        )

    # --- Viewport ---

    def _set_view(self, view: MapView) -> None:
        self.state = replace(self.state, view=view)

    def resize(self, width: float, height: float) -> None:
        self._set_view(self.state.view.resize(width, height))

    def mouse_down(self, x: float, y: float) -> None:
        self.state = replace(self.state, view=self.state.view.start_drag(x, y), popup=None)

    def mouse_move(self, x: float, y: float) -> None:
        self._set_view(self.state.view.drag_to(x, y))

    def mouse_up(self) -> None:
        self._set_view(self.state.view.end_drag())

    def wheel(self, x: float, y: float, delta_y: float) -> None:
        self._set_view(self.state.view.wheel(x, y, delta_y))

    def zoom_in(self) -> None:
        self._set_view(self.state.view.zoom_in())

    def zoom_out(self) -> None:
        self._set_view(self.state.view.zoom_out())

    def pan(self, dx: float, dy: float) -> None:
        self._set_view(self.state.view.pan_by(dx, dy))

    def reset_view(self) -> None:
        self.state = replace(self.state, view=self.state.view.reset(), popup=None)

    # --- Location selection ---

    def click(self, x: float, y: float) -> None:
        """A click on the map background, in screen pixels."""
        point = self.state.view.click(x, y)
        self._set_view(replace(self.state.view, just_dragged=False))
        if point is not None:
            self.select_location(point)

    def select_location(self, point: GeoPoint, fly: bool = False) -> None:
        """Route a chosen point to the armed alignment slot, or make it the query location."""
        if self.state.alignment.mode is not AlignmentMode.IDLE:
            self.state = replace(
                self.state, alignment=sun.record_click(self.state.alignment, point)
            )
            return
        view = self.state.view.fly_to(point, FLY_TO_ZOOM) if fly else self.state.view
        self.state = replace(self.state, selected_location=point, view=view)

    def submit_coordinates(self, lat_text: str, lng_text: str) -> bool:
        """Manual coordinate entry. Invalid text leaves the state untouched."""
        try:
            point = parse_coordinates(lat_text, lng_text)
        except CoordinateError:
            return False
        self.select_location(point, fly=True)
        return True

    # --- Popups ---

    def open_city(self, city: CityRecord) -> None:
        self.state = replace(self.state, popup=CityPopup(city))

    def open_poi(self, poi: PointOfInterest) -> None:
        self.state = replace(self.state, popup=PoiPopup(poi))

    def close_popup(self) -> None:
        self.state = replace(self.state, popup=None)

    # --- Alignment tool ---

    def _set_alignment(self, alignment: AlignmentState) -> None:
        self.state = replace(self.state, alignment=alignment)

    def request_point_a(self) -> None:
        self._set_alignment(sun.request_point_a(self.state.alignment))

    def request_point_b(self) -> None:
        """Raises sun.AlignmentError while point A is unset."""
        self._set_alignment(sun.request_point_b(self.state.alignment))

    def cancel_alignment(self) -> None:
        self._set_alignment(sun.cancel(self.state.alignment))

    def set_time_offset(self, minutes: int) -> None:
        self._set_alignment(sun.set_time_offset(self.state.alignment, minutes))

    def clear_alignment(self) -> None:
        self._set_alignment(sun.clear(self.state.alignment))

    # --- Map component gestures ---

    def handle_map_event(self, event: dict[str, Any] | None) -> bool:
        """Replay one gesture reported by the interactive map.

        The browser sends a finished gesture rather than every mouse event:

          {"type": "click", "x", "y"}                   background click
          {"type": "drag", "x0", "y0", "x1", "y1"}      press, move, release
          {"type": "wheel", "x", "y", "delta_y"}        accumulated scroll
          {"type": "city", "id": <city name>}           city marker
          {"type": "poi", "id": <poi id>}               point-of-interest marker

        Every event carries a ``seq``. The component keeps returning its last
        value on unrelated reruns, so an already handled ``seq`` is ignored.

        Returns:
            True when the event was new and applied.
        """
        if not event or event.get("seq") == self._last_map_seq:
            return False
        self._last_map_seq = event.get("seq")

        kind = event.get("type")
        if kind == "click":
            self.mouse_down(event["x"], event["y"])
            self.mouse_up()
            self.click(event["x"], event["y"])
        elif kind == "drag":
            self.mouse_down(event["x0"], event["y0"])
            self.mouse_move(event["x1"], event["y1"])
            self.mouse_up()
        elif kind == "wheel":
            self.wheel(event["x"], event["y"], event["delta_y"])
        elif kind == "city":
            city = next((c for c in self.visible_cities if c.name == event["id"]), None)
            if city is None:
                log.warning("Map event for unknown city %r", event["id"])
                return False
            self.open_city(city)
        elif kind == "poi":
            poi = next((p for p in self.visible_pois if p.id == event["id"]), None)
            if poi is None:
                log.warning("Map event for unknown point of interest %r", event["id"])
                return False
            self.open_poi(poi)
        else:
            log.warning("Ignoring map event of type %r", kind)
            return False
        return True

    # --- Snapshot ---

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable snapshot of the state."""
        s = self.state
        popup: dict[str, Any] | None = None
        if isinstance(s.popup, CityPopup):
            popup = {"type": "city", "name": s.popup.city.name}
        elif isinstance(s.popup, PoiPopup):
            popup = {"type": "poi", "id": s.popup.poi.id}
        alignment = s.alignment
        return {
            "event_id": s.event_id,
            "view": {
                "center": asdict(s.view.center),
                "zoom": s.view.zoom,
                "width": s.view.width,
                "height": s.view.height,
            },
            "selected_location": asdict(s.selected_location) if s.selected_location else None,
            "popup": popup,
            "categories": sorted(c.value for c in s.categories),
            "layers": asdict(s.layers),
            "alignment": {
                "mode": alignment.mode.value,
                "point_a": asdict(alignment.point_a) if alignment.point_a else None,
                "point_b": asdict(alignment.point_b) if alignment.point_b else None,
                "time_offset_minutes": alignment.time_offset_minutes,
            },
        }
