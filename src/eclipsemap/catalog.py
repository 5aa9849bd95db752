"""Eclipse events and points of interest, parsed from packaged JSON."""

import json
import logging
from collections.abc import Iterable
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any

from eclipsemap.models import (
    CityRecord,
    EclipseEvent,
    EventTimes,
    GeoPoint,
    POICategory,
    PointOfInterest,
    Polyline,
    TotalityBand,
)

log = logging.getLogger(__name__)

_RESOURCES = Path(__file__).parent / "resources"


class UnknownEventError(KeyError):
    """No eclipse event with the requested id."""


def _polyline(raw: list[list[float]]) -> Polyline:
    return tuple((float(lng), float(lat)) for lng, lat in raw)


def _city(raw: dict[str, Any]) -> CityRecord:
    start, totality_start, maximum, totality_end, end = raw["times"]
    return CityRecord(
        name=raw["name"],
        point=GeoPoint(lat=float(raw["lat"]), lng=float(raw["lng"])),
        times=EventTimes(
            start=start,
            totality_start=totality_start,
            maximum=maximum,
            totality_end=totality_end,
            end=end,
        ),
        totality_duration=raw["totality_duration"],
        magnitude=float(raw["magnitude"]),
        sun_altitude_deg=float(raw["sun_altitude_deg"]),
        in_totality=bool(raw["in_totality"]),
    )


def _band(raw: dict[str, Any]) -> TotalityBand:
    bounds = raw.get("bounds")
    return TotalityBand(
        base_half_width_km=float(raw["base_half_width_km"]),
        min_half_width_km=float(raw["min_half_width_km"]),
        reference_lng=float(raw.get("reference_lng", 0.0)),
        narrowing_km_per_degree=float(raw.get("narrowing_km_per_degree", 0.0)),
        bounds=tuple(float(b) for b in bounds) if bounds else None,  # type: ignore[arg-type]
        band_width_km=float(raw.get("band_width_km", 150.0)),
        partial_floor=float(raw.get("partial_floor", 0.5)),
        partial_decay_per_km=float(raw.get("partial_decay_per_km", 0.001)),
    )


def parse_event(raw: dict[str, Any]) -> EclipseEvent:
    """Build an EclipseEvent from its JSON object."""
    return EclipseEvent(
        id=raw["id"],
        title=raw["title"],
        date=date.fromisoformat(raw["date"]),
        timezone=raw["timezone"],
        approx_max_local=raw["approx_max_local"],
        saros=int(raw["saros"]),
        gamma=float(raw["gamma"]),
        max_duration=raw["max_duration"],
        max_duration_location=raw["max_duration_location"],
        max_width_km=float(raw["max_width_km"]),
        entry_time=raw["entry_time"],
        entry_location=raw["entry_location"],
        exit_time=raw["exit_time"],
        exit_location=raw["exit_location"],
        sun_altitude_range=raw["sun_altitude_range"],
        max_duration_seconds=float(raw["max_duration_seconds"]),
        central_line=_polyline(raw["central_line"]),
        north_limit=_polyline(raw["north_limit"]),
        south_limit=_polyline(raw["south_limit"]),
        cities=tuple(_city(c) for c in raw["cities"]),
        band=_band(raw["band"]),
    )


@lru_cache(maxsize=1)
def load_events() -> dict[str, EclipseEvent]:
    """All packaged eclipse events keyed by id, in file order."""
    path = _RESOURCES / "events.json"
    with path.open(encoding="utf-8") as f:
        raw = json.load(f)
    events = {e.id: e for e in (parse_event(r) for r in raw["events"])}
    log.debug("Loaded %d eclipse events from %s", len(events), path)
    return events


def get_event(event_id: str) -> EclipseEvent:
    """Raises UnknownEventError for an id that is not in the catalog."""
    try:
        return load_events()[event_id]
    except KeyError:
        raise UnknownEventError(event_id) from None


@lru_cache(maxsize=1)
def load_points_of_interest() -> tuple[PointOfInterest, ...]:
    with (_RESOURCES / "points_of_interest.json").open(encoding="utf-8") as f:
        raw = json.load(f)
    return tuple(
        PointOfInterest(
            id=p["id"],
            name=p["name"],
            point=GeoPoint(lat=float(p["lat"]), lng=float(p["lng"])),
            category=POICategory(p["category"]),
            description=p["description"],
            photo_tip=p["photo_tip"],
            in_totality=bool(p["in_totality"]),
            totality_duration=p.get("totality_duration"),
        )
        for p in raw["points_of_interest"]
    )


def filter_pois(
    pois: Iterable[PointOfInterest], categories: Iterable[POICategory]
) -> tuple[PointOfInterest, ...]:
    wanted = set(categories)
    return tuple(p for p in pois if p.category in wanted)


def search_cities(event: EclipseEvent, query: str) -> tuple[CityRecord, ...]:
    """Case-insensitive substring match on city names. Empty query returns every city."""
    needle = query.strip().casefold()
    return tuple(c for c in event.cities if needle in c.name.casefold())
