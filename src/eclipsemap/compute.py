"""Eclipse timing model: totality and duration estimates for any coordinate."""

import math
import re

from eclipsemap.geodesy import closest_point_on_polyline, find_nearest_city
from eclipsemap.models import EclipseCalculationResult, EclipseEvent, GeoPoint

_DURATION_RE = re.compile(r"^\s*(\d+)\s*m\s*(\d+(?:\.\d+)?)\s*s\s*$")


class CoordinateError(ValueError):
    """Manually entered coordinates could not be used."""


def parse_coordinates(lat_text: str, lng_text: str) -> GeoPoint:
    """Parse user-entered decimal degrees into a GeoPoint.

    Raises:
        CoordinateError: Non-numeric, non-finite, or out-of-range input.
    """
    try:
        lat = float(lat_text.strip())
        lng = float(lng_text.strip())
    except (AttributeError, ValueError) as e:
        raise CoordinateError(f"Not a coordinate: {lat_text!r}, {lng_text!r}") from e
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise CoordinateError(f"Not a coordinate: {lat_text!r}, {lng_text!r}")
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise CoordinateError(f"Out of range: lat={lat}, lng={lng}")
    return GeoPoint(lat=lat, lng=lng)


def parse_duration(text: str) -> float | None:
    """Parse "1m 16s" (spaces optional) into seconds. None for "-" or anything unparsable."""
    match = _DURATION_RE.match(text)
    if match is None:
        return None
    return int(match.group(1)) * 60 + float(match.group(2))


def format_duration(seconds: float) -> str:
    """Format seconds as "Xm Ys"."""
    whole = int(round(seconds))
    return f"{whole // 60}m {whole % 60}s"


def calculate_eclipse_data(query: GeoPoint, event: EclipseEvent) -> EclipseCalculationResult:
    """Estimate the eclipse circumstances at ``query`` for ``event``.

    The nearest central-line vertex gives the distance from the centre of the
    path; the event's band policy decides totality from it. Clock time and sun
    altitude come from the nearest city record, whose official figures are
    closer to the truth than any interpolation. Duration shrinks with the
    elliptical cross-section of the umbra, ``sqrt(1 - (d/w)**2)``.

    Returns well-formed (if meaningless) data far outside the eclipse region;
    callers decide whether to display it.
    """
    band = event.band
    distance = closest_point_on_polyline(query, event.central_line).distance_km
    in_totality = band.contains(query, distance)
    city, _ = find_nearest_city(query, event.cities)

    normalized = min(distance / band.band_width_km, 1.0)
    if in_totality:
        ceiling = None if city is None else parse_duration(city.totality_duration)
        if ceiling is None:
            ceiling = event.max_duration_seconds
        seconds = ceiling * math.sqrt(max(0.0, 1 - normalized**2))
        estimated_duration = format_duration(seconds)
        magnitude = 1.0 + 0.03 * (1 - normalized)
        coverage = 100
    else:
        estimated_duration = "-"
        magnitude = round(
            max(band.partial_floor, 1.0 - distance * band.partial_decay_per_km), 3
        )
        coverage = round(magnitude * 100)

    return EclipseCalculationResult(
        is_in_totality=in_totality,
        distance_from_center_km=float(round(distance)) if math.isfinite(distance) else math.inf,
        estimated_duration=estimated_duration,
        estimated_max_time_local=city.times.maximum if city is not None else "-",
        magnitude=round(magnitude, 3),
        coverage_percent=coverage,
        sun_altitude_deg=city.sun_altitude_deg if city is not None else 0.0,
    )
