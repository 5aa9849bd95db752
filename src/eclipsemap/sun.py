"""Solar position and the sun/landmark alignment tool.

Two interchangeable models give the sun's topocentric position:

- ``LowPrecisionSunModel``: the classic low-precision solar algorithm (mean
  anomaly, equation of centre, sidereal time). Good to about a degree, no
  data files needed.
- ``SkyfieldSunModel``: skyfield with the JPL DE421 ephemeris, loaded lazily.

Both report compass azimuth (0=N, 90=E, clockwise).
"""

import logging
import math
from dataclasses import replace
from datetime import datetime, time, timedelta
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from pytz import timezone, utc
from skyfield.api import Loader, wgs84

from eclipsemap.config import Settings
from eclipsemap.geodesy import initial_bearing_degrees
from eclipsemap.models import (
    AlignmentMode,
    AlignmentResult,
    AlignmentState,
    EclipseEvent,
    GeoPoint,
    SunPosition,
)

log = logging.getLogger(__name__)

ALIGNMENT_TOLERANCE_DEG = 2.0
MAX_TIME_OFFSET_MINUTES = 60
OFFSET_STEP_MINUTES = 1  # Slider step and best-offset scan share one grid

_DAY_SECONDS = 86400.0
_J1970 = 2440588.0
_J2000 = 2451545.0
_OBLIQUITY = math.radians(23.4397)


class AlignmentError(Exception):
    """Alignment transition not allowed in the current state."""


class SunModel(Protocol):
    def position(self, point: GeoPoint, when: datetime) -> SunPosition: ...


def normalize_degrees(angle: float) -> float:
    """Reduce an angle into [0, 360)."""
    reduced = angle % 360.0
    return 0.0 if reduced >= 360.0 else reduced


def _as_utc(when: datetime) -> datetime:
    if when.tzinfo is None:
        return utc.localize(when)
    return when.astimezone(utc)


class LowPrecisionSunModel:
    """Analytic solar position. Native azimuth is measured from south, positive westward."""

    def native_position(self, point: GeoPoint, when: datetime) -> tuple[float, float]:
        """Return (azimuth, altitude) in radians, azimuth 0=S, +W."""
        days = _as_utc(when).timestamp() / _DAY_SECONDS - 0.5 + _J1970 - _J2000
        lw = math.radians(-point.lng)
        phi = math.radians(point.lat)

        mean_anomaly = math.radians(357.5291 + 0.98560028 * days)
        centre = math.radians(
            1.9148 * math.sin(mean_anomaly)
            + 0.02 * math.sin(2 * mean_anomaly)
            + 0.0003 * math.sin(3 * mean_anomaly)
        )
        perihelion = math.radians(102.9372)
        ecliptic_lng = mean_anomaly + centre + perihelion + math.pi

        dec = math.asin(math.sin(_OBLIQUITY) * math.sin(ecliptic_lng))
        ra = math.atan2(math.sin(ecliptic_lng) * math.cos(_OBLIQUITY), math.cos(ecliptic_lng))
        sidereal = math.radians(280.16 + 360.9856235 * days) - lw
        hour_angle = sidereal - ra

        azimuth = math.atan2(
            math.sin(hour_angle),
            math.cos(hour_angle) * math.sin(phi) - math.tan(dec) * math.cos(phi),
        )
        altitude = math.asin(
            math.sin(phi) * math.sin(dec)
            + math.cos(phi) * math.cos(dec) * math.cos(hour_angle)
        )
        return azimuth, altitude

    def position(self, point: GeoPoint, when: datetime) -> SunPosition:
        azimuth, altitude = self.native_position(point, when)
        return SunPosition(
            azimuth_degrees=normalize_degrees(math.degrees(azimuth) + 180),
            altitude_degrees=math.degrees(altitude),
        )


class SkyfieldSunModel:
    """Apparent sun altitude/azimuth from skyfield. The ephemeris loads on first use."""

    def __init__(self, ephemeris_dir: str | Path = "resources", ephemeris: str = "de421.bsp"):
        self._loader = Loader(str(ephemeris_dir))
        self._ephemeris_name = ephemeris
        self._eph = None

    def _ephemeris(self):
        if self._eph is None:
            log.info("Loading ephemeris %s", self._ephemeris_name)
            self._eph = self._loader(self._ephemeris_name)
        return self._eph

    def position(self, point: GeoPoint, when: datetime) -> SunPosition:
        eph = self._ephemeris()
        t = self._loader.timescale().from_datetime(_as_utc(when))
        # altaz() needs a ground observer (earth + latlon), not a bare geographic position
        ground = eph["earth"] + wgs84.latlon(
            latitude_degrees=point.lat, longitude_degrees=point.lng
        )
        alt, az, _ = ground.at(t).observe(eph["sun"]).apparent().altaz()
        return SunPosition(
            azimuth_degrees=normalize_degrees(float(az.degrees)),
            altitude_degrees=float(alt.degrees),
        )


def build_sun_model(settings: Settings) -> SunModel:
    if settings.sun_model == "skyfield":
        return SkyfieldSunModel(settings.ephemeris_dir)
    if settings.sun_model == "low-precision":
        return LowPrecisionSunModel()
    raise ValueError(f"Unknown sun model: {settings.sun_model}")


@lru_cache(maxsize=1)
def default_sun_model() -> SunModel:
    return build_sun_model(Settings.from_env())


def get_sun_position(
    point: GeoPoint, when: datetime, model: SunModel | None = None
) -> SunPosition:
    """Sun azimuth (compass) and altitude seen from ``point`` at ``when``.

    Naive datetimes are taken as UTC.
    """
    return (model or default_sun_model()).position(point, when)


def angular_difference(a: float, b: float) -> float:
    """Shortest angle between two bearings, in [0, 180]."""
    d = abs(a - b) % 360.0
    return 360.0 - d if d > 180.0 else d


def clamp_offset(minutes: int) -> int:
    return max(-MAX_TIME_OFFSET_MINUTES, min(MAX_TIME_OFFSET_MINUTES, int(minutes)))


def reference_time(event: EclipseEvent, offset_minutes: int = 0) -> datetime:
    """UTC instant of the event's local maximum shifted by ``offset_minutes`` (clamped to ±60)."""
    hh, mm = (int(part) for part in event.approx_max_local.split(":"))
    local_tz = timezone(event.timezone)
    local_dt = local_tz.localize(datetime.combine(event.date, time(hh, mm)), is_dst=None)
    return local_dt.astimezone(utc) + timedelta(minutes=clamp_offset(offset_minutes))


def compute_alignment(
    state: AlignmentState, event: EclipseEvent, model: SunModel | None = None
) -> AlignmentResult | None:
    """Sun direction from A versus the bearing A→B. None until point A is set."""
    if state.point_a is None:
        return None

    when = reference_time(event, state.time_offset_minutes)
    sun = get_sun_position(state.point_a, when, model)
    bearing = None
    difference = None
    if state.point_b is not None:
        bearing = initial_bearing_degrees(state.point_a, state.point_b)
        difference = angular_difference(sun.azimuth_degrees, bearing)

    return AlignmentResult(
        when=when,
        sun_azimuth=sun.azimuth_degrees,
        sun_altitude=sun.altitude_degrees,
        bearing_a_to_b=bearing,
        angular_difference=difference,
        is_aligned=difference is not None and difference < ALIGNMENT_TOLERANCE_DEG,
    )


def best_alignment_offset(
    state: AlignmentState, event: EclipseEvent, model: SunModel | None = None
) -> tuple[int, float] | None:
    """Whole-minute offset in [-60, 60] where the sun comes closest to the A→B bearing.

    Returns (offset, difference), or None until both points are set.
    """
    if state.point_a is None or state.point_b is None:
        return None
    bearing = initial_bearing_degrees(state.point_a, state.point_b)
    best: tuple[int, float] | None = None
    for offset in range(
        -MAX_TIME_OFFSET_MINUTES, MAX_TIME_OFFSET_MINUTES + 1, OFFSET_STEP_MINUTES
    ):
        sun = get_sun_position(state.point_a, reference_time(event, offset), model)
        difference = angular_difference(sun.azimuth_degrees, bearing)
        if best is None or difference < best[1]:
            best = (offset, difference)
    return best


# --- Alignment tool transitions ---


def request_point_a(state: AlignmentState) -> AlignmentState:
    """Arm the next map click to set A. Requesting again disarms it."""
    if state.mode is AlignmentMode.AWAITING_POINT_A:
        return replace(state, mode=AlignmentMode.IDLE)
    return replace(state, mode=AlignmentMode.AWAITING_POINT_A)


def request_point_b(state: AlignmentState) -> AlignmentState:
    """Arm the next map click to set B. Requires A.

    Raises:
        AlignmentError: Point A has not been set yet.
    """
    if state.point_a is None:
        raise AlignmentError("Point A must be set before point B")
    if state.mode is AlignmentMode.AWAITING_POINT_B:
        return replace(state, mode=AlignmentMode.IDLE)
    return replace(state, mode=AlignmentMode.AWAITING_POINT_B)


def cancel(state: AlignmentState) -> AlignmentState:
    return replace(state, mode=AlignmentMode.IDLE)


def record_click(state: AlignmentState, point: GeoPoint) -> AlignmentState:
    """Store ``point`` as A or B depending on the armed mode; no-op when idle."""
    if state.mode is AlignmentMode.AWAITING_POINT_A:
        return replace(state, point_a=point, mode=AlignmentMode.IDLE)
    if state.mode is AlignmentMode.AWAITING_POINT_B:
        return replace(state, point_b=point, mode=AlignmentMode.IDLE)
    return state


def set_time_offset(state: AlignmentState, minutes: int) -> AlignmentState:
    return replace(state, time_offset_minutes=clamp_offset(minutes))


def clear(state: AlignmentState) -> AlignmentState:
    return AlignmentState(time_offset_minutes=state.time_offset_minutes)
