"""Frozen records passed between the data, geometry and render layers."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

Coord = tuple[float, float]  # (lng, lat), GeoJSON order
Polyline = tuple[Coord, ...]


@dataclass(frozen=True)
class GeoPoint:
    """A geographic coordinate. The coordinate currency of the whole package."""

    lat: float  # Latitude (decimal degrees)
    lng: float  # Longitude (decimal degrees)

    @classmethod
    def from_coord(cls, coord: Coord) -> "GeoPoint":
        lng, lat = coord
        return cls(lat=lat, lng=lng)


@dataclass(frozen=True)
class EventTimes:
    """Local clock times ("HH:MM") of the eclipse contacts at one city. "-" when absent."""

    start: str
    totality_start: str
    maximum: str
    totality_end: str
    end: str


@dataclass(frozen=True)
class CityRecord:
    """Official per-city circumstances. Also the timing reference for arbitrary points."""

    name: str
    point: GeoPoint
    times: EventTimes
    totality_duration: str  # "1m 16s" or "-"
    magnitude: float
    sun_altitude_deg: float  # Sun altitude at maximum (degrees above horizon)
    in_totality: bool


class POICategory(str, Enum):
    MONUMENT = "monument"
    NATURAL = "natural"
    RELIGIOUS = "religious"
    MUSEUM = "museum"
    VIEWPOINT = "viewpoint"


@dataclass(frozen=True)
class PointOfInterest:
    """A photogenic landmark on or near the path."""

    id: str
    name: str
    point: GeoPoint
    category: POICategory
    description: str
    photo_tip: str
    in_totality: bool
    totality_duration: str | None = None


@dataclass(frozen=True)
class TotalityBand:
    """Per-event policy deciding whether a point lies inside the totality band.

    The half-width narrows linearly east of ``reference_lng`` and never drops
    below ``min_half_width_km``. A zero narrowing rate gives a flat band.
    """

    base_half_width_km: float
    min_half_width_km: float
    reference_lng: float = 0.0
    narrowing_km_per_degree: float = 0.0
    bounds: tuple[float, float, float, float] | None = None  # lat_min, lat_max, lng_min, lng_max
    band_width_km: float = 150.0  # Duration/magnitude fall-off distance
    partial_floor: float = 0.5  # Lowest magnitude reported outside the band
    partial_decay_per_km: float = 0.001

    def half_width_km(self, lng: float) -> float:
        narrowed = (
            self.base_half_width_km
            - (lng - self.reference_lng) * self.narrowing_km_per_degree
        )
        return max(narrowed, self.min_half_width_km)

    def contains(self, point: GeoPoint, distance_km: float) -> bool:
        if self.bounds is not None:
            lat_min, lat_max, lng_min, lng_max = self.bounds
            if not (lat_min <= point.lat <= lat_max and lng_min <= point.lng <= lng_max):
                return False
        return distance_km < self.half_width_km(point.lng)


@dataclass(frozen=True)
class EclipseEvent:
    """One eclipse: geometry, city circumstances, and descriptive metadata. Read-only."""

    id: str
    title: str
    date: date
    timezone: str  # IANA zone of the local times ("Europe/Madrid")
    approx_max_local: str  # "HH:MM" local time of maximum over the region
    saros: int
    gamma: float
    max_duration: str
    max_duration_location: str
    max_width_km: float
    entry_time: str
    entry_location: str
    exit_time: str
    exit_location: str
    sun_altitude_range: str
    max_duration_seconds: float  # Regional duration ceiling when a city has none
    central_line: Polyline
    north_limit: Polyline
    south_limit: Polyline
    cities: tuple[CityRecord, ...]
    band: TotalityBand


@dataclass(frozen=True)
class ClosestPoint:
    """Result of a nearest-vertex scan. ``index == -1`` marks the empty-input sentinel."""

    point: Coord | None
    distance_km: float
    index: int


@dataclass(frozen=True)
class EclipseCalculationResult:
    """Eclipse circumstances estimated for an arbitrary point. Never persisted."""

    is_in_totality: bool
    distance_from_center_km: float
    estimated_duration: str  # "0m 47s" or "-"
    estimated_max_time_local: str  # "HH:MM" or "-"
    magnitude: float
    coverage_percent: int  # 0-100
    sun_altitude_deg: float


@dataclass(frozen=True)
class SunPosition:
    azimuth_degrees: float  # Compass bearing, 0=N, 90=E, clockwise, [0, 360)
    altitude_degrees: float


class AlignmentMode(str, Enum):
    IDLE = "idle"
    AWAITING_POINT_A = "awaiting_point_a"
    AWAITING_POINT_B = "awaiting_point_b"


@dataclass(frozen=True)
class AlignmentState:
    """Observer (A) / target (B) selection for the alignment tool."""

    mode: AlignmentMode = AlignmentMode.IDLE
    point_a: GeoPoint | None = None
    point_b: GeoPoint | None = None
    time_offset_minutes: int = 0  # Relative to the event's local maximum, [-60, 60]

    @property
    def ready(self) -> bool:
        return self.point_a is not None


@dataclass(frozen=True)
class AlignmentResult:
    when: datetime  # UTC instant evaluated
    sun_azimuth: float
    sun_altitude: float
    bearing_a_to_b: float | None
    angular_difference: float | None
    is_aligned: bool


@dataclass(frozen=True)
class CityPopup:
    city: CityRecord

    @property
    def point(self) -> GeoPoint:
        return self.city.point


@dataclass(frozen=True)
class PoiPopup:
    poi: PointOfInterest

    @property
    def point(self) -> GeoPoint:
        return self.poi.point


PopupContent = CityPopup | PoiPopup


@dataclass(frozen=True)
class MoonData:
    """Subset of the moon-phase provider's answer shown next to the results."""

    phase_name: str
    illumination: str
    age_days: float
    moonrise: str
    moonset: str
    emoji: str = ""


@dataclass(frozen=True)
class WeatherPoint:
    year: int
    date: str  # "YYYY-MM-DD"
    cloud_cover: float  # 0-100
    precipitation: float  # mm
    temperature: float  # Celsius
    is_clear: bool


@dataclass(frozen=True)
class WeatherStats:
    average_cloud_cover: int
    clear_sky_probability: int  # 0-100
    years_analyzed: int
    history: tuple[WeatherPoint, ...] = field(default_factory=tuple)
