import math
from dataclasses import replace

import pytest

from eclipsemap.compute import (
    CoordinateError,
    calculate_eclipse_data,
    format_duration,
    parse_coordinates,
    parse_duration,
)
from eclipsemap.models import GeoPoint

A_CORUNA = GeoPoint(lat=43.3623, lng=-8.4115)
MADRID = GeoPoint(lat=40.4168, lng=-3.7038)


class TestParseCoordinates:
    def test_valid(self):
        assert parse_coordinates(" 43.36 ", "-8.41") == GeoPoint(lat=43.36, lng=-8.41)

    @pytest.mark.parametrize(
        "lat,lng",
        [("abc", "1"), ("1", ""), ("nan", "0"), ("0", "inf"), ("91", "0"), ("0", "-180.5")],
    )
    def test_rejected(self, lat, lng):
        with pytest.raises(CoordinateError):
            parse_coordinates(lat, lng)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_coordinates("x", "y")


@pytest.mark.parametrize(
    "text,seconds",
    [("1m 16s", 76), ("0m 28s", 28), ("2m18s", 138), ("-", None), ("", None), ("76", None)],
)
def test_parse_duration(text, seconds):
    assert parse_duration(text) == seconds


@pytest.mark.parametrize(
    "seconds,text", [(0, "0m 0s"), (47.26, "0m 47s"), (59.6, "1m 0s"), (107, "1m 47s")]
)
def test_format_duration(seconds, text):
    assert format_duration(seconds) == text


def test_a_coruna_is_in_totality(event_2026):
    result = calculate_eclipse_data(A_CORUNA, event_2026)
    assert result.is_in_totality
    assert result.estimated_max_time_local == "20:28"
    assert result.distance_from_center_km == 117
    assert result.estimated_duration == "0m 47s"
    assert result.coverage_percent == 100
    assert 1.0 < result.magnitude <= 1.03
    assert result.sun_altitude_deg == 12


def test_far_away_point_gets_floor_magnitude(event_2026):
    result = calculate_eclipse_data(GeoPoint(0, 0), event_2026)
    assert not result.is_in_totality
    assert result.magnitude == 0.5
    assert result.coverage_percent == 50
    assert result.estimated_duration == "-"


def test_madrid_is_partial(event_2026):
    result = calculate_eclipse_data(MADRID, event_2026)
    assert not result.is_in_totality
    assert 0.5 < result.magnitude < 1
    assert result.estimated_max_time_local == "20:30"


@pytest.mark.parametrize(
    "point",
    [MADRID, GeoPoint(37.39, -5.98), GeoPoint(41.39, 2.17), GeoPoint(50, 10), GeoPoint(0, 0)],
)
def test_partial_coverage_matches_magnitude(event_2026, point):
    result = calculate_eclipse_data(point, event_2026)
    if not result.is_in_totality:
        assert result.coverage_percent == round(result.magnitude * 100)
    assert 0 <= result.coverage_percent <= 100


def test_totality_changes_once_along_a_meridian(event_2026):
    lats = [41.817 + 0.02 * i for i in range(int((47.9 - 41.817) / 0.02) + 1)]
    flags = [calculate_eclipse_data(GeoPoint(lat, -3.185), event_2026).is_in_totality for lat in lats]
    assert flags[0] is True
    changes = sum(1 for a, b in zip(flags, flags[1:]) if a != b)
    assert changes == 1


def test_outside_bounding_box_is_never_total(event_2026):
    # On the central line but west of the box
    result = calculate_eclipse_data(GeoPoint(46.5225, -10.9525), event_2026)
    assert not result.is_in_totality


def test_duration_falls_back_to_event_maximum(event_2026):
    madrid_only = tuple(c for c in event_2026.cities if c.name == "Madrid")
    event = replace(event_2026, cities=madrid_only)
    result = calculate_eclipse_data(GeoPoint(41.817, -3.185), event)
    assert result.is_in_totality
    assert result.estimated_duration == "1m 47s"


def test_event_without_geometry(event_2026):
    event = replace(event_2026, central_line=(), cities=())
    result = calculate_eclipse_data(MADRID, event)
    assert not result.is_in_totality
    assert math.isinf(result.distance_from_center_km)
    assert result.estimated_max_time_local == "-"
    assert result.sun_altitude_deg == 0.0
    assert result.magnitude == 0.5


def test_flat_band_for_2027(event_2027):
    tarifa = GeoPoint(lat=36.0143, lng=-5.6044)
    madrid = calculate_eclipse_data(MADRID, event_2027)
    assert calculate_eclipse_data(tarifa, event_2027).is_in_totality
    assert not madrid.is_in_totality
