import pytest

from eclipsemap.catalog import (
    UnknownEventError,
    filter_pois,
    get_event,
    load_events,
    load_points_of_interest,
    parse_event,
    search_cities,
)
from eclipsemap.models import POICategory


def test_both_events_load():
    events = load_events()
    assert list(events) == ["2026", "2027"]


def test_event_2026_metadata(event_2026):
    assert str(event_2026.date) == "2026-08-12"
    assert event_2026.timezone == "Europe/Madrid"
    assert event_2026.saros == 126
    assert len(event_2026.cities) == 15
    assert event_2026.band.bounds == (37.0, 48.0, -10.0, 6.0)
    assert event_2026.band.half_width_km(-10) == 150
    assert event_2026.band.half_width_km(6) == 70
    assert event_2026.band.half_width_km(30) == 50


def test_city_times_are_ordered(event_2026):
    coruna = event_2026.cities[0]
    assert coruna.name == "A Coruña"
    assert coruna.times.start == "19:31"
    assert coruna.times.maximum == "20:28"
    assert coruna.times.end == "21:22"
    madrid = next(c for c in event_2026.cities if c.name == "Madrid")
    assert madrid.times.totality_start == "-"
    assert not madrid.in_totality


def test_polylines_are_lng_lat(event_2026):
    for lng, lat in event_2026.central_line:
        assert -20 < lng < 10
        assert 35 < lat < 50


def test_unknown_event():
    with pytest.raises(UnknownEventError):
        get_event("1999")
    with pytest.raises(KeyError):
        get_event("")


def test_flat_band_without_bounds(event_2027):
    assert event_2027.band.bounds is None
    assert event_2027.band.half_width_km(-12) == event_2027.band.half_width_km(0) == 125


def test_parse_event_defaults():
    raw = {
        "id": "x",
        "title": "Test",
        "date": "2030-01-01",
        "timezone": "UTC",
        "approx_max_local": "12:00",
        "saros": 1,
        "gamma": 0,
        "max_duration": "1m 00s",
        "max_duration_location": "-",
        "max_width_km": 100,
        "entry_time": "-",
        "entry_location": "-",
        "exit_time": "-",
        "exit_location": "-",
        "sun_altitude_range": "-",
        "max_duration_seconds": 60,
        "central_line": [[0, 0], [1, 1]],
        "north_limit": [],
        "south_limit": [],
        "cities": [],
        "band": {"base_half_width_km": 50, "min_half_width_km": 50},
    }
    event = parse_event(raw)
    assert event.central_line == ((0.0, 0.0), (1.0, 1.0))
    assert event.band.bounds is None
    assert event.band.partial_floor == 0.5
    assert event.cities == ()


def test_points_of_interest():
    pois = load_points_of_interest()
    assert len(pois) == 17
    assert len({p.id for p in pois}) == 17
    tower = next(p for p in pois if p.id == "torre-hercules")
    assert tower.category is POICategory.MONUMENT
    assert tower.totality_duration == "1m 20s"


def test_filter_pois():
    pois = load_points_of_interest()
    natural = filter_pois(pois, {POICategory.NATURAL})
    assert len(natural) == 3
    assert filter_pois(pois, set()) == ()
    assert filter_pois(pois, POICategory) == pois


@pytest.mark.parametrize(
    "query,names",
    [
        ("coru", ["A Coruña"]),
        ("  SAN ", ["Santiago de Compostela", "San Sebastián"]),
        ("madrid", ["Madrid"]),
        ("atlantis", []),
    ],
)
def test_search_cities(event_2026, query, names):
    assert [c.name for c in search_cities(event_2026, query)] == names


def test_search_cities_empty_query_returns_all(event_2026):
    assert search_cities(event_2026, "") == event_2026.cities
