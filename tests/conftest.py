from datetime import datetime

import pytest
from pytz import utc

from eclipsemap.catalog import get_event
from eclipsemap.models import GeoPoint
from eclipsemap.state import EclipseStore
from eclipsemap.sun import LowPrecisionSunModel, SkyfieldSunModel


@pytest.fixture
def event_2026():
    return get_event("2026")


@pytest.fixture
def event_2027():
    return get_event("2027")


@pytest.fixture
def store():
    s = EclipseStore("2026", sun_model=LowPrecisionSunModel())
    s.resize(800, 600)
    return s


@pytest.fixture(scope="session")
def skyfield_model(tmp_path_factory):
    """Skyfield sun model with DE421 downloaded once per session into a temp dir."""
    model = SkyfieldSunModel(tmp_path_factory.mktemp("ephemeris"))
    try:
        model.position(GeoPoint(lat=0.0, lng=0.0), datetime(2026, 8, 12, tzinfo=utc))
    except OSError as e:
        pytest.skip(f"DE421 download failed: {e}")
    return model
