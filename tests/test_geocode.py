import httpx
import pytest

from eclipsemap.config import Settings
from eclipsemap.geocode import NOMINATIM_URL, GeocodingError, geocode_place
from eclipsemap.models import GeoPoint

SETTINGS = Settings(user_agent="eclipsemap-tests/0.1", http_timeout=2.0)


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_geocode_place_returns_first_result():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["agent"] = request.headers["User-Agent"]
        seen["q"] = request.url.params["q"]
        return httpx.Response(
            200,
            json=[
                {"lat": "43.3713", "lon": "-8.3960", "display_name": "A Coruña, Galicia, España"},
                {"lat": "0", "lon": "0", "display_name": "ignored"},
            ],
        )

    with _client(handler) as client:
        point, name = geocode_place("A Coruña", SETTINGS, client)

    assert point == GeoPoint(lat=43.3713, lng=-8.3960)
    assert name == "A Coruña, Galicia, España"
    assert seen["url"].startswith(NOMINATIM_URL)
    assert seen["agent"] == "eclipsemap-tests/0.1"
    assert seen["q"] == "A Coruña"


def test_geocode_place_not_found():
    with _client(lambda request: httpx.Response(200, json=[])) as client:
        with pytest.raises(GeocodingError, match="not found"):
            geocode_place("Nowhere at all", SETTINGS, client)


def test_geocode_place_http_error_is_wrapped():
    with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(GeocodingError) as excinfo:
            geocode_place("Burgos", SETTINGS, client)
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)


def test_geocode_place_connection_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with _client(handler) as client:
        with pytest.raises(GeocodingError):
            geocode_place("Burgos", SETTINGS, client)
