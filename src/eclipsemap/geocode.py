"""Place search via Nominatim."""

import logging

import httpx

from eclipsemap.config import Settings
from eclipsemap.models import GeoPoint

log = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"


class GeocodingError(Exception):
    """Geocoder call failure."""


def _search_nominatim(
    query: str, settings: Settings, client: httpx.Client
) -> tuple[float, float, str] | None:
    """Nominatim (OpenStreetMap) search. Returns (lat, lng, display_name) or None."""
    params = {"q": query, "format": "json", "limit": 1}
    headers = {"User-Agent": settings.user_agent}
    resp = client.get(NOMINATIM_URL, params=params, headers=headers, timeout=settings.http_timeout)
    resp.raise_for_status()
    results = resp.json()
    if not results:
        return None
    r = results[0]
    return float(r["lat"]), float(r["lon"]), r["display_name"]


def geocode_place(
    query: str,
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> tuple[GeoPoint, str]:
    """Resolve a place name to a point and the geocoder's display name.

    Args:
        query: Place name or address in any language.
        settings: Timeout and User-Agent. Read from the environment if None.
        client: HTTP client to use. A short-lived one is created if None.

    Returns:
        (GeoPoint, display name).

    Raises:
        GeocodingError: On HTTP failure or when the place cannot be found.
    """
    settings = settings or Settings.from_env()
    try:
        if client is None:
            with httpx.Client() as own_client:
                result = _search_nominatim(query, settings, own_client)
        else:
            result = _search_nominatim(query, settings, client)
    except httpx.HTTPError as e:
        log.warning("Nominatim request failed for %r: %s", query, e)
        raise GeocodingError(f"Geocoder unavailable: {e}") from e

    if result is None:
        raise GeocodingError(f"Place not found: {query}")
    lat, lng, display = result
    return GeoPoint(lat=lat, lng=lng), display
