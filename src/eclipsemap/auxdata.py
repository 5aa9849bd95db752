"""Auxiliary lookups shown next to the eclipse results: moon phase and past cloud cover.

These are best-effort. Every failure is logged and turned into "no data"
(``None`` or empty ``WeatherStats``); nothing here raises into the caller,
and the geometry core never waits on it.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date

import httpx

from eclipsemap.config import Settings
from eclipsemap.models import GeoPoint, MoonData, WeatherPoint, WeatherStats

log = logging.getLogger(__name__)

MOON_API_URL = "https://moon-phase.p.rapidapi.com/advanced"
WEATHER_ARCHIVE_URL = "https://archive-api.open-meteo.com/v1/archive"
WEATHER_YEARS = 5
CLEAR_SKY_CLOUD_COVER = 20  # Percent; below this an hour counts as clear

EMPTY_WEATHER = WeatherStats(
    average_cloud_cover=0, clear_sky_probability=0, years_analyzed=0, history=()
)


@dataclass(frozen=True)
class AuxiliaryData:
    moon: MoonData | None
    weather: WeatherStats


async def fetch_moon_data(
    client: httpx.AsyncClient, point: GeoPoint, day: date, settings: Settings
) -> MoonData | None:
    """Moon phase for ``day`` at ``point``. None when the provider fails."""
    if not settings.rapidapi_key:
        log.info("RAPIDAPI_KEY not set; skipping moon data")
        return None
    params = {"lat": point.lat, "lon": point.lng, "date": day.isoformat()}
    headers = {
        "x-rapidapi-key": settings.rapidapi_key,
        "x-rapidapi-host": "moon-phase.p.rapidapi.com",
    }
    try:
        resp = await client.get(
            MOON_API_URL, params=params, headers=headers, timeout=settings.http_timeout
        )
        resp.raise_for_status()
        moon = resp.json()["moon"]
        return MoonData(
            phase_name=moon["phase_name"],
            illumination=str(moon["illumination"]),
            age_days=float(moon["age_days"]),
            moonrise=str(moon.get("moonrise", "-")),
            moonset=str(moon.get("moonset", "-")),
            emoji=moon.get("emoji", ""),
        )
    except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
        log.warning("Moon data unavailable for %s on %s: %s", point, day, e)
        return None


async def _fetch_weather_year(
    client: httpx.AsyncClient, point: GeoPoint, day: date, hour: int, settings: Settings
) -> WeatherPoint | None:
    params = {
        "latitude": point.lat,
        "longitude": point.lng,
        "start_date": day.isoformat(),
        "end_date": day.isoformat(),
        "hourly": "temperature_2m,cloudcover,precipitation",
        "timezone": "auto",
    }
    try:
        resp = await client.get(WEATHER_ARCHIVE_URL, params=params, timeout=settings.http_timeout)
        resp.raise_for_status()
        hourly = resp.json().get("hourly")
        if not hourly:
            return None
        cloud_cover = float(hourly["cloudcover"][hour] or 0)
        return WeatherPoint(
            year=day.year,
            date=day.isoformat(),
            cloud_cover=cloud_cover,
            precipitation=float(hourly["precipitation"][hour] or 0),
            temperature=float(hourly["temperature_2m"][hour] or 0),
            is_clear=cloud_cover < CLEAR_SKY_CLOUD_COVER,
        )
    except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
        log.warning("Weather archive unavailable for %s: %s", day, e)
        return None


async def fetch_historical_weather(
    client: httpx.AsyncClient,
    point: GeoPoint,
    month: int,
    day: int,
    hour: int,
    settings: Settings,
    current_year: int | None = None,
) -> WeatherStats:
    """Cloud cover at ``hour`` on the same calendar day over the last complete years.

    Years whose request fails are skipped; if none succeed the stats are empty.
    """
    current_year = current_year or date.today().year
    start_year = current_year - WEATHER_YEARS - 1
    days = [date(start_year + i, month, day) for i in range(WEATHER_YEARS)]
    results = await asyncio.gather(
        *(_fetch_weather_year(client, point, d, hour, settings) for d in days)
    )
    history = [r for r in results if r is not None]
    if not history:
        return EMPTY_WEATHER

    total_cloud = sum(r.cloud_cover for r in history)
    clear_days = sum(1 for r in history if r.is_clear)
    return WeatherStats(
        average_cloud_cover=round(total_cloud / len(history)),
        clear_sky_probability=round(clear_days / len(history) * 100),
        years_analyzed=len(history),
        history=tuple(sorted(history, key=lambda r: r.year, reverse=True)),
    )


async def fetch_auxiliary(
    point: GeoPoint,
    event_day: date,
    hour: int,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> AuxiliaryData:
    """Run the moon and weather lookups as independent tasks and merge what arrives."""
    settings = settings or Settings.from_env()
    own_client = client is None
    client = client or httpx.AsyncClient()
    try:
        moon_task = asyncio.create_task(fetch_moon_data(client, point, event_day, settings))
        weather_task = asyncio.create_task(
            fetch_historical_weather(
                client, point, event_day.month, event_day.day, hour, settings
            )
        )
        moon, weather = await asyncio.gather(moon_task, weather_task)
    finally:
        if own_client:
            await client.aclose()
    return AuxiliaryData(moon=moon, weather=weather)
