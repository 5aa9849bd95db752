"""Runtime settings read from the environment (a local .env is loaded by entry points)."""

import logging
import os
from dataclasses import dataclass

TILE_STYLES: dict[str, str] = {
    "dark": "https://a.basemaps.cartocdn.com/dark_all/{z}/{x}/{y}.png",
    "satellite": (
        "https://server.arcgisonline.com/ArcGIS/rest/services/"
        "World_Imagery/MapServer/tile/{z}/{y}/{x}"
    ),
}


@dataclass(frozen=True)
class Settings:
    default_event: str = "2026"
    sun_model: str = "low-precision"  # "low-precision" or "skyfield"
    ephemeris_dir: str = "resources"  # Where skyfield keeps de421.bsp
    http_timeout: float = 10.0  # Seconds, for every outbound request
    user_agent: str = "EclipseMap/1.0 (https://github.com/eclipsemap/eclipse-map)"
    rapidapi_key: str = ""
    tile_style: str = "dark"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            default_event=os.environ.get("ECLIPSEMAP_DEFAULT_EVENT", defaults.default_event),
            sun_model=os.environ.get("ECLIPSEMAP_SUN_MODEL", defaults.sun_model),
            ephemeris_dir=os.environ.get("ECLIPSEMAP_EPHEMERIS_DIR", defaults.ephemeris_dir),
            http_timeout=float(
                os.environ.get("ECLIPSEMAP_HTTP_TIMEOUT", defaults.http_timeout)
            ),
            user_agent=os.environ.get("ECLIPSEMAP_USER_AGENT", defaults.user_agent),
            rapidapi_key=os.environ.get("RAPIDAPI_KEY", defaults.rapidapi_key),
            tile_style=os.environ.get("ECLIPSEMAP_TILE_STYLE", defaults.tile_style),
            log_level=os.environ.get("ECLIPSEMAP_LOG_LEVEL", defaults.log_level),
        )


def configure_logging(level: str = "INFO") -> None:
    """Root logging setup for the app and CLI entry points."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
