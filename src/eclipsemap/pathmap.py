"""CLI entry point for static eclipse path maps.

Pass an event id (defaults to ECLIPSEMAP_DEFAULT_EVENT), then run:
    python -m eclipsemap.pathmap 2026
"""

import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from eclipsemap.catalog import UnknownEventError, get_event  # noqa: E402
from eclipsemap.config import Settings, configure_logging  # noqa: E402
from eclipsemap.renderers.static import save_static_map  # noqa: E402

log = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    args = sys.argv[1:] if argv is None else argv
    event_id = args[0] if args else settings.default_event

    try:
        event = get_event(event_id)
    except UnknownEventError:
        log.error("Unknown eclipse event: %s", event_id)
        return 2
    path = save_static_map(event)
    log.info("Saved %s map to %s", event.title, path)
    print(f"Saved: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
