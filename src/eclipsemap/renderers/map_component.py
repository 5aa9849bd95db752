"""Two-way Streamlit component hosting the SVG map.

components.html() only renders; it cannot send anything back. This declares
a static-file custom component whose frontend (frontend/index.html) puts the
rendered map page in an inner frame and relays the gestures that page posts
as the component value.
"""

from pathlib import Path
from typing import Any

import streamlit.components.v1 as components

FRONTEND_DIR = Path(__file__).parent / "frontend"

_component = components.declare_component("eclipse_map", path=str(FRONTEND_DIR))


def eclipse_map(page_html: str, height: int, key: str | None = None) -> dict[str, Any] | None:
    """Show the map page and return the last gesture it reported.

    The value is a dict as described in EclipseStore.handle_map_event, or
    None before the first gesture.
    """
    return _component(html=page_html, height=height, key=key, default=None)
