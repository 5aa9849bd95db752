"""SVG map renderer.

Produces a self-contained HTML string (raster tiles + SVG overlay) that is
hosted by the map component in map_component.py. Its script posts finished
gestures (click, drag, wheel, marker press) to the parent frame. All positions
come from the current ``MapView``; nothing is cached between renders.

Screen coordinate system (matches mapview.py):
  x ∈ [0, width]   pixels from the left edge
  y ∈ [0, height]  pixels from the top edge, north up
"""

from __future__ import annotations

import html
import math

from eclipsemap.i18n import t
from eclipsemap.models import CityPopup, GeoPoint, POICategory, PopupContent
from eclipsemap.projection import TILE_SIZE
from eclipsemap.state import EclipseStore

_BG = "#1a1a2e"
_BAND_FILL = "rgba(255, 107, 53, 0.25)"
_LIMIT_COLOR = "#60a5fa"
_CENTRAL_COLOR = "#ef4444"
_CITY_TOTAL = "#fbbf24"
_CITY_PARTIAL = "#94a3b8"
_SUN_RAY_COLOR = "#facc15"
_SUN_RAY_PX = 400

CATEGORY_COLORS: dict[POICategory, str] = {
    POICategory.MONUMENT: "#f59e0b",
    POICategory.NATURAL: "#10b981",
    POICategory.RELIGIOUS: "#ec4899",
    POICategory.MUSEUM: "#8b5cf6",
    POICategory.VIEWPOINT: "#06b6d4",
}

# Reports finished gestures to the hosting frame (see map_component.py).
# The layer is translated locally while dragging; the real pan happens in Python.
_DRAG_THRESHOLD_PX = 3
_WHEEL_SETTLE_MS = 200

_GESTURE_JS = """
(function() {
  var map = document.getElementById('map');
  var layer = document.getElementById('layer');
  var counter = 0;
  var down = null, moved = false;
  var wheelDelta = 0, wheelAt = null, wheelTimer = null;

  function send(ev) {
    counter += 1;
    ev.seq = Date.now() + '-' + counter;
    window.parent.postMessage({ eclipsemap: ev }, '*');
  }

  function local(p) {
    var r = map.getBoundingClientRect();
    return { x: p.clientX - r.left, y: p.clientY - r.top };
  }

  function press(p, target) {
    if (target.closest && target.closest('#popup, #info')) return;
    var marker = target.closest ? target.closest('[data-kind]') : null;
    if (marker) {
      send({ type: marker.getAttribute('data-kind'), id: marker.getAttribute('data-id') });
      return;
    }
    down = local(p);
    moved = false;
    map.classList.add('grabbing');
  }

  function drag(p) {
    if (!down) return;
    var q = local(p), dx = q.x - down.x, dy = q.y - down.y;
    if (Math.abs(dx) > %(threshold)d || Math.abs(dy) > %(threshold)d) moved = true;
    layer.style.transform = 'translate(' + dx + 'px,' + dy + 'px)';
  }

  function release(p) {
    if (!down) return;
    var start = down, q = local(p);
    down = null;
    map.classList.remove('grabbing');
    if (moved) {
      send({ type: 'drag', x0: start.x, y0: start.y, x1: q.x, y1: q.y });
    } else {
      layer.style.transform = '';
      send({ type: 'click', x: q.x, y: q.y });
    }
  }

  map.addEventListener('mousedown', function(e) {
    if (e.button !== 0) return;
    e.preventDefault();
    press(e, e.target);
  });
  window.addEventListener('mousemove', function(e) { drag(e); });
  window.addEventListener('mouseup', function(e) { release(e); });

  map.addEventListener('touchstart', function(e) {
    if (e.touches.length !== 1) return;
    e.preventDefault();
    press(e.touches[0], e.target);
  }, { passive: false });
  map.addEventListener('touchmove', function(e) {
    e.preventDefault();
    drag(e.changedTouches[0]);
  }, { passive: false });
  map.addEventListener('touchend', function(e) { release(e.changedTouches[0]); });

  // One rerun per scroll burst, not per notch
  map.addEventListener('wheel', function(e) {
    e.preventDefault();
    wheelDelta += e.deltaY;
    wheelAt = local(e);
    clearTimeout(wheelTimer);
    wheelTimer = setTimeout(function() {
      send({ type: 'wheel', x: wheelAt.x, y: wheelAt.y, delta_y: wheelDelta });
      wheelDelta = 0;
    }, %(settle)d);
  }, { passive: false });
})();
""" % {"threshold": _DRAG_THRESHOLD_PX, "settle": _WHEEL_SETTLE_MS}


def _marker(x: float, y: float, color: str, label: str) -> str:
    return (
        f'<circle cx="{x:.1f}" cy="{y:.1f}" r="9" fill="{color}" stroke="#ffffff" stroke-width="2.5"/>'
        f'<text x="{x:.1f}" y="{y + 4:.1f}" text-anchor="middle" font-size="11"'
        f' font-weight="700" fill="#000000">{html.escape(label)}</text>'
    )


def _ray(x: float, y: float, azimuth_deg: float, length: float) -> tuple[float, float]:
    """End point of a ray leaving (x, y) at a compass azimuth. Mercator keeps local angles."""
    az = math.radians(azimuth_deg)
    return x + math.sin(az) * length, y - math.cos(az) * length


def _popup_html(popup: PopupContent, lang: str) -> str:
    if isinstance(popup, CityPopup):
        c = popup.city
        rows = [(t("popup_start", lang), c.times.start)]
        if c.in_totality and c.times.totality_start != "-":
            rows += [
                (t("popup_totality_start", lang), c.times.totality_start),
                (t("popup_totality_end", lang), c.times.totality_end),
                (t("popup_duration", lang), c.totality_duration),
            ]
        rows += [
            (t("popup_maximum", lang), c.times.maximum),
            (t("popup_end", lang), c.times.end),
            (t("popup_magnitude", lang), f"{c.magnitude:.3f}"),
            (t("popup_sun_altitude", lang), f"{c.sun_altitude_deg:.0f}°"),
        ]
        badge = t("badge_total" if c.in_totality else "badge_partial", lang)
        body = "".join(
            f"<div class='row'><span>{html.escape(k)}</span><b>{html.escape(v)}</b></div>"
            for k, v in rows
        )
        return f"<h3>{html.escape(c.name)}</h3><div class='badge'>{badge}</div>{body}"

    p = popup.poi
    badge = (
        f"{t('popup_duration', lang)}: {p.totality_duration}"
        if p.in_totality and p.totality_duration
        else t("badge_partial", lang)
    )
    return (
        f"<h3>{html.escape(p.name)}</h3><p>{html.escape(p.description)}</p>"
        f"<div class='badge'>{html.escape(badge)}</div>"
        f"<div class='tip'><b>{t('popup_photo_tip', lang)}</b> {html.escape(p.photo_tip)}</div>"
    )


def render_map_html(store: EclipseStore, tile_style: str = "dark", lang: str = "es") -> str:
    """Return a self-contained HTML page with tiles and the eclipse overlay.

    Args:
        store: Application state; the current event, view, layers, and
            alignment points are read from it.
        tile_style: Key of config.TILE_STYLES.
        lang: Language code ('es' or 'en') for labels.

    Returns:
        HTML string passed to map_component.eclipse_map().
    """
    state = store.state
    view = state.view
    event = store.event

    tile_parts = [
        f'<img src="{html.escape(tile.url)}" style="left:{tile.left:.1f}px;top:{tile.top:.1f}px;'
        f'width:{TILE_SIZE}px;height:{TILE_SIZE}px" alt="" draggable="false"/>'
        for tile in view.visible_tiles(tile_style)
    ]

    overlay: list[str] = []
    if state.layers.path:
        band = view.band_polygon_path(event.north_limit, event.south_limit)
        central = view.polyline_path(event.central_line)
        overlay.append(f'<path d="{band}" fill="{_BAND_FILL}" stroke="none"/>')
        for limit in (event.north_limit, event.south_limit):
            overlay.append(
                f'<path d="{view.polyline_path(limit)}" fill="none" stroke="{_LIMIT_COLOR}"'
                f' stroke-width="3" stroke-dasharray="12,6" stroke-linecap="round"/>'
            )
        # Glow under the sharp central line
        overlay.append(
            f'<path d="{central}" fill="none" stroke="{_CENTRAL_COLOR}" stroke-width="12"'
            f' opacity="0.4" stroke-linecap="round"/>'
        )
        overlay.append(
            f'<path d="{central}" fill="none" stroke="{_CENTRAL_COLOR}" stroke-width="4"'
            f' stroke-linecap="round"/>'
        )

    for city in store.visible_cities:
        x, y = view.geo_to_screen(city.point.lng, city.point.lat)
        if not view.is_on_screen(x, y):
            continue
        color = _CITY_TOTAL if city.in_totality else _CITY_PARTIAL
        overlay.append(
            f'<g class="marker" data-kind="city" data-id="{html.escape(city.name)}">'
            f'<circle cx="{x:.1f}" cy="{y:.1f}" r="16" fill="{color}" opacity="0.25"/>'
            f'<circle cx="{x:.1f}" cy="{y:.1f}" r="8" fill="{color}" stroke="#ffffff" stroke-width="2.5"/>'
            f'<text class="label" x="{x:.1f}" y="{y + 22:.1f}" text-anchor="middle">'
            f"{html.escape(city.name)}</text></g>"
        )

    for poi in store.visible_pois:
        x, y = view.geo_to_screen(poi.point.lng, poi.point.lat)
        if not view.is_on_screen(x, y):
            continue
        overlay.append(
            f'<g class="marker" data-kind="poi" data-id="{html.escape(poi.id)}">'
            f'<rect x="{x - 10:.1f}" y="{y - 10:.1f}" width="20" height="20" rx="4"'
            f' fill="{CATEGORY_COLORS[poi.category]}" stroke="#ffffff" stroke-width="2.5">'
            f"<title>{html.escape(poi.name)}</title></rect></g>"
        )

    if state.selected_location is not None:
        loc: GeoPoint = state.selected_location
        x, y = view.geo_to_screen(loc.lng, loc.lat)
        overlay.append(
            f'<circle cx="{x:.1f}" cy="{y:.1f}" r="7" fill="#22d3ee" stroke="#ffffff" stroke-width="2"/>'
        )

    alignment = state.alignment
    result = store.alignment_result
    if alignment.point_a is not None and result is not None:
        ax, ay = view.geo_to_screen(alignment.point_a.lng, alignment.point_a.lat)
        sx, sy = _ray(ax, ay, result.sun_azimuth, _SUN_RAY_PX)
        overlay.append(
            f'<line x1="{ax:.1f}" y1="{ay:.1f}" x2="{sx:.1f}" y2="{sy:.1f}"'
            f' stroke="{_SUN_RAY_COLOR}" stroke-width="3" stroke-dasharray="8,4"/>'
        )
        if alignment.point_b is not None:
            bx, by = view.geo_to_screen(alignment.point_b.lng, alignment.point_b.lat)
            overlay.append(
                f'<line x1="{ax:.1f}" y1="{ay:.1f}" x2="{bx:.1f}" y2="{by:.1f}"'
                f' stroke="#3b82f6" stroke-width="3"/>'
            )
            overlay.append(_marker(bx, by, "#3b82f6", "B"))
        overlay.append(_marker(ax, ay, "#22c55e", "A"))

    popup_html = ""
    if state.popup is not None:
        px, py = view.geo_to_screen(state.popup.point.lng, state.popup.point.lat)
        left = min(max(px + 15, 10), view.width - 340)
        top = min(max(py - 100, 10), view.height - 280)
        popup_html = (
            f'<div id="popup" style="left:{left:.0f}px;top:{top:.0f}px">'
            f"{_popup_html(state.popup, lang)}</div>"
        )

    center = view.center
    ew = "W" if center.lng < 0 else "E"
    tiles_html = "\n  ".join(tile_parts)
    overlay_svg = "\n    ".join(overlay)

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
html, body {{ width: 100%; height: 100%; background: {_BG}; overflow: hidden;
  font-family: system-ui, sans-serif; }}
#map {{ position: relative; width: {view.width:.0f}px; height: {view.height:.0f}px; overflow: hidden; }}
#map {{ cursor: grab; touch-action: none; }}
#map.grabbing {{ cursor: grabbing; }}
#layer {{ position: absolute; inset: 0; }}
#map img {{ position: absolute; pointer-events: none; }}
#overlay {{ position: absolute; inset: 0; }}
.marker {{ cursor: pointer; }}
.label {{ fill: #ffffff; font-size: 12px; font-weight: 600; paint-order: stroke;
  stroke: #000000; stroke-width: 3px; }}
#popup {{ position: absolute; background: rgba(20,20,35,0.95); color: #e5e7eb;
  border: 1px solid #374151; border-radius: 8px; padding: 12px; min-width: 260px; max-width: 320px; }}
#popup h3 {{ margin-bottom: 6px; }}
#popup .row {{ display: flex; justify-content: space-between; font-size: 13px; }}
#popup .badge {{ display: inline-block; font-size: 11px; margin-bottom: 6px; color: #fbbf24; }}
#popup .tip {{ margin-top: 8px; font-size: 13px; }}
#info {{ position: absolute; top: 12px; left: 12px; background: rgba(20,20,35,0.85);
  color: #9ca3af; font-size: 12px; padding: 6px 10px; border-radius: 6px; }}
</style>
</head>
<body>
<div id="map">
  <div id="layer">
  {tiles_html}
  <svg id="overlay" width="{view.width:.0f}" height="{view.height:.0f}" xmlns="http://www.w3.org/2000/svg">
    {overlay_svg}
  </svg>
  </div>
  {popup_html}
  <div id="info">Zoom: {view.zoom}<br>{t("map_center", lang)}: {center.lat:.3f}°N, {abs(center.lng):.3f}°{ew}</div>
</div>
<script>
{_GESTURE_JS}
</script>
</body>
</html>"""
