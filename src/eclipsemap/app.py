"""EclipseMap — Streamlit app for the solar eclipses crossing Spain."""

import asyncio
import html
import logging

import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import streamlit_js_eval

load_dotenv()

from eclipsemap.auxdata import fetch_auxiliary  # noqa: E402
from eclipsemap.catalog import load_events, search_cities  # noqa: E402
from eclipsemap.config import TILE_STYLES, Settings, configure_logging  # noqa: E402
from eclipsemap.geocode import GeocodingError, geocode_place  # noqa: E402
from eclipsemap.i18n import t  # noqa: E402
from eclipsemap.models import AlignmentMode, POICategory  # noqa: E402
from eclipsemap.renderers.map_component import eclipse_map  # noqa: E402
from eclipsemap.renderers.svg_map import CATEGORY_COLORS, render_map_html  # noqa: E402
from eclipsemap.state import EclipseStore  # noqa: E402
from eclipsemap.sun import (  # noqa: E402
    MAX_TIME_OFFSET_MINUTES,
    OFFSET_STEP_MINUTES,
    AlignmentError,
    build_sun_model,
)

settings = Settings.from_env()
configure_logging(settings.log_level)
log = logging.getLogger(__name__)

_PAN_STEP_PX = 150
_MAP_WIDTH = 1000
_MAP_HEIGHT = 650

# --- Language detection (browser-first via streamlit-js-eval) ---
# navigator.language is read once and cached in session_state.
# The first run returns None; the rerun triggered by streamlit_js_eval fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "en" if _browser_lang.lower().startswith("en") else "es"

_lang: str = st.session_state.get("lang", "es")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="🌑",
    layout="wide",
)

# --- Session state initialization ---

if "store" not in st.session_state:
    _store = EclipseStore(settings.default_event, sun_model=build_sun_model(settings))
    _store.resize(_MAP_WIDTH, _MAP_HEIGHT)
    st.session_state.store = _store
if "error_msg" not in st.session_state:
    st.session_state.error_msg = None
if "aux" not in st.session_state:
    st.session_state.aux = None
if "place_name" not in st.session_state:
    st.session_state.place_name = ""

store: EclipseStore = st.session_state.store

st.markdown(
    """
    <style>
    iframe[src*="streamlit_js_eval"] { display: none !important; }
    html, body, [data-testid="stAppViewContainer"], [data-testid="stSidebar"] {
        background-color: #1a1a2e !important;
    }
    [data-testid="stHeader"] { display: none !important; }
    .result-box {
        border: 1px solid #374151; border-radius: 8px; padding: 0.8rem 1rem;
        color: #e5e7eb; margin-bottom: 0.6rem;
    }
    .result-box.total { border-color: #fbbf24; }
    .legend-dot { display: inline-block; width: 10px; height: 10px; border-radius: 2px; margin-right: 6px; }
    </style>
    """,
    unsafe_allow_html=True,
)

# --- Sidebar: event, layers, navigation ---

_events = load_events()
with st.sidebar:
    event_ids = sorted(_events)
    chosen = st.selectbox(
        t("label_event", _lang),
        event_ids,
        index=event_ids.index(store.state.event_id),
        format_func=lambda eid: _events[eid].title,
    )
    if chosen != store.state.event_id:
        store.select_event(chosen)
        st.session_state.aux = None

    event = store.event
    st.caption(
        f"Saros {event.saros} · γ {event.gamma} · {event.max_duration} "
        f"({event.max_duration_location}) · {event.max_width_km:.0f} km"
    )
    st.caption(
        f"{event.entry_time} {event.entry_location} → {event.exit_time} {event.exit_location}"
        f" · ☀ {event.sun_altitude_range}"
    )

    st.subheader(t("label_layers", _lang))
    layers = store.state.layers
    for name in ("path", "cities", "pois"):
        if st.checkbox(t(f"layer_{name}", _lang), value=getattr(layers, name)) != getattr(
            layers, name
        ):
            store.toggle_layer(name)

    for category in POICategory:
        label = (
            f"<span class='legend-dot' style='background:{CATEGORY_COLORS[category]}'></span>"
            f"{category.value}"
        )
        col_dot, col_box = st.columns([1, 6])
        col_dot.markdown(label, unsafe_allow_html=True)
        checked = category in store.state.categories
        if col_box.checkbox(category.value, value=checked, key=f"cat_{category.value}",
                            label_visibility="collapsed") != checked:
            store.toggle_category(category)

    tile_style = st.radio(
        t("label_tile_style", _lang),
        list(TILE_STYLES),
        index=list(TILE_STYLES).index(settings.tile_style) if settings.tile_style in TILE_STYLES else 0,
        horizontal=True,
    )

    nav = st.columns(6)
    if nav[0].button("＋"):
        store.zoom_in()
    if nav[1].button("－"):
        store.zoom_out()
    if nav[2].button("←"):
        store.pan(-_PAN_STEP_PX, 0)
    if nav[3].button("→"):
        store.pan(_PAN_STEP_PX, 0)
    if nav[4].button("↑"):
        store.pan(0, -_PAN_STEP_PX)
    if nav[5].button("↓"):
        store.pan(0, _PAN_STEP_PX)
    if st.button(t("btn_reset_view", _lang), use_container_width=True):
        store.reset_view()

# --- Location input ---

col_lat, col_lng, col_calc, col_place, col_search = st.columns([2, 2, 1.2, 3, 1.2])
with col_lat:
    lat_text = st.text_input(t("label_lat", _lang), value="42.36")
with col_lng:
    lng_text = st.text_input(t("label_lng", _lang), value="-3.70")
with col_calc:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    if st.button(t("btn_calculate", _lang), key="calc_btn"):
        st.session_state.error_msg = None
        st.session_state.place_name = ""
        if not store.submit_coordinates(lat_text, lng_text):
            st.session_state.error_msg = t("error_coordinates", _lang)
with col_place:
    place = st.text_input(t("label_place", _lang), value="")
with col_search:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    if st.button(t("btn_search", _lang), key="search_btn") and place:
        st.session_state.error_msg = None
        try:
            point, display = geocode_place(place, settings)
            store.select_location(point, fly=True)
            st.session_state.place_name = display
        except GeocodingError as e:
            st.session_state.error_msg = t("error_place", _lang).format(
                error=html.escape(str(e))
            )

if st.session_state.error_msg:
    st.error(st.session_state.error_msg)

# --- Map ---

map_col, side_col = st.columns([3, 1.3])
with map_col:
    gesture = eclipse_map(
        render_map_html(store, tile_style=tile_style, lang=_lang),
        height=_MAP_HEIGHT + 10,
        key="eclipse_map",
    )
    # The map was drawn from the previous state; redraw once the gesture is applied
    previous_location = store.state.selected_location
    if store.handle_map_event(gesture):
        if store.state.selected_location != previous_location:
            st.session_state.place_name = ""
        st.rerun()

with side_col:
    # City lookup also opens the map popup
    city_query = st.text_input(t("label_city_search", _lang), value="")
    matches = search_cities(store.event, city_query)
    if matches:
        city_name = st.selectbox(
            t("layer_cities", _lang), [c.name for c in matches], label_visibility="collapsed"
        )
        city = next(c for c in matches if c.name == city_name)
        if st.button("📍", key="city_go"):
            store.open_city(city)
            store.select_location(city.point, fly=True)
            st.rerun()

    if store.visible_pois:
        poi_name = st.selectbox(
            t("layer_pois", _lang), ["-"] + [p.name for p in store.visible_pois]
        )
        if poi_name != "-":
            poi = next(p for p in store.visible_pois if p.name == poi_name)
            if st.button("📷", key="poi_go"):
                store.open_poi(poi)
                store.select_location(poi.point, fly=True)
                st.rerun()
    if store.state.popup is not None and st.button("✕", key="popup_close"):
        store.close_popup()
        st.rerun()

    # --- Results ---
    result = store.calculation
    if result is not None:
        loc = store.state.selected_location
        box_class = "result-box total" if result.is_in_totality else "result-box"
        headline = t("result_total" if result.is_in_totality else "result_partial", _lang)
        name_line = (
            f"<small>{html.escape(st.session_state.place_name)}</small><br>"
            if st.session_state.place_name
            else ""
        )
        st.markdown(
            f"<div class='{box_class}'><b>{t('result_title', _lang)}</b><br>{name_line}"
            f"{loc.lat:.4f}, {loc.lng:.4f}<br><b>{headline}</b><br>"
            f"{t('result_distance', _lang)}: {result.distance_from_center_km:.0f} km<br>"
            f"{t('result_duration', _lang)}: {result.estimated_duration}<br>"
            f"{t('result_max_time', _lang)}: {result.estimated_max_time_local}<br>"
            f"{t('result_coverage', _lang)}: {result.coverage_percent}% "
            f"(mag. {result.magnitude:.3f})<br>"
            f"{t('popup_sun_altitude', _lang)}: {result.sun_altitude_deg:.0f}°</div>",
            unsafe_allow_html=True,
        )

        if st.button(f"{t('aux_moon', _lang)} / {t('aux_weather', _lang)}", key="aux_btn"):
            hour = int(event.approx_max_local.split(":")[0])
            st.session_state.aux = asyncio.run(
                fetch_auxiliary(loc, event.date, hour, settings)
            )
        aux = st.session_state.aux
        if aux is not None:
            if aux.moon is not None:
                st.caption(
                    f"{t('aux_moon', _lang)}: {aux.moon.emoji} {aux.moon.phase_name} "
                    f"({aux.moon.illumination})"
                )
            if aux.weather.years_analyzed:
                st.caption(
                    f"{t('aux_weather', _lang)}: {aux.weather.average_cloud_cover}% · "
                    f"☀ {aux.weather.clear_sky_probability}% "
                    f"({aux.weather.years_analyzed})"
                )
            if aux.moon is None and not aux.weather.years_analyzed:
                st.caption(t("aux_unavailable", _lang))

    # --- Alignment tool ---
    st.subheader(t("alignment_title", _lang))
    alignment = store.state.alignment
    a_col, b_col, c_col = st.columns(3)
    if a_col.button(t("btn_point_a", _lang), key="align_a"):
        store.request_point_a()
        st.rerun()
    if b_col.button(t("btn_point_b", _lang), key="align_b", disabled=alignment.point_a is None):
        try:
            store.request_point_b()
        except AlignmentError as e:
            log.warning("Alignment request rejected: %s", e)
        st.rerun()
    if c_col.button(t("btn_clear", _lang), key="align_clear"):
        store.clear_alignment()
        st.rerun()
    if alignment.mode is not AlignmentMode.IDLE:
        st.info(t("alignment_waiting", _lang))

    offset = st.slider(
        t("alignment_offset", _lang),
        min_value=-MAX_TIME_OFFSET_MINUTES,
        max_value=MAX_TIME_OFFSET_MINUTES,
        value=alignment.time_offset_minutes,
        step=OFFSET_STEP_MINUTES,
    )
    if offset != alignment.time_offset_minutes:
        store.set_time_offset(offset)

    aligned = store.alignment_result
    if aligned is not None:
        lines = [
            f"{t('alignment_sun', _lang)}: {aligned.sun_azimuth:.1f}° / {aligned.sun_altitude:.1f}°"
        ]
        if aligned.bearing_a_to_b is not None:
            lines.append(f"{t('alignment_bearing', _lang)}: {aligned.bearing_a_to_b:.1f}°")
            lines.append(f"{t('alignment_diff', _lang)}: {aligned.angular_difference:.1f}°")
        st.markdown("<br>".join(lines), unsafe_allow_html=True)
        if aligned.is_aligned:
            st.success(t("alignment_ok", _lang))
        best = store.best_alignment
        if best is not None and not aligned.is_aligned:
            best_offset, best_diff = best
            st.caption(
                t("alignment_best", _lang).format(offset=f"{best_offset:+d}", diff=f"{best_diff:.1f}")
            )
            if st.button(t("btn_apply_best", _lang), key="align_best"):
                store.set_time_offset(best_offset)
                st.rerun()
