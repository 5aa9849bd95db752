import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from eclipsemap import pathmap  # noqa: E402
from eclipsemap.models import GeoPoint  # noqa: E402
from eclipsemap.renderers.map_component import FRONTEND_DIR  # noqa: E402
from eclipsemap.renderers.static import render_static_map, save_static_map  # noqa: E402
from eclipsemap.renderers.svg_map import render_map_html  # noqa: E402


def test_map_html_has_tiles_and_overlay(store):
    page = render_map_html(store, tile_style="dark", lang="es")
    assert page.startswith("<!DOCTYPE html>")
    assert "https://a.basemaps.cartocdn.com/dark_all/6/" in page
    assert 'stroke-dasharray="12,6"' in page
    assert ">Burgos</text>" in page
    assert "Centro" in page


def test_map_html_respects_layers(store):
    store.toggle_layer("path")
    store.toggle_layer("cities")
    page = render_map_html(store, lang="en")
    assert "stroke-dasharray=\"12,6\"" not in page
    assert ">Burgos</text>" not in page
    assert "Center" in page


def test_map_html_shows_city_popup(store):
    coruna = store.event.cities[0]
    store.open_city(coruna)
    page = render_map_html(store, lang="en")
    assert 'id="popup"' in page
    assert "TOTAL ECLIPSE" in page
    assert "1m 16s" in page


def test_map_html_shows_alignment_markers(store):
    store.request_point_a()
    store.select_location(GeoPoint(lat=41.5, lng=-3.5))
    store.request_point_b()
    store.select_location(GeoPoint(lat=41.6, lng=-3.4))
    page = render_map_html(store)
    assert ">A</text>" in page
    assert ">B</text>" in page


def test_map_html_escapes_names(store):
    pont = next(p for p in store.visible_pois if p.id.startswith("pont"))
    store.open_poi(pont)
    page = render_map_html(store, lang="es")
    assert "Tip fotográfico:" in page
    assert "Pont d&#x27;en Gil" in page


def test_static_map_renders(event_2026):
    fig = render_static_map(event_2026)
    assert fig.axes[0].get_title() == event_2026.title


def test_save_static_map(event_2027, tmp_path):
    out = save_static_map(event_2027, tmp_path / "maps" / "2027.png")
    assert out.exists()
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_pathmap_cli(tmp_path, monkeypatch):
    saved = []

    def fake_save(event):
        saved.append(event.id)
        return tmp_path / "out.png"

    monkeypatch.setattr(pathmap, "save_static_map", fake_save)
    assert pathmap.main(["2027"]) == 0
    assert saved == ["2027"]


def test_pathmap_cli_unknown_event():
    assert pathmap.main(["1999"]) == 2


def test_map_html_reports_gestures(store):
    page = render_map_html(store)
    assert "<script>" in page
    assert "window.parent.postMessage({ eclipsemap: ev }, '*')" in page
    for kind in ("'click'", "'drag'", "'wheel'"):
        assert f"type: {kind}" in page


def test_map_html_markers_are_clickable(store):
    page = render_map_html(store)
    assert '<g class="marker" data-kind="city" data-id="Burgos">' in page
    poi = store.visible_pois[0]
    assert f'data-kind="poi" data-id="{poi.id}"' in page


def test_map_component_frontend_relays_to_streamlit():
    index = (FRONTEND_DIR / "index.html").read_text(encoding="utf-8")
    assert "streamlit:componentReady" in index
    assert "streamlit:setComponentValue" in index
    assert "data.eclipsemap" in index


def test_save_static_map_closes_figure_on_failure(event_2026, tmp_path, monkeypatch):
    def broken_savefig(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(Figure, "savefig", broken_savefig)
    open_before = plt.get_fignums()
    with pytest.raises(OSError, match="disk full"):
        save_static_map(event_2026, tmp_path / "broken.png")
    assert plt.get_fignums() == open_before
