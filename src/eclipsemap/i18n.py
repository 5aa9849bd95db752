"""Simple two-language (es/en) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "es": "Eclipse Solar en España",
        "en": "Solar Eclipse in Spain",
    },
    "label_event": {
        "es": "Eclipse",
        "en": "Eclipse",
    },
    "label_layers": {
        "es": "Capas",
        "en": "Layers",
    },
    "layer_path": {
        "es": "Franja de totalidad",
        "en": "Totality path",
    },
    "layer_cities": {
        "es": "Ciudades",
        "en": "Cities",
    },
    "layer_pois": {
        "es": "Puntos de interés",
        "en": "Points of interest",
    },
    "label_tile_style": {
        "es": "Mapa base",
        "en": "Base map",
    },
    "label_lat": {
        "es": "Latitud",
        "en": "Latitude",
    },
    "label_lng": {
        "es": "Longitud",
        "en": "Longitude",
    },
    "label_place": {
        "es": "Buscar lugar",
        "en": "Search place",
    },
    "label_city_search": {
        "es": "Buscar ciudad",
        "en": "Search city",
    },
    "btn_calculate": {
        "es": "Calcular",
        "en": "Calculate",
    },
    "btn_search": {
        "es": "Buscar",
        "en": "Search",
    },
    "btn_reset_view": {
        "es": "↺ Vista inicial",
        "en": "↺ Reset view",
    },
    "error_coordinates": {
        "es": "Coordenadas no válidas.",
        "en": "Invalid coordinates.",
    },
    "error_place": {
        "es": "No se encontró el lugar. ({error})",
        "en": "Place not found. ({error})",
    },
    "result_title": {
        "es": "Datos del eclipse",
        "en": "Eclipse data",
    },
    "result_total": {
        "es": "Dentro de la franja de totalidad",
        "en": "Inside the path of totality",
    },
    "result_partial": {
        "es": "Eclipse parcial",
        "en": "Partial eclipse",
    },
    "result_distance": {
        "es": "Distancia a la línea central",
        "en": "Distance to central line",
    },
    "result_duration": {
        "es": "Duración estimada",
        "en": "Estimated duration",
    },
    "result_max_time": {
        "es": "Hora del máximo",
        "en": "Time of maximum",
    },
    "result_coverage": {
        "es": "Cobertura",
        "en": "Coverage",
    },
    "alignment_title": {
        "es": "Alineación Sol / objeto",
        "en": "Sun / landmark alignment",
    },
    "btn_point_a": {
        "es": "Punto A (observador)",
        "en": "Point A (observer)",
    },
    "btn_point_b": {
        "es": "Punto B (objeto)",
        "en": "Point B (landmark)",
    },
    "btn_clear": {
        "es": "Borrar",
        "en": "Clear",
    },
    "alignment_waiting": {
        "es": "Haz clic en el mapa, introduce coordenadas o elige una ciudad para fijar el punto.",
        "en": "Click the map, enter coordinates or pick a city to set the point.",
    },
    "alignment_offset": {
        "es": "Minutos respecto al máximo",
        "en": "Minutes from maximum",
    },
    "alignment_sun": {
        "es": "Sol (azimut / altura)",
        "en": "Sun (azimuth / altitude)",
    },
    "alignment_bearing": {
        "es": "Rumbo A → B",
        "en": "Bearing A → B",
    },
    "alignment_diff": {
        "es": "Diferencia",
        "en": "Difference",
    },
    "alignment_ok": {
        "es": "¡Alineado!",
        "en": "Aligned!",
    },
    "alignment_best": {
        "es": "Mejor momento: {offset} min (diferencia {diff}°)",
        "en": "Best moment: {offset} min (difference {diff}°)",
    },
    "btn_apply_best": {
        "es": "Ir a ese momento",
        "en": "Jump to that moment",
    },
    "aux_moon": {
        "es": "Luna",
        "en": "Moon",
    },
    "aux_weather": {
        "es": "Nubosidad histórica",
        "en": "Historical cloud cover",
    },
    "aux_unavailable": {
        "es": "Datos no disponibles",
        "en": "Data unavailable",
    },
    "map_center": {
        "es": "Centro",
        "en": "Center",
    },
    "badge_total": {
        "es": "ECLIPSE TOTAL",
        "en": "TOTAL ECLIPSE",
    },
    "badge_partial": {
        "es": "ECLIPSE PARCIAL",
        "en": "PARTIAL ECLIPSE",
    },
    "popup_start": {
        "es": "Inicio eclipse",
        "en": "Eclipse begins",
    },
    "popup_totality_start": {
        "es": "Inicio totalidad",
        "en": "Totality begins",
    },
    "popup_totality_end": {
        "es": "Fin totalidad",
        "en": "Totality ends",
    },
    "popup_duration": {
        "es": "Duración totalidad",
        "en": "Totality duration",
    },
    "popup_maximum": {
        "es": "Máximo",
        "en": "Maximum",
    },
    "popup_end": {
        "es": "Fin eclipse",
        "en": "Eclipse ends",
    },
    "popup_magnitude": {
        "es": "Magnitud",
        "en": "Magnitude",
    },
    "popup_sun_altitude": {
        "es": "Altura del Sol",
        "en": "Sun altitude",
    },
    "popup_photo_tip": {
        "es": "Tip fotográfico:",
        "en": "Photo tip:",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'es', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("es") or key
