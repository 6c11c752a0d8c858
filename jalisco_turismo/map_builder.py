"""Interactive map of Jalisco's municipalities and Pueblos Mágicos.

The map is a Leaflet page produced with :mod:`folium`:

* municipality polygons drawn in a neutral grey, highlighted in blue on
  hover, with the municipality name as tooltip and, on click, a panel with
  the road distance and travel time from Guadalajara plus travel
  recommendations;
* one marker per :class:`~jalisco_turismo.records.Record`, with the town
  name as tooltip and a popup showing the travel summary, the route and
  the link to more information.  Towns that know their municipality also
  show that municipality's panel in the popup.

All text coming from the data files is HTML-escaped before it is placed in
a popup.
"""

from __future__ import annotations

import html
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import folium
import geopandas as gpd

from .records import MunicipalityInfo, Record, bounds_of

logger = logging.getLogger(__name__)

MAP_CENTER = (20.5, -103.5)
ZOOM_START = 8
MIN_ZOOM = 7
MAX_ZOOM = 19

MORE_INFO_URL = "https://pueblosmagicos.mexicodesconocido.com.mx/jalisco"
NO_ADVISORY = "Sin recomendaciones registradas para este municipio."

STYLES: Dict[str, Dict[str, object]] = {
    "default": {
        "color": "#666",
        "weight": 2,
        "opacity": 0.7,
        "fillColor": "#d0d0d0",
        "fillOpacity": 0.7,
    },
    "hover": {
        "color": "#2a5298",
        "weight": 2.5,
        "opacity": 1,
        "fillColor": "#2a5298",
        "fillOpacity": 0.3,
    },
}

POPUP_MAX_WIDTH = 400


def _e(value: str) -> str:
    return html.escape(value, quote=True)


def popup_html(record: Record) -> str:
    """HTML shown when a town marker is clicked.

    The route and link sections are omitted when the record has no value
    for them.
    """
    parts: List[str] = [
        '<div class="popup-content">',
        f'<div class="popup-title">{_e(record.name)}</div>',
        '<div class="popup-info">'
        '<span class="popup-label">Desde Guadalajara:</span> '
        f'<span class="popup-value">{_e(record.travel_summary)}</span></div>',
    ]
    if record.route_url:
        parts.append(
            '<div class="popup-info"><span class="popup-label">Ruta:</span> '
            f'<span class="popup-value">{_e(record.route_url)}</span></div>'
        )
    if record.advisory_text:
        parts.append(
            '<div class="popup-info"><span class="popup-label">Consejos:</span> '
            f'<span class="popup-value">{_e(record.advisory_text)}</span></div>'
        )
    if record.info_url:
        parts.append(
            f'<div class="popup-link"><a href="{_e(record.info_url)}" target="_blank" '
            'rel="noopener noreferrer">🔗 Ver más información</a></div>'
        )
    parts.append("</div>")
    return "".join(parts)


def municipality_panel_html(name: str, info: Optional[MunicipalityInfo] = None,
                            advisory: str = "") -> str:
    """HTML shown when a municipality polygon is clicked.

    Unknown municipalities are reported with ``N/A`` distance and time.
    """
    info = info or MunicipalityInfo()
    return (
        f"<h2>{_e(name)}</h2>"
        '<div class="info-section">'
        '<div class="info-label">📍 Distancia desde Guadalajara</div>'
        f'<div class="info-value">{_e(info.distance_km)} km en carretera</div></div>'
        '<div class="info-section">'
        '<div class="info-label">⏱️ Tiempo estimado de viaje</div>'
        f'<div class="info-value">{_e(info.travel_time)}</div></div>'
        '<div class="info-section">'
        '<div class="info-label">🌟 Más información</div>'
        f'<div class="info-value"><a href="{MORE_INFO_URL}" target="_blank">'
        "Pueblos Mágicos de Jalisco →</a></div></div>"
        '<div class="recomendaciones">'
        '<div class="recomendaciones-title">🛡️ Recomendaciones de Viaje (Seguridad)</div>'
        f'<div class="recomendaciones-text">{_e(advisory or NO_ADVISORY)}</div></div>'
    )


def _add_municipalities(fmap: folium.Map, municipalities: gpd.GeoDataFrame,
                        info: Mapping[str, MunicipalityInfo],
                        advisories: Mapping[str, str]) -> None:
    layer = folium.FeatureGroup(name="Municipios")
    for row in municipalities.itertuples():
        if row.geometry is None or row.geometry.is_empty:
            continue
        polygon = folium.GeoJson(
            data=row.geometry.__geo_interface__,
            style_function=lambda feature: STYLES["default"],
            highlight_function=lambda feature: STYLES["hover"],
            tooltip=folium.Tooltip(row.name),
        )
        panel = municipality_panel_html(row.name, info.get(row.name), advisories.get(row.name, ""))
        folium.Popup(panel, max_width=POPUP_MAX_WIDTH).add_to(polygon)
        polygon.add_to(layer)
    layer.add_to(fmap)


def _add_markers(fmap: folium.Map, records: Sequence[Record],
                 info: Mapping[str, MunicipalityInfo],
                 advisories: Mapping[str, str]) -> None:
    layer = folium.FeatureGroup(name="Pueblos Mágicos")
    for record in records:
        content = popup_html(record)
        if record.municipality:
            # Clicking a town also opens its municipality panel.
            content += municipality_panel_html(
                record.municipality,
                info.get(record.municipality),
                advisories.get(record.municipality, ""),
            )
        folium.Marker(
            location=[record.latitude, record.longitude],
            tooltip=record.name,
            popup=folium.Popup(content, max_width=POPUP_MAX_WIDTH),
            icon=folium.Icon(color="purple", icon="star"),
        ).add_to(layer)
    layer.add_to(fmap)


def build_map(records: Iterable[Record], *,
              municipalities: Optional[gpd.GeoDataFrame] = None,
              municipality_info: Optional[Mapping[str, MunicipalityInfo]] = None,
              advisories: Optional[Mapping[str, str]] = None) -> folium.Map:
    """Create the interactive map.

    Parameters
    ----------
    records : iterable of Record
        Towns to mark.
    municipalities : geopandas.GeoDataFrame, optional
        Polygons with a ``name`` column, as returned by
        :func:`~jalisco_turismo.geojson_parser.parse_municipalities`.
    municipality_info : mapping, optional
        Distance/time per municipality name for the click panel.
    advisories : mapping, optional
        Travel recommendations per municipality name.

    Returns
    -------
    folium.Map
        The map, fitted to the markers when there are any, otherwise to the
        municipality polygons, otherwise centred on Jalisco.
    """
    records = list(records)
    fmap = folium.Map(
        location=list(MAP_CENTER),
        zoom_start=ZOOM_START,
        min_zoom=MIN_ZOOM,
        max_zoom=MAX_ZOOM,
        tiles="OpenStreetMap",
    )

    info = municipality_info or {}
    advisories = advisories or {}
    has_polygons = municipalities is not None and not municipalities.empty
    if has_polygons:
        _add_municipalities(fmap, municipalities, info, advisories)
    # Markers after polygons so they stay on top.
    _add_markers(fmap, records, info, advisories)
    folium.LayerControl().add_to(fmap)

    corners = bounds_of(records)
    if corners is not None:
        fmap.fit_bounds([list(corners[0]), list(corners[1])], padding=(30, 30))
    elif has_polygons:
        minx, miny, maxx, maxy = municipalities.total_bounds
        fmap.fit_bounds([[miny, minx], [maxy, maxx]], padding=(50, 50))

    logger.debug("Built map with %d markers", len(records))
    return fmap


def render_html(fmap: folium.Map) -> str:
    return fmap.get_root().render()


def save_map(fmap: folium.Map, output_path: str) -> str:
    """Write the map to ``output_path`` and return its absolute path."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fmap.save(str(path))
    return str(path.resolve())


__all__ = [
    "STYLES",
    "popup_html",
    "municipality_panel_html",
    "build_map",
    "render_html",
    "save_map",
]
