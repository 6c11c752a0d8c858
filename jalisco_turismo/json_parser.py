"""
JSON Parser Module
==================

Loaders for the two JSON data files shipped with the map:

``pueblos_magicos.json``
    ``{"pueblos_magicos": [{"nombre": ..., "lat": ..., "lng": ...,
    "municipio": ...}, ...]}`` — the towns drawn as markers.

``municipios_info.json``
    ``{"municipios": {"Tapalpa": {"distancia_km": ..., "tiempo_horas":
    ..., "tiempo_minutos": ...}, ...}}`` — road distance and travel time
    from Guadalajara, shown when a municipality is clicked.

``recomendaciones.json``
    ``{"recomendaciones": {"Tapalpa": "...", ...}}`` — travel and safety
    recommendations per municipality, shown in the same panel.

Entries are validated with the same rules as the spreadsheet rows: a town
without a name or with non-numeric coordinates is skipped, the advisory
text is truncated, optional attributes default to an empty string.

Example
-------
>>> from jalisco_turismo.json_parser import read_pueblos_json
>>> records = read_pueblos_json("data/pueblos_magicos.json",
...                             municipios_path="data/municipios_info.json")
>>> records[1].travel_summary
'130 km en carretera, 2 horas (120 minutos)'

"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

from .records import (
    MunicipalityInfo,
    Record,
    RowRejected,
    as_advisory,
    as_coordinate,
    as_name,
    build_record,
)

logger = logging.getLogger(__name__)


def load_json(file_path: str) -> Any:
    """Read and decode a JSON document from ``file_path``.

    Raises
    ------
    FileNotFoundError
        If ``file_path`` does not point to an existing file.
    json.JSONDecodeError
        If the file does not contain valid JSON.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"JSON file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_municipios_info(data: Mapping[str, Any]) -> Dict[str, MunicipalityInfo]:
    """Build the municipality lookup table from ``municipios_info.json``.

    Parameters
    ----------
    data : mapping
        The decoded document.  It must have a ``municipios`` object keyed
        by municipality name.

    Returns
    -------
    dict
        Municipality name to :class:`MunicipalityInfo`.  Values missing in
        the document are reported as ``"N/A"``.

    Raises
    ------
    ValueError
        If the document does not have the expected structure.
    """
    if not isinstance(data, dict) or not isinstance(data.get("municipios"), dict):
        raise ValueError("Invalid municipios document: expected an object with a 'municipios' object")

    table: Dict[str, MunicipalityInfo] = {}
    for name, entry in data["municipios"].items():
        if not isinstance(entry, dict):
            logger.debug("Ignoring municipio %r: entry is not an object", name)
            continue
        table[name] = MunicipalityInfo(
            distance_km=_text(entry.get("distancia_km")) or "N/A",
            hours=_text(entry.get("tiempo_horas")) or "N/A",
            minutes=_text(entry.get("tiempo_minutos")) or "N/A",
        )
    return table


def parse_recomendaciones(data: Mapping[str, Any]) -> Dict[str, str]:
    """Build the municipality name to recommendation text table.

    Blank and non-text entries are left out.

    Raises
    ------
    ValueError
        If ``data`` lacks the ``recomendaciones`` object.
    """
    if not isinstance(data, dict) or not isinstance(data.get("recomendaciones"), dict):
        raise ValueError("Invalid recomendaciones document: expected an object with a 'recomendaciones' object")

    table: Dict[str, str] = {}
    for name, text in data["recomendaciones"].items():
        if not isinstance(text, str) or not text.strip():
            logger.debug("Ignoring recomendacion for %r: not a non-empty string", name)
            continue
        table[name] = text.strip()
    return table


def _pueblo_record(entry: Mapping[str, Any],
                   municipios: Mapping[str, MunicipalityInfo]) -> Record:
    if not isinstance(entry, dict):
        raise RowRejected("entry is not an object")
    for key in ("lat", "lng"):
        if entry.get(key) is None or isinstance(entry.get(key), bool):
            raise RowRejected(f"missing coordinate {key!r}")

    municipality = _text(entry.get("municipio"))
    travel_summary = _text(entry.get("distancia_tiempo"))
    if not travel_summary and municipality in municipios:
        travel_summary = municipios[municipality].travel_summary

    return build_record({
        "id": _text(entry.get("id")),
        "name": as_name(_text(entry.get("nombre"))),
        "latitude": as_coordinate(str(entry["lat"])),
        "longitude": as_coordinate(str(entry["lng"])),
        "advisory_text": as_advisory(_text(entry.get("consejos"))),
        "travel_summary": travel_summary,
        "route_url": _text(entry.get("ruta")),
        "info_url": _text(entry.get("link")),
        "municipality": municipality,
    })


def parse_pueblos(data: Mapping[str, Any],
                  municipios: Optional[Mapping[str, MunicipalityInfo]] = None) -> List[Record]:
    """Convert the decoded ``pueblos_magicos.json`` document to records.

    When ``municipios`` is given, towns without their own
    ``distancia_tiempo`` text get the travel summary of their municipality.

    Raises
    ------
    ValueError
        If ``data`` lacks the ``pueblos_magicos`` list.
    """
    if not isinstance(data, dict) or not isinstance(data.get("pueblos_magicos"), list):
        raise ValueError("Invalid pueblos document: expected an object with a 'pueblos_magicos' list")

    municipios = municipios or {}
    records: List[Record] = []
    for position, entry in enumerate(data["pueblos_magicos"]):
        try:
            records.append(_pueblo_record(entry, municipios))
        except RowRejected as exc:
            logger.debug("Skipping pueblo #%d: %s", position, exc)
    return records


def read_municipios_json(file_path: str) -> Dict[str, MunicipalityInfo]:
    return parse_municipios_info(load_json(file_path))


def read_recomendaciones_json(file_path: str) -> Dict[str, str]:
    return parse_recomendaciones(load_json(file_path))


def read_pueblos_json(file_path: str, *, municipios_path: Optional[str] = None) -> List[Record]:
    """Load ``pueblos_magicos.json`` (and optionally the municipio table)."""
    municipios = read_municipios_json(municipios_path) if municipios_path else None
    return parse_pueblos(load_json(file_path), municipios)


__all__ = [
    "load_json",
    "parse_municipios_info",
    "parse_recomendaciones",
    "parse_pueblos",
    "read_municipios_json",
    "read_recomendaciones_json",
    "read_pueblos_json",
]
