"""
GeoJSON Parser Module
=====================

This module defines :func:`parse_municipalities`, which loads the
municipality boundaries of Jalisco (``jalisco_municipios.geojson``) into a
:class:`geopandas.GeoDataFrame`.  The INEGI boundary files name each
municipality in the ``NOMGEO`` property; the parser copies that value to a
``name`` column so the map builder does not depend on the source's
property names.

Functions
---------
parse_municipalities(file_path: str, name_property: str = "NOMGEO") -> geopandas.GeoDataFrame
    Read a GeoJSON FeatureCollection (or single Feature) of municipality
    polygons.

"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List

import geopandas as gpd

#: Property holding the municipality name in INEGI's boundary files.
NAME_PROPERTY = "NOMGEO"

#: CRS assumed when the document does not declare one.
DEFAULT_CRS = "EPSG:4326"


def _features(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    if not isinstance(data, dict) or "type" not in data:
        raise ValueError("Invalid GeoJSON: top‑level object must be a dict with a 'type' key")
    geo_type = data["type"]
    if geo_type == "FeatureCollection":
        features = data.get("features")
        if not isinstance(features, list):
            raise ValueError("Invalid GeoJSON: 'features' must be a list")
        return features
    if geo_type == "Feature":
        return [data]
    raise ValueError(f"Unsupported GeoJSON type '{geo_type}'. Must be 'FeatureCollection' or 'Feature'.")


def parse_municipalities(file_path: str, name_property: str = NAME_PROPERTY) -> gpd.GeoDataFrame:
    """Parse a GeoJSON file of municipality polygons.

    Parameters
    ----------
    file_path : str
        Path to a GeoJSON file on disk.
    name_property : str, optional
        Feature property holding the municipality name.  Defaults to
        ``"NOMGEO"``.

    Returns
    -------
    geopandas.GeoDataFrame
        One row per feature with every property as a column, a ``name``
        column and the ``geometry`` column, in ``EPSG:4326``.  A collection
        without features gives an empty frame that still has the ``name``
        and ``geometry`` columns.

    Raises
    ------
    FileNotFoundError
        If ``file_path`` does not point to an existing file.
    json.JSONDecodeError
        If the file is not valid JSON.
    ValueError
        If the JSON is not a Feature or FeatureCollection, or a feature
        lacks ``name_property``.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"GeoJSON file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        data: Dict[str, Any] = json.load(f)

    features = _features(data)
    if not features:
        return gpd.GeoDataFrame({"name": []}, geometry=gpd.GeoSeries([], crs=DEFAULT_CRS))

    for position, feature in enumerate(features):
        properties = feature.get("properties") or {}
        if name_property not in properties:
            raise ValueError(f"Feature #{position} has no '{name_property}' property")

    gdf = gpd.GeoDataFrame.from_features(features, crs=DEFAULT_CRS)
    gdf["name"] = gdf[name_property].astype(str).str.strip()
    return gdf


__all__ = ["NAME_PROPERTY", "parse_municipalities"]
