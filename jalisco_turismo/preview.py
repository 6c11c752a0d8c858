"""Static preview of the map.

:func:`render_preview` draws the town markers over the municipality
outlines with matplotlib and saves a PNG.  It is meant for reports and for
checking a spreadsheet export at a glance, without opening the interactive
map in a browser.

Example
-------

>>> from jalisco_turismo.csv_parser import read_csv_file
>>> from jalisco_turismo.preview import render_preview
>>> records = read_csv_file("data/pueblos.csv")
>>> render_preview(records, output_path="output/preview.png")["image"]
'.../output/preview.png'

"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional

import geopandas as gpd
import matplotlib.pyplot as plt

from .records import Record, records_to_frame

MARGIN = 0.1


def _make_output_directory(output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)


def render_preview(
    records: Iterable[Record],
    *,
    municipalities: Optional[gpd.GeoDataFrame] = None,
    output_path: str = "./output/preview.png",
    title: str = "Pueblos Mágicos de Jalisco",
    label: bool = True,
    dpi: int = 150,
) -> Dict[str, object]:
    """Save a PNG with one point per record.

    Parameters
    ----------
    records : iterable of Record
        Towns to plot.
    municipalities : geopandas.GeoDataFrame, optional
        Boundaries drawn underneath the points.
    output_path : str, optional
        Destination of the PNG.  Parent directories are created.
    title : str, optional
        Figure title.
    label : bool, optional
        Write each town's name next to its point.
    dpi : int, optional
        Resolution of the saved image.

    Returns
    -------
    Dict[str, object]
        ``image`` (absolute path of the PNG) and ``count`` (number of
        plotted records).

    Raises
    ------
    ValueError
        If there is nothing to draw: no records and no municipalities.
    """
    df = records_to_frame(records)
    has_polygons = municipalities is not None and not municipalities.empty
    if df.empty and not has_polygons:
        raise ValueError("No records or municipalities to plot")

    path = Path(output_path)
    _make_output_directory(path)

    fig, ax = plt.subplots(figsize=(8, 8))
    if has_polygons:
        municipalities.plot(ax=ax, color="#d0d0d0", edgecolor="#666", linewidth=0.5)
    if not df.empty:
        ax.scatter(df["longitude"], df["latitude"], c="#8b008b", s=30,
                   edgecolor="black", linewidth=0.3, zorder=3)
        if label:
            for row in df.itertuples():
                ax.annotate(row.name, (row.longitude, row.latitude), xytext=(3, 3),
                            textcoords="offset points", fontsize=7)
        if not has_polygons:
            ax.set_xlim(df["longitude"].min() - MARGIN, df["longitude"].max() + MARGIN)
            ax.set_ylim(df["latitude"].min() - MARGIN, df["latitude"].max() + MARGIN)

    ax.set_title(title)
    ax.set_xlabel("Longitud")
    ax.set_ylabel("Latitud")
    ax.grid(True, linestyle="--", linewidth=0.5, alpha=0.5)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)

    return {"image": str(path.resolve()), "count": int(len(df))}


__all__ = ["render_preview"]
