"""Runtime settings read from the environment.

Every setting has a default so that the API starts without any
configuration, pointing at the public "Pueblos Mágicos" spreadsheet.

``JALISCO_SOURCE``
    ``sheet`` (default), ``csv`` or ``json``.
``JALISCO_SHEET_URL``
    CSV export URL of the spreadsheet.
``JALISCO_CSV_PATH``
    Local CSV export, used when the source is ``csv``.
``JALISCO_DATA_DIR``
    Directory holding ``pueblos_magicos.json``, ``municipios_info.json``,
    ``recomendaciones.json`` and ``jalisco_municipios.geojson``.
``JALISCO_FETCH_TIMEOUT``
    Seconds to wait for the spreadsheet server.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .downloader import DEFAULT_TIMEOUT, sheet_csv_url

DEFAULT_SHEET_ID = "1x8jI4RYM6nvhydMfxBn68x7shxyEuf_KWNC0iDq8mzw"

SOURCES = ("sheet", "csv", "json")

PUEBLOS_FILE = "pueblos_magicos.json"
MUNICIPIOS_FILE = "municipios_info.json"
ADVISORIES_FILE = "recomendaciones.json"
GEOJSON_FILE = "jalisco_municipios.geojson"


@dataclass(frozen=True)
class Settings:
    source: str = "sheet"
    sheet_url: str = sheet_csv_url(DEFAULT_SHEET_ID)
    csv_path: Optional[str] = None
    data_dir: str = "data"
    fetch_timeout: float = DEFAULT_TIMEOUT

    @property
    def pueblos_path(self) -> Path:
        return Path(self.data_dir) / PUEBLOS_FILE

    @property
    def municipios_path(self) -> Path:
        return Path(self.data_dir) / MUNICIPIOS_FILE

    @property
    def advisories_path(self) -> Path:
        return Path(self.data_dir) / ADVISORIES_FILE

    @property
    def geojson_path(self) -> Path:
        return Path(self.data_dir) / GEOJSON_FILE


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (``os.environ`` by default).

    Raises
    ------
    ValueError
        If ``JALISCO_SOURCE`` is unknown or ``JALISCO_FETCH_TIMEOUT`` is not
        a positive number.
    """
    env = os.environ if environ is None else environ
    defaults = Settings()

    source = env.get("JALISCO_SOURCE", defaults.source).strip().lower()
    if source not in SOURCES:
        raise ValueError(f"JALISCO_SOURCE must be one of {', '.join(SOURCES)}, got {source!r}")

    raw_timeout = env.get("JALISCO_FETCH_TIMEOUT")
    timeout = defaults.fetch_timeout
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ValueError(f"JALISCO_FETCH_TIMEOUT must be a number, got {raw_timeout!r}") from exc
        if timeout <= 0:
            raise ValueError("JALISCO_FETCH_TIMEOUT must be positive")

    return Settings(
        source=source,
        sheet_url=env.get("JALISCO_SHEET_URL") or defaults.sheet_url,
        csv_path=env.get("JALISCO_CSV_PATH") or None,
        data_dir=env.get("JALISCO_DATA_DIR") or defaults.data_dir,
        fetch_timeout=timeout,
    )


__all__ = ["Settings", "load_settings", "SOURCES"]
