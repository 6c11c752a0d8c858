"""Utilities for fetching the raw data behind the map.

The spreadsheet that feeds the "Pueblos Mágicos" layer is published as a
Google Sheet.  Its CSV export is fetched over HTTP with a session that
retries transient failures; the body is returned as text for
:mod:`jalisco_turismo.csv_parser`.

Examples
--------
>>> from jalisco_turismo.downloader import fetch_text, sheet_csv_url
>>> url = sheet_csv_url("1x8jI4RYM6nvhydMfxBn68x7shxyEuf_KWNC0iDq8mzw")
>>> csv_text = fetch_text(url)  # doctest: +SKIP

Note
----
Nothing here validates the content.  A sheet that is private answers with
an HTML login page rather than an error status; the parser then simply
finds no valid rows.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter, Retry

logger = logging.getLogger(__name__)

SHEET_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv&gid={gid}"

DEFAULT_TIMEOUT = 15.0


class FetchError(RuntimeError):
    """The raw data could not be retrieved."""


def _create_session(retries: int = 3, backoff_factor: float = 0.5) -> requests.Session:
    """Create a requests session with retry logic suitable for downloads."""
    session = requests.Session()
    retry_strategy = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": "jalisco_turismo/0.1 downloader"})
    return session


def sheet_csv_url(sheet_id: str, gid: int = 0) -> str:
    """Return the CSV export URL of a Google Sheet tab."""
    if not sheet_id:
        raise ValueError("A spreadsheet id must be provided")
    return SHEET_EXPORT_URL.format(sheet_id=sheet_id, gid=gid)


def fetch_text(url: str, *, session: Optional[requests.Session] = None,
               timeout: float = DEFAULT_TIMEOUT) -> str:
    """Download ``url`` and return its body decoded as text.

    Parameters
    ----------
    url : str
        Absolute HTTP(S) URL.
    session : requests.Session, optional
        Session to use.  A retrying session is created when omitted.
    timeout : float, optional
        Seconds to wait for the server.  Defaults to 15.

    Returns
    -------
    str
        The response body.  CSV exports without a declared charset are
        decoded as UTF-8.

    Raises
    ------
    ValueError
        If ``url`` is empty or not an HTTP(S) URL.
    FetchError
        If a network error prevents the download or the server answers
        with an error status.
    """
    if not url or not isinstance(url, str):
        raise ValueError("A valid URL must be provided")
    if not url.startswith(("http://", "https://")):
        raise ValueError(f"Unsupported URL scheme for download: {url}")

    session = session or _create_session()
    try:
        logger.debug("Fetching %s", url)
        response = session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise FetchError(f"Failed to download {url}: {exc}") from exc

    if response.status_code >= 400:
        raise FetchError(f"Failed to download {url}: HTTP {response.status_code}")

    # requests falls back to ISO-8859-1 for text/* without a charset.
    if "charset" not in response.headers.get("Content-Type", "").lower():
        response.encoding = "utf-8"
    return response.text


__all__ = ["FetchError", "SHEET_EXPORT_URL", "fetch_text", "sheet_csv_url"]
