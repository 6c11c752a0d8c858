"""
loader.py
=========

Runs the fetch → parse cycles behind the map and owns the records of the
current cycle.

A *source* is a zero-argument callable returning records; this module
builds one for each kind of data the map can be fed from (the published
spreadsheet, a local CSV export, the JSON data files).  A
:class:`RecordLoader` calls its source on every :meth:`~RecordLoader.reload`
and publishes the result as an immutable :class:`Snapshot`.

Reloads may overlap when the HTTP layer serves two reload requests at
once.  Each reload takes a generation number when it starts and its result
is published only if no newer reload has started meanwhile, so the most
recently started reload always wins and superseded results are dropped.
A failed reload leaves the published snapshot untouched.

Example usage::

    from jalisco_turismo.loader import RecordLoader, sheet_source
    loader = RecordLoader(sheet_source("https://docs.google.com/..."))
    snapshot = loader.reload()
    print(snapshot.generation, len(snapshot.records))

"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import requests

from .config import Settings
from .csv_parser import parse_csv, read_csv_file
from .downloader import DEFAULT_TIMEOUT, fetch_text
from .json_parser import read_pueblos_json
from .records import Record

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s in %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

Source = Callable[[], Sequence[Record]]


class LoaderError(Exception):
    """The loader cannot be built from the given configuration."""


@dataclass(frozen=True)
class Snapshot:
    """Records published by one reload.

    Attributes
    ----------
    generation : int
        Number of the reload that produced the records; ``0`` before the
        first successful reload.
    records : tuple of Record
        The records, in source order.
    """

    generation: int = 0
    records: Tuple[Record, ...] = ()


def sheet_source(url: str, *, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None) -> Source:
    """Source reading the CSV export of the spreadsheet at ``url``."""
    def load() -> Sequence[Record]:
        return parse_csv(fetch_text(url, session=session, timeout=timeout))
    return load


def csv_file_source(file_path: str) -> Source:
    def load() -> Sequence[Record]:
        return read_csv_file(file_path)
    return load


def json_source(pueblos_path: str, municipios_path: Optional[str] = None) -> Source:
    def load() -> Sequence[Record]:
        return read_pueblos_json(pueblos_path, municipios_path=municipios_path)
    return load


def source_from_settings(settings: Settings) -> Source:
    """Pick the source described by ``settings``.

    Raises
    ------
    LoaderError
        If the CSV source is selected without a path, or the source name is
        unknown.
    """
    if settings.source == "sheet":
        return sheet_source(settings.sheet_url, timeout=settings.fetch_timeout)
    if settings.source == "csv":
        if not settings.csv_path:
            raise LoaderError("JALISCO_CSV_PATH is required when the source is 'csv'")
        return csv_file_source(settings.csv_path)
    if settings.source == "json":
        municipios = settings.municipios_path
        return json_source(
            str(settings.pueblos_path),
            str(municipios) if municipios.is_file() else None,
        )
    raise LoaderError(f"Unknown source {settings.source!r}")


class RecordLoader:
    """Owns the records shown on the map and refreshes them on demand."""

    def __init__(self, source: Source) -> None:
        self._source = source
        self._lock = threading.Lock()
        self._started = 0
        self._snapshot = Snapshot()

    @property
    def snapshot(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    @property
    def records(self) -> Tuple[Record, ...]:
        return self.snapshot.records

    def _next_generation(self) -> int:
        with self._lock:
            self._started += 1
            return self._started

    def _publish(self, generation: int, records: Tuple[Record, ...]) -> Snapshot:
        with self._lock:
            if generation != self._started:
                logger.warning(
                    "Discarding reload %d: reload %d started after it",
                    generation, self._started,
                )
                return self._snapshot
            self._snapshot = Snapshot(generation, records)
            return self._snapshot

    def reload(self) -> Snapshot:
        """Fetch and parse the source, then publish the result.

        Returns
        -------
        Snapshot
            The snapshot published by this reload.  When a newer reload
            started meanwhile, the result is dropped and the snapshot
            currently published is returned instead.

        Raises
        ------
        Exception
            Whatever the source raises (for instance
            :class:`~jalisco_turismo.downloader.FetchError`).  The published
            snapshot is left as it was.
        """
        generation = self._next_generation()
        logger.info("Reload %d started", generation)
        try:
            records = tuple(self._source())
        except Exception:
            logger.error("Reload %d failed", generation)
            raise
        snapshot = self._publish(generation, records)
        if snapshot.generation == generation:
            logger.info("Reload %d published %d records", generation, len(records))
        return snapshot


__all__ = [
    "LoaderError",
    "Snapshot",
    "RecordLoader",
    "sheet_source",
    "csv_file_source",
    "json_source",
    "source_from_settings",
]
