"""
Tourism Records
===============

Data types shared by every parser and renderer of the project.

A :class:`Record` is one tourism location (typically a *Pueblo Mágico*)
normalised from a row of the spreadsheet export or an entry of the JSON
data files.  Records are immutable: the parsers construct them once per
load cycle and the presentation layer only reads them.

The positional layout of the spreadsheet is declared once, in
:data:`RECORD_SCHEMA`, as an ordered tuple of :class:`FieldSpec`.  The
normaliser in :mod:`jalisco_turismo.csv_parser` walks that schema instead
of hard-coding column indices.
"""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd

#: Maximum number of characters kept from the advisory column.
ADVISORY_MAX_LENGTH = 150

#: A data row must carry at least this many columns to be considered.
MIN_FIELDS = 8

# Plain ASCII decimal, optionally signed, with an optional exponent.
NUMBER_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)


class InvalidInput(TypeError):
    """Raised when the parser receives something that is not text."""


class RowRejected(ValueError):
    """Raised by a field parser when a value makes the whole row invalid.

    The parse pipeline catches it per row; it never reaches the caller.
    """


@dataclass(frozen=True)
class Record:
    """One tourism location ready to be placed on the map.

    Attributes
    ----------
    id : str
        Opaque identifier from the source, possibly empty.
    name : str
        Display name, trimmed and never empty.
    latitude, longitude : float
        Finite WGS84 coordinates.
    advisory_text : str
        Safety and travel notes, at most :data:`ADVISORY_MAX_LENGTH`
        characters.
    travel_summary : str
        Distance/time from Guadalajara as free text.
    route_url, info_url : str
        Optional links, ``""`` when absent.
    municipality : str
        Municipality the town belongs to.  Only the JSON source carries it.
    """

    id: str
    name: str
    latitude: float
    longitude: float
    advisory_text: str = ""
    travel_summary: str = ""
    route_url: str = ""
    info_url: str = ""
    municipality: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SkippedRow:
    """Diagnostic entry for a data row that produced no record."""

    row_number: int
    reason: str
    fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MunicipalityInfo:
    """Road distance and travel time from Guadalajara to a municipality."""

    distance_km: str = "N/A"
    hours: str = "N/A"
    minutes: str = "N/A"

    @property
    def travel_time(self) -> str:
        return f"{self.hours} horas ({self.minutes} minutos)"

    @property
    def travel_summary(self) -> str:
        return f"{self.distance_km} km en carretera, {self.travel_time}"


@dataclass(frozen=True)
class FieldSpec:
    """Declares where a :class:`Record` attribute comes from.

    Parameters
    ----------
    name : str
        Attribute of :class:`Record` filled by this column.
    index : int
        Zero-based position of the column in a data row.
    parser : callable
        Converts the raw field text to the attribute value.  It may raise
        :class:`RowRejected` to discard the row.
    required : bool
        When ``True`` a missing column rejects the row; otherwise the
        attribute falls back to ``""``.
    """

    name: str
    index: int
    parser: Callable[[str], Any]
    required: bool = False


def as_text(value: str) -> str:
    return value.strip()


def as_raw(value: str) -> str:
    return value


def as_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise RowRejected("empty name")
    return name


def as_coordinate(value: str) -> float:
    """Parse a coordinate, rejecting anything that is not a finite number."""
    text = value.strip()
    if not NUMBER_RE.fullmatch(text):
        raise RowRejected(f"non-numeric coordinate {value!r}")
    number = float(text)
    if not math.isfinite(number):
        raise RowRejected(f"non-finite coordinate {value!r}")
    return number


def as_advisory(value: str) -> str:
    # No ellipsis is appended.
    return value.strip()[:ADVISORY_MAX_LENGTH]


#: Column layout of the "Pueblos Mágicos" spreadsheet export.
RECORD_SCHEMA: Tuple[FieldSpec, ...] = (
    FieldSpec("id", 0, as_raw),
    FieldSpec("name", 1, as_name, required=True),
    FieldSpec("latitude", 2, as_coordinate, required=True),
    FieldSpec("longitude", 3, as_coordinate, required=True),
    FieldSpec("advisory_text", 4, as_advisory),
    FieldSpec("travel_summary", 5, as_text),
    FieldSpec("route_url", 6, as_text),
    FieldSpec("info_url", 7, as_text),
)


def build_record(values: Dict[str, Any]) -> Record:
    """Create a :class:`Record` from already-parsed attribute values.

    Unknown keys are ignored and missing optional attributes default to an
    empty string.
    """
    known = {f.name for f in fields(Record)}
    return Record(**{k: v for k, v in values.items() if k in known})


def records_to_frame(records: Iterable[Record]) -> pd.DataFrame:
    """Return a DataFrame with one row per record and one column per field.

    The column order follows :class:`Record` even when ``records`` is empty
    so that downstream code can rely on the columns being present.
    """
    columns: List[str] = [f.name for f in fields(Record)]
    rows = [r.to_dict() for r in records]
    return pd.DataFrame(rows, columns=columns)


def bounds_of(records: Iterable[Record]) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
    """South-west and north-east corners enclosing ``records``.

    Returns ``None`` when there are no records.
    """
    df = records_to_frame(records)
    if df.empty:
        return None
    return (
        (float(df["latitude"].min()), float(df["longitude"].min())),
        (float(df["latitude"].max()), float(df["longitude"].max())),
    )


__all__ = [
    "ADVISORY_MAX_LENGTH",
    "MIN_FIELDS",
    "InvalidInput",
    "RowRejected",
    "Record",
    "SkippedRow",
    "MunicipalityInfo",
    "FieldSpec",
    "RECORD_SCHEMA",
    "as_text",
    "as_name",
    "as_coordinate",
    "as_advisory",
    "build_record",
    "records_to_frame",
    "bounds_of",
]
