"""
CSV Parser Module
=================

This module turns the CSV export of the "Pueblos Mágicos" spreadsheet into
a list of :class:`~jalisco_turismo.records.Record`.  The parser is written
by hand rather than delegated to :mod:`csv` or :func:`pandas.read_csv`
because the export is consumed line by line with a deliberately tolerant
policy:

* blank lines are ignored and the first remaining line is always the
  header, whatever it contains;
* a field wrapped in double quotes may contain commas, and ``""`` inside a
  quoted field stands for one literal quote;
* unbalanced quotes never raise; the splitter returns what it has;
* a row that is too short, has no name or carries non-numeric coordinates
  is skipped without affecting the rows after it.

Example
-------
>>> from jalisco_turismo.csv_parser import parse_csv
>>> header = "id,nombre,lat,lng,consejos,distancia,ruta,link"
>>> row = "1,Tapalpa,19.95,-103.77,Zona segura,2h,http://r,http://i"
>>> text = header + "\\n" + row
>>> [r.name for r in parse_csv(text)]
['Tapalpa']

Functions
---------
split_rows(raw_text: str) -> list[str]
    Split raw text into non-blank, trimmed rows.
split_fields(row: str, delimiter: str = ",") -> list[str]
    Quote-aware field splitting of one row.
normalize_record(fields, schema=RECORD_SCHEMA) -> Record
    Map positional fields to a record or raise ``RowRejected``.
parse_csv(raw_text: str) -> list[Record]
    Full pipeline, lenient.
parse_csv_report(raw_text: str) -> ParseReport
    Same pipeline, also reporting why each skipped row was rejected.
read_csv_file(file_path: str, encoding: str | None = None) -> list[Record]
    Decode a local export and parse it.

"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .records import (
    MIN_FIELDS,
    RECORD_SCHEMA,
    FieldSpec,
    InvalidInput,
    Record,
    RowRejected,
    SkippedRow,
    build_record,
)

logger = logging.getLogger(__name__)

QUOTE = '"'


@dataclass(frozen=True)
class ParseReport:
    """Outcome of a diagnostic parse pass.

    Attributes
    ----------
    records : tuple of Record
        Valid records in source order.
    skipped : tuple of SkippedRow
        One entry per data row that produced no record.
    """

    records: Tuple[Record, ...] = ()
    skipped: Tuple[SkippedRow, ...] = ()


def _detect_encoding(sample: bytes) -> Optional[str]:
    """Guess the encoding of a byte sample.

    Only a handful of encodings are tried, in order of preference.  The
    spreadsheet export is UTF-8; the Latin encodings cover copies saved
    from desktop spreadsheet software.
    """
    candidate_encodings = ["utf-8", "windows-1252", "ISO-8859-1"]
    for enc in candidate_encodings:
        try:
            sample.decode(enc)
        except UnicodeDecodeError:
            continue
        else:
            return enc
    return None


def split_rows(raw_text: str) -> List[str]:
    """Split ``raw_text`` into rows, keeping the header.

    Each row is trimmed (which also removes the ``\\r`` of CRLF exports)
    and blank rows are dropped.  Empty input yields an empty list.
    """
    rows = []
    for line in raw_text.split("\n"):
        line = line.strip()
        if line:
            rows.append(line)
    return rows


def split_fields(row: str, delimiter: str = ",") -> List[str]:
    """Split one row into its fields, honouring double quotes.

    Parameters
    ----------
    row : str
        A single line of CSV text.
    delimiter : str, optional
        Single character separating fields.  Defaults to a comma.

    Returns
    -------
    list of str
        The unquoted field values.  There is always at least one field;
        a trailing delimiter produces a trailing empty field.

    Notes
    -----
    A quote toggles the *inside quotes* state, except that two consecutive
    quotes inside a quoted field produce one literal quote.  The delimiter
    is an ordinary character while inside quotes.  When the row ends inside
    an open quote the accumulated text is emitted as the last field.
    """
    if len(delimiter) != 1:
        raise ValueError(f"Delimiter must be a single character, got {delimiter!r}")

    result: List[str] = []
    current: List[str] = []
    inside_quotes = False
    i = 0
    length = len(row)
    while i < length:
        char = row[i]
        if char == QUOTE:
            if inside_quotes and i + 1 < length and row[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 1
            else:
                inside_quotes = not inside_quotes
        elif char == delimiter and not inside_quotes:
            result.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    result.append("".join(current))
    return result


def normalize_record(fields: Sequence[str], schema: Sequence[FieldSpec] = RECORD_SCHEMA) -> Record:
    """Map a row's positional fields to a :class:`Record`.

    Raises
    ------
    RowRejected
        If the row has fewer than :data:`~jalisco_turismo.records.MIN_FIELDS`
        fields, a required column is missing, the name is empty or a
        coordinate is not a finite number.
    """
    if len(fields) < MIN_FIELDS:
        raise RowRejected(f"expected at least {MIN_FIELDS} fields, got {len(fields)}")

    values: Dict[str, Any] = {}
    for spec in schema:
        if spec.index < len(fields):
            values[spec.name] = spec.parser(fields[spec.index])
        elif spec.required:
            raise RowRejected(f"missing required column {spec.name!r}")
        else:
            values[spec.name] = ""
    return build_record(values)


def _run(raw_text: Any, delimiter: str, schema: Sequence[FieldSpec]) -> ParseReport:
    if not isinstance(raw_text, str):
        raise InvalidInput(f"CSV input must be text, got {type(raw_text).__name__}")

    records: List[Record] = []
    skipped: List[SkippedRow] = []
    rows = split_rows(raw_text)
    # Row 0 is the header whatever it contains.
    for row_number, row in enumerate(rows[1:], start=1):
        fields = split_fields(row, delimiter)
        try:
            records.append(normalize_record(fields, schema))
        except RowRejected as exc:
            logger.debug("Skipping row %d: %s", row_number, exc)
            skipped.append(SkippedRow(row_number, str(exc), tuple(fields)))

    logger.debug("Parsed %d records, skipped %d rows", len(records), len(skipped))
    return ParseReport(tuple(records), tuple(skipped))


def parse_csv(raw_text: str, *, delimiter: str = ",",
              schema: Sequence[FieldSpec] = RECORD_SCHEMA) -> List[Record]:
    """Parse the spreadsheet export into records.

    Parameters
    ----------
    raw_text : str
        The full CSV text, header included.
    delimiter : str, optional
        Field separator.  Defaults to ``","``.
    schema : sequence of FieldSpec, optional
        Column layout.  Defaults to
        :data:`~jalisco_turismo.records.RECORD_SCHEMA`.

    Returns
    -------
    list of Record
        Valid records in row order.  An input without valid rows gives an
        empty list.

    Raises
    ------
    InvalidInput
        If ``raw_text`` is not a string.
    """
    return list(_run(raw_text, delimiter, schema).records)


def parse_csv_report(raw_text: str, *, delimiter: str = ",",
                     schema: Sequence[FieldSpec] = RECORD_SCHEMA) -> ParseReport:
    """Like :func:`parse_csv` but also return why rows were skipped."""
    return _run(raw_text, delimiter, schema)


def read_csv_file(file_path: str, *, encoding: Optional[str] = None,
                  delimiter: str = ",") -> List[Record]:
    """Read a local CSV export and parse it.

    Raises
    ------
    FileNotFoundError
        If ``file_path`` does not point to an existing file.
    UnicodeDecodeError
        If the file cannot be decoded with the detected or given encoding.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"CSV file not found: {file_path}")

    with open(file_path, "rb") as f:
        data = f.read()
    if encoding is None:
        encoding = _detect_encoding(data) or "utf-8"
    # utf-8-sig drops the BOM some spreadsheet tools prepend.
    if encoding.lower() == "utf-8":
        encoding = "utf-8-sig"
    text = data.decode(encoding)
    return parse_csv(text, delimiter=delimiter)


__all__ = [
    "ParseReport",
    "split_rows",
    "split_fields",
    "normalize_record",
    "parse_csv",
    "parse_csv_report",
    "read_csv_file",
]
