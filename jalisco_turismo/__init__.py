"""Top level package for the jalisco_turismo project.

Parses the "Pueblos Mágicos" data of Jalisco (the CSV export of the shared
spreadsheet or the local JSON files) into immutable records and renders
them, together with the municipality boundaries, as an interactive map.
The parser lives in :mod:`jalisco_turismo.csv_parser`; the HTTP API in
:mod:`jalisco_turismo.main`.
"""

from .csv_parser import ParseReport, parse_csv, parse_csv_report
from .records import InvalidInput, Record, SkippedRow

__version__ = "0.1"

__all__ = [
    "InvalidInput",
    "ParseReport",
    "Record",
    "SkippedRow",
    "parse_csv",
    "parse_csv_report",
]
