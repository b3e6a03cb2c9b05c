"""User-supplied occurrence files (CSV, JSON, ZIP).

Public API:
  - parsers: parse_occurrences_csv, parse_occurrences_json,
    parse_occurrences_bytes, parse_occurrences_file, ImportParseError
"""

from gbif_explorer.datasources.imports.parsers import (
    CSV_HEADER_ALIASES,
    ImportParseError,
    normalize_header,
    parse_occurrences_bytes,
    parse_occurrences_csv,
    parse_occurrences_file,
    parse_occurrences_json,
)

__all__ = [
    "CSV_HEADER_ALIASES",
    "ImportParseError",
    "normalize_header",
    "parse_occurrences_bytes",
    "parse_occurrences_csv",
    "parse_occurrences_file",
    "parse_occurrences_json",
]
