"""Tabular export: escaping, row flattening, serialization and emitting.

Modules:
- escape: cell escapers per dialect family
- dialects: declarative column tables and the dialect registry
- flatten: nested records -> flat rows
- serialize: rows -> delimited text, JSON export
- emit: download and clipboard hand-off
- service: user-action level export/copy with outcome notices
"""

from .dialects import DIALECTS, Dialect, Expansion, UnknownDialectError, get_dialect
from .emit import ClipboardError, DirectoryDownloadHost, DownloadError, copy_to_clipboard, download
from .escape import escape_csv_field, escape_tsv_field, raw_field, text_of, unescape_csv_field
from .flatten import flatten
from .serialize import read_table, render, serialize, to_json
from .service import ExportOutcome, ExportService

__all__ = [
    "DIALECTS",
    "Dialect",
    "Expansion",
    "UnknownDialectError",
    "get_dialect",
    "ClipboardError",
    "DirectoryDownloadHost",
    "DownloadError",
    "copy_to_clipboard",
    "download",
    "escape_csv_field",
    "escape_tsv_field",
    "raw_field",
    "text_of",
    "unescape_csv_field",
    "flatten",
    "read_table",
    "render",
    "serialize",
    "to_json",
    "ExportOutcome",
    "ExportService",
]
