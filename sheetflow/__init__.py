"""`sheetflow` maps records onto spreadsheet worksheets and worksheets back onto records."""

# Module responsibilities:
# - Re-export the export/import entry points and the column layout types so consumers have a stable API surface.
# - Provide the package version.

from __future__ import annotations

from .addressing import column_letters
from .cells import CellResolver
from .config import ExportOptions, ImportOptions, load_export_options, load_import_options
from .errors import (
    CellResolutionError,
    ConfigurationError,
    DateParseError,
    SheetflowError,
    UnsupportedFormatError,
)
from .excel_reader import ExcelImporter, import_excel, read_workbook
from .excel_writer import ExcelExporter, GridLayout, export_excel, write_rows
from .formatting import Formatter
from .mapping import resolve_columns
from .reshape import exclude, include_only, reshape
from .schema import CellValue, ColumnDescriptor, FormatKind, FormatSpec

__all__ = [
    "column_letters",
    "CellResolver",
    "ExportOptions",
    "ImportOptions",
    "load_export_options",
    "load_import_options",
    "SheetflowError",
    "ConfigurationError",
    "CellResolutionError",
    "DateParseError",
    "UnsupportedFormatError",
    "ExcelImporter",
    "import_excel",
    "read_workbook",
    "ExcelExporter",
    "GridLayout",
    "export_excel",
    "write_rows",
    "Formatter",
    "resolve_columns",
    "reshape",
    "include_only",
    "exclude",
    "CellValue",
    "ColumnDescriptor",
    "FormatKind",
    "FormatSpec",
]

__version__ = "0.1.0"
