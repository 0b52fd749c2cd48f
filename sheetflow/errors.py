"""Custom exceptions used across sheetflow."""


class SheetflowError(Exception):
    """Base error for the package."""


class ConfigurationError(SheetflowError):
    """Required export/import inputs are missing or invalid."""


class CellResolutionError(SheetflowError):
    """Raised when a single cell value cannot be resolved."""


class DateParseError(SheetflowError, ValueError):
    """Raised when a value does not parse as a date or date-time."""


class UnsupportedFormatError(SheetflowError):
    """Raised when no reader/writer backend exists for a spreadsheet format."""
