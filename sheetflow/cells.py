"""Per-cell value and number format resolution."""

# Module responsibilities:
# - Resolve the display value of one record/column pair (callback, choice list, attribute path).
# - Apply the column format: spreadsheet dates, decimal and text patterns, named formatter output.
# - Contain per-cell failures so a bad record never aborts the sheet.

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional

from openpyxl.styles.numbers import FORMAT_NUMBER, FORMAT_TEXT
from openpyxl.utils.datetime import to_excel

from .errors import CellResolutionError, DateParseError
from .records import get_value, snapshot
from .schema import CellValue, ColumnDescriptor, FormatKind, FormatSpec
from .utils.log import get_logger

logger = get_logger("cells")

SENTINEL = "???"
NULL_DATE = "0000-00-00"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_DATE_FORMAT = "dd/mm/yy"
DEFAULT_DATETIME_FORMAT = "d/m/yy h:mm"
DEFAULT_DECIMAL_PRECISION = 2

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def decimal_pattern(precision: Optional[int] = None) -> str:
    """Number format showing ``precision`` digits after the decimal point."""

    if precision is None or precision < 0:
        precision = DEFAULT_DECIMAL_PRECISION
    if precision == 0:
        return FORMAT_NUMBER
    return "0." + "0" * precision


def parse_timestamp(value: Any) -> datetime:
    """Parse ``YYYY-MM-DD HH:MM:SS`` (or a bare date) as a naive UTC datetime.

    Raises:
        DateParseError: When the value is not a timestamp.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise DateParseError(f"Not a timestamp: {value!r}")
    text = "" if value == NULL_DATE else value
    if len(text) == 10:
        text += " 00:00:00"
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise DateParseError(f"Not a timestamp: {value!r}") from exc


def _coerce_number(value: Any) -> Any:
    if isinstance(value, str) and _NUMERIC_RE.match(value.strip()):
        text = value.strip()
        if text.lstrip("+-").isdigit():
            return int(text)
        return float(text)
    return value


def _lookup_choice(choices: Mapping[Any, Any], raw: Any) -> Any:
    if raw in choices:
        return choices[raw]
    # Keys loaded from configuration files are often strings.
    alternate = str(raw)
    if alternate in choices:
        return choices[alternate]
    if isinstance(raw, str) and raw.lstrip("-").isdigit() and int(raw) in choices:
        return choices[int(raw)]
    return f"{raw}!"


class CellResolver:
    """Resolve cell values for a column descriptor.

    Args:
        formatter: Service exposing ``format(value, name, *options)`` used for
            named formats.
        date_format: Number format applied to ``date`` cells.
        datetime_format: Number format applied to ``date-time`` cells.
        widget: Object handed to value callbacks as their second argument.
    """

    def __init__(
        self,
        formatter: Any,
        *,
        date_format: str = DEFAULT_DATE_FORMAT,
        datetime_format: str = DEFAULT_DATETIME_FORMAT,
        widget: Any = None,
    ) -> None:
        self.formatter = formatter
        self.date_format = date_format
        self.datetime_format = datetime_format
        self.widget = widget

    def resolve(self, record: Any, row: int, descriptor: ColumnDescriptor) -> CellValue:
        """Return the cell payload; failures degrade to the ``???`` sentinel."""

        try:
            return self._resolve(record, row, descriptor)
        except CellResolutionError as exc:
            logger.error(
                "Cell resolution failed: %s",
                exc.__cause__ or exc,
                exc_info=exc,
                extra={
                    "record": snapshot(record),
                    "row": row,
                    "descriptor": descriptor.describe(),
                },
            )
            return CellValue(SENTINEL)

    def _resolve(self, record: Any, row: int, descriptor: ColumnDescriptor) -> CellValue:
        try:
            value = self.raw_value(record, row, descriptor)
            return self.apply_format(value, descriptor.format)
        except Exception as exc:  # noqa: BLE001
            raise CellResolutionError(
                f"Could not resolve column {descriptor.attribute or descriptor.value!r} at row {row}"
            ) from exc

    def raw_value(self, record: Any, row: int, descriptor: ColumnDescriptor) -> Any:
        if descriptor.value is not None:
            if isinstance(descriptor.value, str):
                return get_value(record, descriptor.value)
            return descriptor.value(record, self.widget, row)
        if descriptor.choices is not None:
            raw = get_value(record, descriptor.attribute) if descriptor.attribute else None
            if raw is None or raw == "":
                return ""
            return _lookup_choice(descriptor.choices, raw)
        if descriptor.attribute is not None:
            return get_value(record, descriptor.attribute)
        return None

    def apply_format(self, value: Any, fmt: Optional[FormatSpec]) -> CellValue:
        if fmt is None:
            return CellValue(value)

        if fmt.kind in (FormatKind.DATE, FormatKind.DATETIME):
            if value == NULL_DATE:
                return CellValue("")
            try:
                stamp = parse_timestamp(value)
            except DateParseError:
                logger.debug("Leaving unparseable date untouched", extra={"value": value})
                return CellValue(value)
            pattern = self.date_format if fmt.kind is FormatKind.DATE else self.datetime_format
            return CellValue(to_excel(stamp), number_format=pattern)

        if fmt.kind is FormatKind.DECIMAL:
            value = _coerce_number(value)
            if isinstance(value, Decimal):
                value = float(value)
            return CellValue(value, number_format=decimal_pattern(fmt.precision))

        if fmt.kind is FormatKind.TEXT:
            if isinstance(value, str) and value.startswith("0"):
                return CellValue(value, explicit_string=True)
            return CellValue(value, number_format=FORMAT_TEXT)

        return CellValue(self.formatter.format(value, fmt.name, *fmt.options))
