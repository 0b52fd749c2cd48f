"""Excel export: grid layout engine and workbook coordinator."""

# Module responsibilities:
# - Lay records out on a worksheet: one header row, one row per record, aligned column ordinals.
# - Write free-form title/footer row blocks around the table, threading the row cursor explicitly.
# - Build single or multi sheet workbooks from options and emit them as files or attachment bytes.

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd
from openpyxl import Workbook
from openpyxl.worksheet.properties import PageSetupProperties
from openpyxl.worksheet.worksheet import Worksheet

from .addressing import cell_ref, column_letters, range_ref
from .cells import CellResolver
from .config import ExportOptions, build_options
from .errors import ConfigurationError, UnsupportedFormatError
from .formatting import ensure_formatter
from .mapping import columns_from_record, resolve_columns, visible_columns
from .records import DefaultAccessor, RecordAccessor, iter_records
from .schema import CellValue, ColumnDescriptor
from .styles import apply_style, set_wrap
from .utils.log import get_logger
from .utils.paths import DEFAULT_FORMAT, prepare_output_path, resolve_file_name

logger = get_logger("excel_writer")

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
AUTO_SIZE_MIN_WIDTH = 8
AUTO_SIZE_MAX_WIDTH = 60

_CELL_TYPES = (str, int, float, bool, Decimal, datetime, date, time, timedelta)


def _cell_safe(value: Any) -> Any:
    """Coerce values openpyxl cannot store (NaN, NA, containers) into cell values."""

    if value is None or isinstance(value, _CELL_TYPES):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    # numpy scalars coming out of DataFrames.
    if pd.api.types.is_number(value) or pd.api.types.is_bool(value):
        return value.item() if hasattr(value, "item") else value
    if isinstance(value, (list, tuple, set)):
        return "; ".join(str(item) for item in value)
    return str(value)


def _display_width(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, float):
        return len(f"{value:.2f}")
    return max((len(line) for line in str(value).splitlines()), default=0)


def write_rows(
    worksheet: Worksheet,
    rows: Sequence[Sequence[Any]],
    start_col: int,
    start_row: int,
    style: Optional[Mapping[str, Any]] = None,
) -> int:
    """Write free-form rows (titles, footers) starting at ``start_row``.

    Items are plain values or mappings with ``value`` plus optional ``style``
    and ``colspan`` (cells merged to the right).

    Returns:
        The last row written, or ``start_row - 1`` when ``rows`` is empty.
    """

    row = start_row - 1
    for offset, items in enumerate(rows):
        row = start_row + offset
        column = start_col
        for item in items:
            cell_style = style
            span = 1
            value = item
            if isinstance(item, Mapping):
                value = item.get("value")
                span = max(int(item.get("colspan", 1)), 1)
                cell_style = item.get("style", style)
            worksheet.cell(row=row, column=column, value=_cell_safe(value))
            ref = cell_ref(column, row)
            if span > 1:
                ref = range_ref(column, column + span - 1, row)
                worksheet.merge_cells(ref)
            apply_style(worksheet, ref, cell_style)
            column += span
    return row


def apply_page_setup(worksheet: Worksheet, *, portrait: bool = True, fit_to_page: bool = False) -> None:
    worksheet.page_setup.orientation = (
        worksheet.ORIENTATION_PORTRAIT if portrait else worksheet.ORIENTATION_LANDSCAPE
    )
    if fit_to_page:
        worksheet.sheet_properties.pageSetUpPr = PageSetupProperties(fitToPage=True)


class GridLayout:
    """Map records onto one worksheet.

    The header row and every body row enumerate the same visible descriptor
    list, so descriptor *i* always lands in column *i*.
    """

    def __init__(
        self,
        worksheet: Worksheet,
        resolver: CellResolver,
        *,
        set_first_title: bool = True,
        freeze_header: bool = True,
        auto_filter: bool = True,
        header_style: Optional[Mapping[str, Any]] = None,
        header_height: Optional[float] = None,
        body_style: Optional[Mapping[str, Any]] = None,
        accessor: Optional[RecordAccessor] = None,
    ) -> None:
        self.worksheet = worksheet
        self.resolver = resolver
        self.set_first_title = set_first_title
        self.freeze_header = freeze_header
        self.auto_filter = auto_filter
        self.header_style = header_style
        self.header_height = header_height
        self.body_style = body_style
        self.accessor = accessor or DefaultAccessor()
        self._widths: Dict[str, int] = {}

    @classmethod
    def from_options(
        cls,
        worksheet: Worksheet,
        resolver: CellResolver,
        options: ExportOptions,
        accessor: Optional[RecordAccessor] = None,
    ) -> "GridLayout":
        return cls(
            worksheet,
            resolver,
            set_first_title=options.set_first_title,
            freeze_header=options.freeze_header,
            auto_filter=options.auto_filter,
            header_style=options.header_style,
            header_height=options.header_height,
            body_style=options.body_style,
            accessor=accessor,
        )

    def layout(
        self,
        records: Optional[Iterable[Any]],
        descriptors: Sequence[ColumnDescriptor],
        headers: Optional[Mapping[str, Any]] = None,
        start_row: int = 1,
    ) -> int:
        """Write the header and one row per record starting at ``start_row``.

        The record source is drained; a drained source writes nothing.

        Returns:
            The last row written, or ``start_row - 1`` when nothing was written.
        """

        headers = headers or {}
        columns = visible_columns(descriptors)
        derive = not descriptors
        row = start_row
        has_header = False

        for record in iter_records(records):
            if derive and not columns:
                columns = columns_from_record(record)
            if not columns:
                continue
            if self.set_first_title and not has_header:
                self._write_header(record, columns, headers, row)
                has_header = True
                row += 1
            self._write_body(record, columns, row)
            row += 1

        self._apply_auto_size()
        logger.info(
            "Sheet laid out",
            extra={
                "sheet": self.worksheet.title,
                "start_row": start_row,
                "last_row": row - 1,
                "columns": len(columns),
            },
        )
        return row - 1

    def _header_label(self, record: Any, descriptor: ColumnDescriptor, headers: Mapping[str, Any]) -> Any:
        if descriptor.header is not None:
            return descriptor.header
        if descriptor.attribute is None:
            return ""
        if descriptor.attribute in headers:
            return headers[descriptor.attribute]
        return self.accessor.get_label(record, descriptor.attribute)

    def _write_header(
        self,
        record: Any,
        columns: Sequence[ColumnDescriptor],
        headers: Mapping[str, Any],
        row: int,
    ) -> None:
        ws = self.worksheet
        overrides: List[tuple[str, Mapping[str, Any]]] = []
        for ordinal, descriptor in enumerate(columns, start=1):
            letter = column_letters(ordinal)
            label = self._header_label(record, descriptor, headers)
            cell = ws.cell(row=row, column=ordinal, value=_cell_safe(label))

            if descriptor.width is not None:
                ws.column_dimensions[letter].width = descriptor.width
            elif descriptor.auto_size:
                self._track_width(letter, label)
            set_wrap(cell, True)
            if descriptor.header_style:
                overrides.append((cell.coordinate, descriptor.header_style))

        header_range = range_ref(1, len(columns), row)
        apply_style(ws, header_range, self.header_style)
        for coordinate, style in overrides:
            apply_style(ws, coordinate, style)
        if self.freeze_header:
            ws.freeze_panes = ws.cell(row=row + 1, column=1)
        if self.auto_filter:
            ws.auto_filter.ref = header_range
        if self.header_height:
            ws.row_dimensions[row].height = self.header_height

    def _write_body(self, record: Any, columns: Sequence[ColumnDescriptor], row: int) -> None:
        ws = self.worksheet
        for ordinal, descriptor in enumerate(columns, start=1):
            resolved = self.resolver.resolve(record, row, descriptor)
            cell = ws.cell(row=row, column=ordinal)
            self._write_cell(cell, resolved)
            if descriptor.wrap is not None:
                set_wrap(cell, descriptor.wrap)
            if descriptor.width is None and descriptor.auto_size:
                self._track_width(column_letters(ordinal), resolved.value)
        apply_style(ws, range_ref(1, len(columns), row), self.body_style)

    @staticmethod
    def _write_cell(cell: Any, resolved: CellValue) -> None:
        if resolved.explicit_string:
            cell.value = str(resolved.value)
            cell.data_type = "s"
        else:
            cell.value = _cell_safe(resolved.value)
        if resolved.number_format:
            cell.number_format = resolved.number_format

    def _track_width(self, letter: str, value: Any) -> None:
        width = _display_width(value)
        if width > self._widths.get(letter, 0):
            self._widths[letter] = width

    def _apply_auto_size(self) -> None:
        for letter, width in self._widths.items():
            self.worksheet.column_dimensions[letter].width = min(
                max(width + 2, AUTO_SIZE_MIN_WIDTH), AUTO_SIZE_MAX_WIDTH
            )
        self._widths.clear()


def write_workbook(workbook: Workbook, target: Union[Path, BytesIO], fmt: Optional[str] = None) -> None:
    """Serialize ``workbook`` in ``fmt``; CSV and HTML carry the first sheet only."""

    fmt = fmt or DEFAULT_FORMAT
    if fmt == "Xlsx":
        workbook.save(target)
        return
    if fmt in ("Csv", "Html"):
        frame = pd.DataFrame(list(workbook.worksheets[0].values))
        if fmt == "Csv":
            payload = frame.to_csv(index=False, header=False)
        else:
            payload = frame.to_html(index=False, header=False, na_rep="")
        data = payload.encode("utf-8")
        if isinstance(target, BytesIO):
            target.write(data)
        else:
            Path(target).write_bytes(data)
        return
    raise UnsupportedFormatError(f"No writer available for format {fmt!r}")


class ExcelExporter:
    """Build and emit workbooks from record sources.

    Args:
        options: Validated export options.
        formatter: Formatting service for named column formats; a default
            :class:`~sheetflow.formatting.Formatter` is created when omitted.
        accessor: Record accessor used for header labels and derived columns.
    """

    def __init__(
        self,
        options: Optional[ExportOptions] = None,
        formatter: Any = None,
        accessor: Optional[RecordAccessor] = None,
    ) -> None:
        self.options = options or ExportOptions()
        self.formatter = ensure_formatter(
            formatter,
            decimal_separator=self.options.decimal_separator,
            thousand_separator=self.options.thousand_separator,
        )
        self.accessor = accessor or DefaultAccessor()
        self.resolver = CellResolver(
            self.formatter,
            date_format=self.options.date_format,
            datetime_format=self.options.datetime_format,
            widget=self,
        )
        self.last_row = 0

    def _layout(self, worksheet: Worksheet) -> GridLayout:
        return GridLayout.from_options(worksheet, self.resolver, self.options, self.accessor)

    def _page_setup(self, worksheet: Worksheet) -> None:
        apply_page_setup(
            worksheet,
            portrait=self.options.page_orientation_portrait,
            fit_to_page=self.options.page_fit_to_page,
        )

    def _apply_properties(self, workbook: Workbook) -> None:
        for key, value in self.options.properties.items():
            if not hasattr(workbook.properties, key):
                raise ConfigurationError(f"Unknown workbook property: {key}")
            setattr(workbook.properties, key, value)

    def build(self, records: Any) -> Workbook:
        """Lay ``records`` out into a new workbook.

        In multi sheet mode ``records`` maps sheet titles to record sources.

        Raises:
            ConfigurationError: When no records are given or a column entry is invalid.
        """

        if records is None:
            raise ConfigurationError("Records to export must be set")
        workbook = Workbook()
        self._apply_properties(workbook)
        if self.options.is_multiple_sheet:
            self._build_sheets(workbook, records)
        else:
            self._build_single(workbook, records)
        return workbook

    def _build_single(self, workbook: Workbook, records: Any) -> None:
        options = self.options
        descriptors = resolve_columns(options.columns)
        worksheet = workbook.active
        self._page_setup(worksheet)

        last_row = write_rows(
            worksheet, options.title_rows, 1, options.title_start_row or 1, options.rows_style
        )
        table_start = options.table_start_row or last_row + 1
        last_row = self._layout(worksheet).layout(records, descriptors, options.headers, table_start)
        last_row = write_rows(worksheet, options.footer_rows, 1, last_row + 1, options.rows_style)
        self.last_row = last_row

    def _build_sheets(self, workbook: Workbook, records: Any) -> None:
        if not isinstance(records, Mapping):
            raise ConfigurationError("Multiple sheet export expects a mapping of sheet title to records")
        plan = [
            (str(title), source, resolve_columns(self.options.sheet_columns(title)))
            for title, source in records.items()
        ]
        workbook.remove(workbook.active)
        for title, source, descriptors in plan:
            worksheet = workbook.create_sheet(title=title)
            self._page_setup(worksheet)
            self.last_row = self._layout(worksheet).layout(
                source, descriptors, self.options.sheet_headers(title), 1
            )
        if not workbook.worksheets:
            workbook.create_sheet()

    @property
    def file_name(self) -> str:
        return resolve_file_name(self.options.file_name, self.options.format)

    def attachment_headers(self) -> Dict[str, str]:
        """HTTP headers for delivering the export as a download."""

        return {
            "Content-Type": XLSX_MIME_TYPE,
            "Content-Disposition": f'attachment;filename="{self.file_name}"',
            "Cache-Control": "max-age=0",
        }

    def save(self, workbook: Workbook) -> Union[Path, bytes]:
        """Write to ``save_path/file_name`` or return the file bytes when no path is set.

        Raises:
            ConfigurationError: When ``as_attachment`` is off and no save path is set.
        """

        fmt = self.options.format or DEFAULT_FORMAT
        if self.options.save_path is None and not self.options.as_attachment:
            raise ConfigurationError("save_path must be set when not exporting as attachment")
        if self.options.save_path is not None:
            out_path = prepare_output_path(Path(self.options.save_path), self.file_name)
            write_workbook(workbook, out_path, fmt)
            logger.info("Workbook written", extra={"output": str(out_path), "format": fmt})
            return out_path
        buffer = BytesIO()
        write_workbook(workbook, buffer, fmt)
        logger.info("Workbook rendered for download", extra={"file": self.file_name, "format": fmt})
        return buffer.getvalue()

    def export(self, records: Any) -> Union[Path, bytes]:
        return self.save(self.build(records))


def export_excel(records: Any, *, formatter: Any = None, **options: Any) -> Union[Path, bytes]:
    """Export ``records`` with keyword options; see :class:`ExportOptions`."""

    return ExcelExporter(build_options(ExportOptions, **options), formatter=formatter).export(records)
