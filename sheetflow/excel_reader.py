"""Excel import: raw grid reading and per-sheet record reshaping."""

# Module responsibilities:
# - Detect the workbook format from file contents and load every sheet as a raw grid.
# - Reshape grids into keyed records and apply the record index filters per sheet.
# - Fan imports out over multiple sheets and multiple files.

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from openpyxl import load_workbook

from .addressing import column_letters
from .config import ImportOptions, build_options
from .errors import UnsupportedFormatError
from .reshape import exclude, include_only, reshape
from .schema import SheetData
from .utils.log import get_logger

logger = get_logger("excel_reader")

_ZIP_MAGIC = b"PK\x03\x04"
_OLE_MAGIC = b"\xd0\xcf\x11\xe0"


def detect_format(path: Path) -> str:
    """Guess the spreadsheet format from the leading bytes of ``path``."""

    with path.open("rb") as fh:
        head = fh.read(512)
    if head.startswith(_ZIP_MAGIC):
        return "Xlsx"
    if head.startswith(_OLE_MAGIC):
        return "Xls"
    if head.lstrip().startswith(b"<"):
        return "Html"
    return "Csv"


def _grid_from_rows(rows: List[tuple]) -> SheetData:
    width = max((len(row) for row in rows), default=0)
    letters = [column_letters(ordinal) for ordinal in range(1, width + 1)]
    grid: SheetData = []
    for row in rows:
        cells = list(row) + [None] * (width - len(row))
        grid.append({letter: ("" if value is None else value) for letter, value in zip(letters, cells)})
    return grid


def _grid_from_frame(frame: pd.DataFrame) -> SheetData:
    frame = frame.astype(object).where(frame.notna(), None)
    return _grid_from_rows([tuple(row) for row in frame.itertuples(index=False, name=None)])


def _read_xlsx(path: Path) -> Dict[str, SheetData]:
    workbook = load_workbook(path, data_only=True, read_only=True)
    try:
        return {
            worksheet.title: _grid_from_rows(list(worksheet.iter_rows(values_only=True)))
            for worksheet in workbook.worksheets
        }
    finally:
        workbook.close()


def read_workbook(path: Path, fmt: Optional[str] = None) -> Dict[str, SheetData]:
    """Load every sheet of ``path`` as a raw grid, in workbook order.

    Each row maps column letters to raw values; empty cells are ``""``.

    Raises:
        FileNotFoundError: When the file does not exist.
        UnsupportedFormatError: When no reader exists for ``fmt``.
    """

    if not path.exists():
        raise FileNotFoundError(f"Source workbook not found: {path}")
    fmt = fmt or detect_format(path)
    logger.info("Reading workbook", extra={"path": str(path), "format": fmt})

    if fmt == "Xlsx":
        return _read_xlsx(path)
    if fmt == "Xls":
        frames = pd.read_excel(path, sheet_name=None, header=None)
        return {str(title): _grid_from_frame(frame) for title, frame in frames.items()}
    if fmt == "Csv":
        frame = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
        return {path.stem: _grid_from_frame(frame)}
    if fmt == "Html":
        frames = pd.read_html(path, header=None)
        return {f"Sheet{idx}": _grid_from_frame(frame) for idx, frame in enumerate(frames, start=1)}
    raise UnsupportedFormatError(f"No reader available for format {fmt!r}")


class ExcelImporter:
    """Read workbooks into records according to :class:`ImportOptions`."""

    def __init__(self, options: Optional[ImportOptions] = None) -> None:
        self.options = options or ImportOptions()

    @staticmethod
    def _indices_for(option: Any, key: Any) -> List[Any]:
        if isinstance(option, Mapping):
            found = option.get(key)
            if found is None:
                found = option.get(str(key))
            return list(found or [])
        return list(option or [])

    def _shape(self, grid: SheetData, key: Any) -> List[Any]:
        opts = self.options
        records = reshape(grid, opts.set_first_record_as_keys, opts.header_offset)
        only = self._indices_for(opts.get_only_record_by_index, key)
        leave = self._indices_for(opts.leave_record_by_index, key)
        if not only and not leave:
            return records
        indexed: Dict[Any, Any] = dict(enumerate(records))
        if only:
            indexed = include_only(indexed, only)
        if leave:
            indexed = exclude(indexed, leave)
        return list(indexed.values())

    def read(self, file_name: Union[str, Path]) -> Union[List[Any], Dict[Any, List[Any]]]:
        """Import one file.

        A single sheet workbook yields its record list. With several sheets the
        result maps sheet name (``set_index_sheet_by_name``) or position to
        records, unless ``get_only_sheet`` selects one sheet, whose records are
        returned directly (an empty dict when the sheet does not exist).
        """

        path = Path(file_name)
        sheets = read_workbook(path, self.options.format)
        if len(sheets) == 1:
            grid = next(iter(sheets.values()))
            return self._shape(grid, 0)

        only_sheet = self.options.get_only_sheet
        if only_sheet is not None:
            if only_sheet not in sheets:
                logger.warning(
                    "Requested sheet not found", extra={"path": str(path), "sheet": only_sheet}
                )
                return {}
            return self._shape(sheets[only_sheet], only_sheet)

        result: Dict[Any, List[Any]] = {}
        for index, (title, grid) in enumerate(sheets.items()):
            key = title if self.options.set_index_sheet_by_name else index
            result[key] = self._shape(grid, key)
        logger.info("Workbook imported", extra={"path": str(path), "sheets": list(result)})
        return result

    def read_many(self, files: Mapping[Any, Union[str, Path]]) -> Dict[Any, Any]:
        return {key: self.read(file_name) for key, file_name in files.items()}


def import_excel(
    file_name: Union[str, Path, Mapping[Any, Union[str, Path]]], **options: Any
) -> Any:
    """Import one file, or a mapping of name -> file; see :class:`ImportOptions`."""

    importer = ExcelImporter(build_options(ImportOptions, **options))
    if isinstance(file_name, Mapping):
        return importer.read_many(file_name)
    return importer.read(file_name)


def read_table(path: Path, sheet: Union[str, int, None] = None) -> pd.DataFrame:
    """Load a tabular record source (CSV, JSON records or a workbook sheet) into a DataFrame.

    Raises:
        FileNotFoundError: When the file does not exist.
        ValueError: When pandas fails to parse the file or sheet requested.
    """

    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")

    logger.info("Reading record source", extra={"path": str(path), "sheet": sheet})
    suffix = path.suffix.lower()
    if suffix == ".csv":
        frame = pd.read_csv(path)
    elif suffix == ".json":
        frame = pd.read_json(path, orient="records", dtype=False)
    else:
        frame = pd.read_excel(path, sheet_name=sheet if sheet is not None else 0)

    logger.info(
        "Record source loaded",
        extra={"rows": len(frame.index), "columns": [str(col) for col in frame.columns]},
    )
    return frame
