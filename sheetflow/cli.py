"""Typer based command line entry points for sheetflow."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from .config import ExportOptions, ImportOptions, build_options, load_export_options, load_import_options
from .errors import SheetflowError
from .excel_reader import ExcelImporter, read_table
from .excel_writer import ExcelExporter
from .utils.log import get_logger, set_level

app = typer.Typer(help="Map records onto spreadsheets and spreadsheets back onto records.")
logger = get_logger("cli")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    try:
        set_level(log_level)
    except ValueError as exc:
        raise typer.BadParameter(f"Unknown log level: {log_level}") from exc


def _split_columns(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _jsonable(value: Any) -> Any:
    """Stringify mapping keys (header cells may hold dates or numbers)."""

    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


@app.command("export")
def export_command(
    source: Path = typer.Argument(..., help="CSV, JSON (list of objects) or workbook holding the records."),
    out: Path = typer.Option(Path("."), "--out", help="Directory receiving the exported file."),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML file with export options."),
    columns: Optional[str] = typer.Option(
        None, "--columns", help="Comma separated column shorthand, e.g. 'name,amount:decimal:Amount'."
    ),
    sheet: Optional[str] = typer.Option(None, "--sheet", help="Sheet to read when SOURCE is a workbook."),
    file_name: Optional[str] = typer.Option(None, "--file-name", help="Output file name."),
    fmt: Optional[str] = typer.Option(None, "--format", help="Output format: Xlsx, Html or Csv."),
) -> None:
    """Export records from SOURCE into a spreadsheet file."""

    overrides: Dict[str, Any] = {"save_path": out, "as_attachment": False}
    if columns:
        overrides["columns"] = _split_columns(columns)
    if file_name:
        overrides["file_name"] = file_name
    if fmt:
        overrides["format"] = fmt

    try:
        options = (
            load_export_options(config, **overrides)
            if config
            else build_options(ExportOptions, **overrides)
        )
        frame = read_table(source, sheet)
        output = ExcelExporter(options).export(frame)
    except (SheetflowError, FileNotFoundError, ValueError) as exc:
        logger.error("Export failed", extra={"error": str(exc)})
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(str(output))


@app.command("import")
def import_command(
    file: Path = typer.Argument(..., help="Spreadsheet file to import."),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML file with import options."),
    keys: Optional[bool] = typer.Option(None, "--keys/--no-keys", help="Use the header row as record keys."),
    header_offset: Optional[int] = typer.Option(
        None, "--header-offset", min=0, help="Rows to discard before the header row."
    ),
    sheet: Optional[str] = typer.Option(None, "--sheet", help="Only import this sheet."),
    by_name: bool = typer.Option(False, "--by-name", help="Index sheets by name instead of position."),
) -> None:
    """Import FILE and print its records as JSON."""

    overrides: Dict[str, Any] = {}
    if keys is not None:
        overrides["set_first_record_as_keys"] = keys
    if header_offset is not None:
        overrides["header_offset"] = header_offset
    if sheet:
        overrides["get_only_sheet"] = sheet
    if by_name:
        overrides["set_index_sheet_by_name"] = True

    try:
        options = (
            load_import_options(config, **overrides)
            if config
            else build_options(ImportOptions, **overrides)
        )
        records = ExcelImporter(options).read(file)
    except (SheetflowError, FileNotFoundError, ValueError) as exc:
        logger.error("Import failed", extra={"error": str(exc)})
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(json.dumps(_jsonable(records), ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    app()
