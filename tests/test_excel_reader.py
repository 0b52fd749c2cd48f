"""Unit tests for workbook import."""

# Module responsibilities:
# - Round trip records through real xlsx files written by the exporter.
# - Validate sheet selection, per sheet index filters and multi file fan out.
# - Cover CSV grids and format detection.

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
import pytest
from openpyxl import Workbook

from sheetflow import ExcelImporter, export_excel, import_excel, read_workbook
from sheetflow.config import ImportOptions
from sheetflow.excel_reader import detect_format, read_table


def _people_workbook(tmp_path: Path, people: List[Dict[str, Any]]) -> Path:
    return export_excel(
        people,
        columns=["id", "name"],
        title_rows=[["People"]],
        save_path=tmp_path,
        file_name="people",
    )


def _two_sheet_workbook(path: Path) -> Path:
    wb = Workbook()
    first = wb.active
    first.title = "People"
    for row in (["id", "name"], [1, "Ada"], [2, "Linus"], [3, "Grace"]):
        first.append(row)
    second = wb.create_sheet("Totals")
    for row in (["label", "value"], ["count", 3]):
        second.append(row)
    wb.save(path)
    return path


def test_round_trip_through_xlsx(tmp_path: Path, people: List[Dict[str, Any]]) -> None:
    path = _people_workbook(tmp_path, people)

    records = import_excel(path, header_offset=1)

    assert records == [
        {"Id": 1, "Name": "Ada"},
        {"Id": 2, "Name": "Linus"},
        {"Id": 3, "Name": "Grace"},
    ]


def test_plain_export_reads_back_with_defaults(tmp_path: Path, people: List[Dict[str, Any]]) -> None:
    path = export_excel(people, columns=["id", "name"], save_path=tmp_path, file_name="plain")

    records = import_excel(path)

    assert records == [
        {"Id": 1, "Name": "Ada"},
        {"Id": 2, "Name": "Linus"},
        {"Id": 3, "Name": "Grace"},
    ]


def test_read_workbook_grid_uses_column_letters(tmp_path: Path, people: List[Dict[str, Any]]) -> None:
    path = _people_workbook(tmp_path, people)

    sheets = read_workbook(path)

    (grid,) = sheets.values()
    assert grid[0] == {"A": "People", "B": ""}
    assert grid[1] == {"A": "Id", "B": "Name"}
    assert len(grid) == 5


def test_without_keys_rows_are_letter_keyed(tmp_path: Path, people: List[Dict[str, Any]]) -> None:
    path = _people_workbook(tmp_path, people)
    records = import_excel(path, set_first_record_as_keys=False)
    assert records[2] == {"A": 1, "B": "Ada"}


def test_record_filters(tmp_path: Path, people: List[Dict[str, Any]]) -> None:
    path = _people_workbook(tmp_path, people)

    only = import_excel(path, header_offset=1, get_only_record_by_index=[0, 2])
    assert [record["Name"] for record in only] == ["Ada", "Grace"]

    left = import_excel(path, header_offset=1, leave_record_by_index=["1"])
    assert [record["Name"] for record in left] == ["Ada", "Grace"]

    both = import_excel(
        path, header_offset=1, get_only_record_by_index=[0, 1], leave_record_by_index=[0]
    )
    assert [record["Name"] for record in both] == ["Linus"]

    assert import_excel(path, header_offset=1, get_only_record_by_index=["0"]) == []


def test_multiple_sheets_indexed_by_position_and_name(tmp_path: Path) -> None:
    path = _two_sheet_workbook(tmp_path / "book.xlsx")

    by_position = import_excel(path)
    assert list(by_position) == [0, 1]
    assert by_position[1] == [{"label": "count", "value": 3}]

    by_name = import_excel(path, set_index_sheet_by_name=True)
    assert list(by_name) == ["People", "Totals"]
    assert len(by_name["People"]) == 3


def test_only_sheet_and_per_sheet_filters(tmp_path: Path) -> None:
    path = _two_sheet_workbook(tmp_path / "book.xlsx")

    totals = import_excel(path, get_only_sheet="Totals")
    assert totals == [{"label": "count", "value": 3}]
    assert import_excel(path, get_only_sheet="Missing") == {}

    filtered = import_excel(
        path,
        set_index_sheet_by_name=True,
        leave_record_by_index={"People": [0, 1]},
    )
    assert filtered["People"] == [{"id": 3, "name": "Grace"}]
    assert filtered["Totals"] == [{"label": "count", "value": 3}]


def test_multiple_files(tmp_path: Path) -> None:
    first = _two_sheet_workbook(tmp_path / "first.xlsx")
    csv_path = tmp_path / "second.csv"
    csv_path.write_text("code,qty\n007,2\n", encoding="utf-8")

    result = import_excel({"a": first, "b": csv_path}, get_only_sheet="People")

    assert len(result["a"]) == 3
    assert result["b"] == [{"code": "007", "qty": "2"}]


def test_csv_import_keeps_text(tmp_path: Path) -> None:
    path = tmp_path / "codes.csv"
    path.write_text("title,\ncode,qty\n007,\n", encoding="utf-8")

    importer = ExcelImporter(ImportOptions(header_offset=1))

    assert importer.read(path) == [{"code": "007", "qty": ""}]


def test_detect_format(tmp_path: Path, people: List[Dict[str, Any]]) -> None:
    csv_path = tmp_path / "data.csv"
    csv_path.write_text("a,b\n", encoding="utf-8")
    html_path = tmp_path / "data.html"
    html_path.write_text("<table><tr><td>1</td></tr></table>", encoding="utf-8")

    assert detect_format(_people_workbook(tmp_path, people)) == "Xlsx"
    assert detect_format(csv_path) == "Csv"
    assert detect_format(html_path) == "Html"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        import_excel(tmp_path / "absent.xlsx")


def test_read_table_sources(tmp_path: Path) -> None:
    json_path = tmp_path / "records.json"
    json_path.write_text('[{"name": "Ada", "age": 36}]', encoding="utf-8")
    xlsx_path = tmp_path / "records.xlsx"
    pd.DataFrame([{"name": "Alan"}]).to_excel(xlsx_path, index=False)

    assert read_table(json_path).to_dict("records") == [{"name": "Ada", "age": 36}]
    assert read_table(xlsx_path)["name"].tolist() == ["Alan"]
    with pytest.raises(FileNotFoundError):
        read_table(tmp_path / "missing.csv")
