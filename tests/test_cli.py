"""CLI integration tests for export and import commands."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import Workbook
from typer.testing import CliRunner

from sheetflow import cli


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def source_csv(tmp_path: Path) -> Path:
    path = tmp_path / "people.csv"
    path.write_text("name,amount\nAda,12.5\nLinus,7\n", encoding="utf-8")
    return path


def test_export_then_import(cli_runner: CliRunner, tmp_path: Path, source_csv: Path) -> None:
    out_dir = tmp_path / "out"

    result = cli_runner.invoke(
        cli.app,
        [
            "export",
            str(source_csv),
            "--out",
            str(out_dir),
            "--columns",
            "name::Who,amount:decimal:Amount",
            "--file-name",
            "people",
        ],
    )
    assert result.exit_code == 0, result.output
    exported = Path(result.stdout.strip())
    assert exported == out_dir / "people.xlsx"
    assert exported.exists()

    result = cli_runner.invoke(cli.app, ["import", str(exported), "--header-offset", "0"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [
        {"Who": "Ada", "Amount": 12.5},
        {"Who": "Linus", "Amount": 7},
    ]


def test_export_with_config_file(cli_runner: CliRunner, tmp_path: Path, source_csv: Path) -> None:
    config = tmp_path / "export.yaml"
    config.write_text(
        "file_name: from-config\nformat: csv\ncolumns:\n  - name\n",
        encoding="utf-8",
    )

    result = cli_runner.invoke(
        cli.app, ["export", str(source_csv), "--out", str(tmp_path), "--config", str(config)]
    )

    assert result.exit_code == 0, result.output
    output = tmp_path / "from-config.csv"
    assert output.read_text(encoding="utf-8").splitlines() == ["Name", "Ada", "Linus"]


def test_import_without_keys(cli_runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "grid.csv"
    source.write_text("a,b\n1,2\n", encoding="utf-8")

    result = cli_runner.invoke(cli.app, ["import", str(source), "--no-keys"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"A": "a", "B": "b"}, {"A": "1", "B": "2"}]


def test_import_prints_date_headers_as_text(cli_runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "dated.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.append(["name", datetime(2024, 1, 31)])
    ws.append(["Ada", 5])
    wb.save(source)

    result = cli_runner.invoke(cli.app, ["import", str(source)])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"name": "Ada", "2024-01-31 00:00:00": 5}]


def test_missing_source_exits_with_error(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli.app, ["import", str(tmp_path / "absent.xlsx")])
    assert result.exit_code == 1

    result = cli_runner.invoke(cli.app, ["export", str(tmp_path / "absent.csv"), "--out", str(tmp_path)])
    assert result.exit_code == 1


def test_invalid_log_level(cli_runner: CliRunner, source_csv: Path) -> None:
    result = cli_runner.invoke(cli.app, ["--log-level", "LOUD", "import", str(source_csv)])
    assert result.exit_code != 0
