"""Formatting service used by named column formats."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from sheetflow.errors import ConfigurationError
from sheetflow.formatting import Formatter, ensure_formatter


def test_dispatch_by_name() -> None:
    formatter = Formatter()
    assert formatter.format(True, "boolean") == "Yes"
    assert formatter.format(1234.567, "decimal", 1) == "1,234.6"
    assert formatter.format("2.5", "integer") == "3"
    assert formatter.format(0.256, "percent") == "26%"
    assert formatter.format(5, "currency") == "USD 5.00"
    assert formatter.format("a\r\nb", "ntext") == "a\nb"


def test_null_values_pass_through() -> None:
    assert Formatter().format(None, "decimal") is None
    assert Formatter(null_display="-").format(None, "text") == "-"


def test_separators() -> None:
    formatter = Formatter(decimal_separator=",", thousand_separator=".")
    assert formatter.format(1234567.891, "decimal") == "1.234.567,89"


def test_dates() -> None:
    formatter = Formatter(date_format="%d/%m/%Y")
    assert formatter.format(date(2024, 3, 6), "date") == "06/03/2024"
    assert formatter.format("2024-03-05 10:30:00", "datetime") == "2024-03-05 10:30:00"
    assert formatter.format(datetime(2024, 3, 5, 10, 30), "time") == "10:30:00"
    assert formatter.format(0, "date") == "01/01/1970"


def test_unknown_format_name() -> None:
    with pytest.raises(ConfigurationError):
        Formatter().format(1, "roman")


def test_ensure_formatter() -> None:
    assert isinstance(ensure_formatter(), Formatter)
    configured = ensure_formatter(
        {"currency_code": "EUR"}, thousand_separator=" ", decimal_separator=None
    )
    assert configured.currency_code == "EUR"
    assert configured.thousand_separator == " "
    assert configured.decimal_separator == "."
    with pytest.raises(ConfigurationError):
        ensure_formatter({"unknown": 1})
    with pytest.raises(ConfigurationError):
        ensure_formatter(42)
