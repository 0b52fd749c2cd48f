"""Record access helpers."""

from __future__ import annotations

from dataclasses import dataclass
from types import SimpleNamespace

import pandas as pd

from sheetflow.records import (
    DefaultAccessor,
    RecordAccessor,
    attribute_label,
    attribute_names,
    get_value,
    iter_records,
)


@dataclass
class Invoice:
    number: str
    total: float

    def get_attribute_label(self, attribute: str) -> str:
        return {"number": "Invoice No."}.get(attribute, attribute.title())


def test_get_value_paths() -> None:
    record = {"customer": SimpleNamespace(address={"city": "Oslo"}), "lines": [{"sku": "X1"}]}
    assert get_value(record, "customer.address.city") == "Oslo"
    assert get_value(record, "lines.0.sku") == "X1"
    assert get_value(record, "lines.5.sku") is None
    assert get_value(record, "customer.phone.number") is None
    assert get_value({"a.b": 1, "a": {"b": 2}}, "a.b") == 1
    assert get_value(pd.Series({"x": 3}), "x") == 3


def test_labels_and_names() -> None:
    invoice = Invoice("A-1", 9.5)
    assert attribute_label(invoice, "number") == "Invoice No."
    assert attribute_label({"created_at": 1}, "created_at") == "Created At"
    assert attribute_names(invoice) == ["number", "total"]
    assert attribute_names(SimpleNamespace(a=1, _hidden=2)) == ["a"]
    assert isinstance(DefaultAccessor(), RecordAccessor)


def test_iter_records_consumes_lists() -> None:
    source = [{"a": 1}, {"a": 2}]
    assert list(iter_records(source)) == [{"a": 1}, {"a": 2}]
    assert source == []
    assert list(iter_records(source)) == []
    assert list(iter_records(None)) == []
    assert list(iter_records({"a": 1})) == [{"a": 1}]
    assert list(iter_records(pd.DataFrame([{"a": 1}]))) == [{"a": 1}]
