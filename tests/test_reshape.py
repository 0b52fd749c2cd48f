"""Grid to record reshaping and index filters."""

from __future__ import annotations

from sheetflow.reshape import exclude, include_only, reshape

GRID = [
    {"A": "Report", "B": ""},
    {"A": "id", "B": "name"},
    {"A": 1, "B": "Ada"},
    {"A": 2, "B": "Linus"},
]


def test_reshape_uses_row_after_offset_as_keys() -> None:
    assert reshape(GRID, header_offset=1) == [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Linus"}]


def test_reshape_with_header_on_first_row() -> None:
    records = reshape(GRID[1:])
    assert records[0] == {"id": 1, "name": "Ada"}


def test_reshape_pairs_positionally() -> None:
    grid = [["a", "b"], [1, 2, 3], [4]]
    assert reshape(grid) == [{"a": 1, "b": 2}, {"a": 4}]


def test_reshape_without_keys_returns_rows_untouched() -> None:
    assert reshape(GRID, first_row_as_keys=False) == GRID


def test_reshape_short_grid() -> None:
    assert reshape(GRID[:1], header_offset=1) == []
    assert reshape(GRID[:1]) == []
    assert reshape([]) == []


def test_include_only_is_type_strict() -> None:
    records = ["r0", "r1", "r2"]
    assert include_only(records, [0, 2]) == ["r0", "r2"]
    assert include_only(records, ["1"]) == []


def test_exclude_compares_loosely() -> None:
    records = ["r0", "r1", "r2"]
    assert exclude(records, ["1"]) == ["r0", "r2"]
    assert exclude(records, [0, 2]) == ["r1"]


def test_filters_keep_mapping_keys() -> None:
    records = {"x": 1, "y": 2, 3: "z"}
    assert include_only(records, ["y", 3]) == {"y": 2, 3: "z"}
    assert exclude(records, ["3"]) == {"x": 1, "y": 2}
