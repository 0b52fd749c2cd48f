"""Reshape raw sheet grids into keyed records and filter them by index."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Sequence, Union

from .schema import SheetData, SheetRow

Records = Union[List[Any], Dict[Any, Any]]


def _row_values(row: SheetRow) -> List[Any]:
    if isinstance(row, Mapping):
        return list(row.values())
    return list(row)


def reshape(grid: SheetData, first_row_as_keys: bool = True, header_offset: int = 0) -> List[Any]:
    """Turn a raw grid into records.

    With ``first_row_as_keys`` the row at position ``header_offset`` supplies
    the keys, every row before it is dropped and each following row becomes a
    dict built by pairing keys and cells positionally. Surplus cells are
    dropped and short rows simply miss the trailing keys. Without keys the
    rows are returned as the reader produced them (keyed by column letters).
    """

    rows = list(grid)
    if not first_row_as_keys:
        return rows
    if header_offset < 0:
        raise ValueError("header_offset must be >= 0")
    if len(rows) <= header_offset:
        return []
    keys = _row_values(rows[header_offset])
    return [dict(zip(keys, _row_values(row))) for row in rows[header_offset + 1 :]]


def _items(records: Records) -> Iterable[tuple[Any, Any]]:
    if isinstance(records, Mapping):
        return records.items()
    return enumerate(records)


def _rebuild(records: Records, kept: List[tuple[Any, Any]]) -> Records:
    if isinstance(records, Mapping):
        return dict(kept)
    return [record for _, record in kept]


def include_only(records: Records, indices: Sequence[Any]) -> Records:
    """Keep records whose index is in ``indices`` (type must match: ``"1"`` is not ``1``).

    Lists are indexed by position; mappings keep their own keys.
    """

    def _member(key: Any) -> bool:
        return any(key == index and type(key) is type(index) for index in indices)

    return _rebuild(records, [(key, record) for key, record in _items(records) if _member(key)])


def exclude(records: Records, indices: Sequence[Any]) -> Records:
    """Drop records whose index is in ``indices``; ``"1"`` and ``1`` both match index 1."""

    dropped = {str(index) for index in indices}
    return _rebuild(
        records, [(key, record) for key, record in _items(records) if str(key) not in dropped]
    )
