"""Spreadsheet column/cell address helpers."""

from __future__ import annotations

_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def column_letters(ordinal: int) -> str:
    """Convert a 1-based column ordinal into spreadsheet letters.

    Bijective base-26 without a zero digit: 1 -> ``A``, 26 -> ``Z``,
    27 -> ``AA``, 702 -> ``ZZ``, 703 -> ``AAA``.

    Raises:
        ValueError: When ``ordinal`` is not a positive integer.
    """

    if isinstance(ordinal, bool) or not isinstance(ordinal, int) or ordinal < 1:
        raise ValueError(f"Column ordinal must be a positive integer, got {ordinal!r}")
    letters = []
    n = ordinal
    while n:
        n, rem = divmod(n - 1, 26)
        letters.append(_ALPHABET[rem])
    return "".join(reversed(letters))


def cell_ref(ordinal: int, row: int) -> str:
    return f"{column_letters(ordinal)}{row}"


def range_ref(first: int, last: int, row: int) -> str:
    """Address spanning columns ``first..last`` on a single row."""

    return f"{cell_ref(first, row)}:{cell_ref(last, row)}"
