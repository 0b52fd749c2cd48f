"""Column letter generation."""

from __future__ import annotations

import pytest

from sheetflow.addressing import cell_ref, column_letters, range_ref


@pytest.mark.parametrize(
    ("ordinal", "expected"),
    [
        (1, "A"),
        (26, "Z"),
        (27, "AA"),
        (52, "AZ"),
        (53, "BA"),
        (702, "ZZ"),
        (703, "AAA"),
        (16384, "XFD"),
    ],
)
def test_column_letters_known_points(ordinal: int, expected: str) -> None:
    assert column_letters(ordinal) == expected


def test_column_letters_are_distinct_and_ordered() -> None:
    letters = [column_letters(n) for n in range(1, 2000)]
    assert len(set(letters)) == len(letters)
    # Shorter codes come first, same length codes sort alphabetically.
    assert letters == sorted(letters, key=lambda code: (len(code), code))


@pytest.mark.parametrize("bad", [0, -3, True, 1.5, "A"])
def test_column_letters_rejects_non_positive_ordinals(bad: object) -> None:
    with pytest.raises(ValueError):
        column_letters(bad)  # type: ignore[arg-type]


def test_cell_and_range_refs() -> None:
    assert cell_ref(28, 4) == "AB4"
    assert range_ref(1, 3, 2) == "A2:C2"
