"""Style payload helpers on top of openpyxl style objects."""

# Module responsibilities:
# - Translate nested style dictionaries (font/fill/alignment/borders/number_format) into openpyxl objects.
# - Apply payloads to single cells or ranges, merging with the style already on each cell.

from __future__ import annotations

from copy import copy
from typing import Any, Dict, Iterator, Mapping, Optional

from openpyxl.cell.cell import Cell
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from .errors import ConfigurationError

StylePayload = Mapping[str, Any]

DEFAULT_HEADER_STYLE: Dict[str, Any] = {
    "font": {"bold": True, "color": "FFFDFE"},
    "alignment": {"horizontal": "center", "vertical": "justify"},
    "borders": {"top": "thin"},
    "fill": {"fill_type": "solid", "color": "7ebf00"},
}

DEFAULT_BODY_STYLE: Dict[str, Any] = {
    "borders": {"all": "thin"},
}

_SIDES = ("left", "right", "top", "bottom")
_FONT_KEYS = {"name", "size", "bold", "italic", "underline", "strike", "color"}
_ALIGNMENT_KEYS = {
    "horizontal",
    "vertical",
    "wrap_text",
    "shrink_to_fit",
    "indent",
    "text_rotation",
}


def _color(raw: Any) -> Optional[str]:
    """Accept ``"FFFDFE"``, ``"#FFFDFE"`` or ``{"rgb": "FFFDFE"}``."""

    if raw is None:
        return None
    if isinstance(raw, Mapping):
        raw = raw.get("argb") or raw.get("rgb")
    return str(raw).lstrip("#")


def _side(raw: Any) -> Side:
    if isinstance(raw, Side):
        return raw
    if isinstance(raw, Mapping):
        style = raw.get("style") or raw.get("border_style")
        return Side(style=style, color=_color(raw.get("color")))
    return Side(style=raw)


def _iter_cells(ws: Worksheet, ref: str) -> Iterator[Cell]:
    target = ws[ref]
    if isinstance(target, Cell):
        yield target
        return
    for row in target:
        if isinstance(row, Cell):
            yield row
        else:
            yield from row


def _merged_font(cell: Cell, payload: StylePayload) -> Font:
    unknown = set(payload) - _FONT_KEYS
    if unknown:
        raise ConfigurationError(f"Unsupported font options: {sorted(unknown)}")
    font = copy(cell.font)
    for key, value in payload.items():
        setattr(font, key, _color(value) if key == "color" else value)
    return font


def _merged_alignment(cell: Cell, payload: StylePayload) -> Alignment:
    unknown = set(payload) - _ALIGNMENT_KEYS
    if unknown:
        raise ConfigurationError(f"Unsupported alignment options: {sorted(unknown)}")
    alignment = copy(cell.alignment)
    for key, value in payload.items():
        setattr(alignment, key, value)
    return alignment


def _merged_border(cell: Cell, payload: StylePayload) -> Border:
    border = copy(cell.border)
    for key, value in payload.items():
        if key in ("all", "allBorders", "outline"):
            for side in _SIDES:
                setattr(border, side, _side(value))
        elif key in _SIDES:
            setattr(border, key, _side(value))
        else:
            raise ConfigurationError(f"Unsupported border side: {key}")
    return border


def _fill(payload: StylePayload) -> PatternFill:
    color = _color(payload.get("color") or payload.get("start_color"))
    fill_type = payload.get("fill_type") or payload.get("fillType") or "solid"
    end_color = _color(payload.get("end_color")) or color
    return PatternFill(fill_type=fill_type, start_color=color, end_color=end_color)


def apply_style(ws: Worksheet, ref: str, payload: Optional[StylePayload]) -> None:
    """Apply a style payload to ``ref`` (``"B3"`` or ``"A1:F1"``)."""

    if not payload:
        return
    fill = _fill(payload["fill"]) if payload.get("fill") else None
    for cell in _iter_cells(ws, ref):
        if payload.get("font"):
            cell.font = _merged_font(cell, payload["font"])
        if fill is not None:
            cell.fill = copy(fill)
        if payload.get("alignment"):
            cell.alignment = _merged_alignment(cell, payload["alignment"])
        if payload.get("borders"):
            cell.border = _merged_border(cell, payload["borders"])
        if payload.get("number_format"):
            cell.number_format = payload["number_format"]


def set_wrap(cell: Cell, wrap: bool) -> None:
    alignment = copy(cell.alignment)
    alignment.wrap_text = wrap
    cell.alignment = alignment
