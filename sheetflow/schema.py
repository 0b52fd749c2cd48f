"""Shared schemas for column layout and cell resolution."""

# Module responsibilities:
# - Provide strongly typed containers for normalized column descriptors.
# - Define the tagged format variant and the resolved cell payload.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

# A value resolver is either a dotted path or a callable ``(record, widget, row)``.
ValueResolver = Union[str, Callable[..., Any]]
# Raw import grid: rows of cells keyed by column letters (or plain sequences).
SheetRow = Union[Dict[str, Any], List[Any]]
SheetData = List[SheetRow]


class FormatKind(str, Enum):
    DATE = "date"
    DATETIME = "date-time"
    DECIMAL = "decimal"
    TEXT = "text"
    NAMED = "named"


@dataclass(frozen=True)
class FormatSpec:
    """Tagged format variant attached to a column."""

    kind: FormatKind
    precision: Optional[int] = None
    name: Optional[str] = None
    options: Tuple[Any, ...] = ()

    @classmethod
    def date(cls) -> "FormatSpec":
        return cls(FormatKind.DATE)

    @classmethod
    def datetime(cls) -> "FormatSpec":
        return cls(FormatKind.DATETIME)

    @classmethod
    def decimal(cls, precision: Optional[int] = None) -> "FormatSpec":
        return cls(FormatKind.DECIMAL, precision=precision)

    @classmethod
    def text(cls) -> "FormatSpec":
        return cls(FormatKind.TEXT)

    @classmethod
    def named(cls, name: str, *options: Any) -> "FormatSpec":
        return cls(FormatKind.NAMED, name=name, options=tuple(options))


@dataclass(frozen=True)
class ColumnDescriptor:
    """Normalized description of one output column.

    ``attribute`` is a dotted path into the record; ``value`` overrides it with
    either another dotted path or a callable invoked as
    ``value(record, widget, row)``. ``choices`` maps raw attribute values onto
    display labels.
    """

    attribute: Optional[str] = None
    value: Optional[ValueResolver] = None
    header: Optional[str] = None
    format: Optional[FormatSpec] = None
    visible: bool = True
    choices: Optional[Mapping[Any, Any]] = None
    auto_size: bool = True
    width: Optional[float] = None
    wrap: Optional[bool] = None
    header_style: Optional[Mapping[str, Any]] = None

    def describe(self) -> Dict[str, Any]:
        """Plain snapshot used in log records."""

        return {
            "attribute": self.attribute,
            "value": getattr(self.value, "__name__", self.value),
            "header": self.header,
            "format": self.format.kind.value if self.format else None,
        }


@dataclass(frozen=True)
class CellValue:
    """Resolved display value plus the style hints needed to write it."""

    value: Any
    number_format: Optional[str] = None
    explicit_string: bool = False
