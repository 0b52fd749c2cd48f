"""Column entry resolver for worksheet layouts."""

# Module responsibilities:
# - Normalize string shorthand and mapping column entries into ColumnDescriptor objects.
# - Parse format declarations into the FormatSpec variant once, before any row is written.
# - Derive a default column set from a record when none is configured.

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Iterable, List, Optional, Union

from .errors import ConfigurationError
from .records import attribute_names
from .schema import ColumnDescriptor, FormatKind, FormatSpec
from .utils.log import get_logger

logger = get_logger("mapping")

RawColumn = Union[str, Mapping[str, Any], ColumnDescriptor]

# Accepted mapping keys -> descriptor field. Camel-case spellings mirror the
# widget configuration people port over from grid views.
_KEY_ALIASES = {
    "attribute": "attribute",
    "value": "value",
    "header": "header",
    "format": "format",
    "visible": "visible",
    "list": "choices",
    "choices": "choices",
    "autoSize": "auto_size",
    "auto_size": "auto_size",
    "excelWidth": "width",
    "width": "width",
    "excelWrap": "wrap",
    "wrap": "wrap",
    "headerStyle": "header_style",
    "header_style": "header_style",
}

_SHORTHAND_SEGMENTS = 3


class MappingError(ConfigurationError):
    """Raised when a column entry cannot be normalized."""


def parse_format(raw: Any) -> Optional[FormatSpec]:
    """Parse a format declaration.

    ``"date"``, ``"date-time"``, ``"text"`` and ``"decimal"`` select the
    spreadsheet native formats; ``["decimal", 3]`` carries a precision. Any
    other name (``"datetime"``, ``"currency"``, ...) is delegated to the
    formatting service, with list tail items passed as options.
    """

    if raw is None or raw == "":
        return None
    if isinstance(raw, FormatSpec):
        return raw
    options: tuple = ()
    if isinstance(raw, Sequence) and not isinstance(raw, str):
        if not raw:
            return None
        name, options = raw[0], tuple(raw[1:])
    else:
        name = raw
    name = str(name).strip()

    if name == FormatKind.DATE.value:
        return FormatSpec.date()
    if name == FormatKind.DATETIME.value:
        return FormatSpec.datetime()
    if name == FormatKind.TEXT.value:
        return FormatSpec.text()
    if name == FormatKind.DECIMAL.value:
        precision = options[0] if options else None
        if precision is not None:
            try:
                precision = int(precision)
            except (TypeError, ValueError):
                logger.warning(
                    "Invalid decimal precision, falling back to default",
                    extra={"precision": precision},
                )
                precision = None
            else:
                if precision < 0:
                    precision = None
        return FormatSpec.decimal(precision)
    return FormatSpec.named(name, *options)


def parse_shorthand(entry: str) -> ColumnDescriptor:
    """Parse ``"path:format:header"``; only ``path`` is required.

    Segments past the third are dropped.
    """

    parts = entry.split(":")
    if len(parts) > _SHORTHAND_SEGMENTS:
        logger.warning(
            "Column shorthand has extra segments; ignoring them",
            extra={"column": entry},
        )
        parts = parts[:_SHORTHAND_SEGMENTS]
    attribute = parts[0]
    if not attribute:
        raise MappingError(f"Column shorthand is missing an attribute path: {entry!r}")
    fmt = parts[1] if len(parts) > 1 else None
    header = parts[2] if len(parts) > 2 and parts[2] != "" else None
    return ColumnDescriptor(attribute=attribute, format=parse_format(fmt), header=header)


def _from_mapping(entry: Mapping[str, Any]) -> ColumnDescriptor:
    if entry.get("attribute") is None and entry.get("value") is None:
        raise MappingError(f"Attribute or value must be defined for column: {dict(entry)!r}")

    fields: dict[str, Any] = {}
    for key, raw in entry.items():
        target = _KEY_ALIASES.get(key)
        if target is None:
            logger.warning("Ignoring unknown column option", extra={"option": key})
            continue
        if raw is None:
            continue
        fields[target] = raw

    if "format" in fields:
        fields["format"] = parse_format(fields["format"])
    if "choices" in fields and not isinstance(fields["choices"], Mapping):
        raise MappingError(f"Column 'list' option must be a mapping: {dict(entry)!r}")
    for flag in ("visible", "auto_size", "wrap"):
        if flag in fields:
            fields[flag] = bool(fields[flag])
    if "width" in fields:
        try:
            fields["width"] = float(fields["width"])
        except (TypeError, ValueError) as exc:
            raise MappingError(f"Column width must be numeric: {dict(entry)!r}") from exc
    if "header" in fields:
        fields["header"] = str(fields["header"])
    return ColumnDescriptor(**fields)


def resolve_columns(raw_columns: Optional[Iterable[RawColumn]]) -> List[ColumnDescriptor]:
    """Normalize user supplied column entries into descriptors.

    Args:
        raw_columns: Strings, mappings or descriptors. A mapping of entries is
            accepted and its values are used in order.

    Returns:
        Descriptor list; empty when nothing is configured, in which case the
        layout engine derives the columns from the first record.

    Raises:
        MappingError: When an entry defines neither ``attribute`` nor ``value``
            or has an unsupported type.
    """

    if not raw_columns:
        return []
    if isinstance(raw_columns, Mapping):
        raw_columns = list(raw_columns.values())

    descriptors: List[ColumnDescriptor] = []
    for entry in raw_columns:
        if isinstance(entry, ColumnDescriptor):
            if entry.attribute is None and entry.value is None:
                raise MappingError(f"Attribute or value must be defined for column: {entry!r}")
            descriptors.append(entry)
        elif isinstance(entry, str):
            descriptors.append(parse_shorthand(entry))
        elif isinstance(entry, Mapping):
            descriptors.append(_from_mapping(entry))
        else:
            raise MappingError(f"Unsupported column entry: {entry!r}")
    return descriptors


def columns_from_record(record: Any) -> List[ColumnDescriptor]:
    """Descriptors for every field of ``record``.

    Only the first record is inspected; later records with other shapes are
    laid out against the same columns.
    """

    return [ColumnDescriptor(attribute=name) for name in attribute_names(record)]


def visible_columns(descriptors: Iterable[ColumnDescriptor]) -> List[ColumnDescriptor]:
    return [descriptor for descriptor in descriptors if descriptor.visible]
