"""Record access helpers shared by the export pipeline."""

# Module responsibilities:
# - Resolve dotted attribute paths over mappings, objects, sequences and pandas rows.
# - Provide attribute labels and field lists for header synthesis.
# - Normalize record sources (iterables, DataFrames) into a single-pass iterator.

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any, Iterable, Iterator, List, Optional, Protocol, runtime_checkable

import pandas as pd


@runtime_checkable
class RecordAccessor(Protocol):
    """Capability used by the layout engine to read records."""

    def get_value(self, record: Any, path: str) -> Any:
        ...

    def get_label(self, record: Any, attribute: str) -> str:
        ...

    def attribute_names(self, record: Any) -> List[str]:
        ...


def _lookup(container: Any, key: str) -> Any:
    if isinstance(container, pd.Series):
        return container.get(key)
    if isinstance(container, Mapping):
        return container.get(key)
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes)):
        try:
            return container[int(key)]
        except (ValueError, IndexError):
            return None
    return getattr(container, key, None)


def get_value(record: Any, path: str) -> Any:
    """Return the value at ``path`` (``author.name``) or ``None`` when absent.

    A mapping key containing the full dotted path wins over nested lookup.
    """

    if isinstance(record, Mapping) and path in record:
        return record[path]
    current = record
    for segment in path.split("."):
        if current is None:
            return None
        current = _lookup(current, segment)
    return current


def humanize(attribute: str) -> str:
    """``created_at`` -> ``Created At``; ``author.name`` -> ``Author Name``."""

    words = attribute.replace(".", " ").replace("_", " ").replace("-", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def attribute_label(record: Any, attribute: str) -> str:
    """Human label for ``attribute`` as declared by the record, else a humanized key."""

    getter = getattr(record, "get_attribute_label", None)
    if callable(getter):
        return str(getter(attribute))
    labels = getattr(record, "attribute_labels", None)
    if callable(labels):
        labels = labels()
    if isinstance(labels, Mapping) and attribute in labels:
        return str(labels[attribute])
    return humanize(attribute)


def attribute_names(record: Any) -> List[str]:
    """Ordered field names of a record, used when no columns are configured."""

    if isinstance(record, pd.Series):
        return [str(key) for key in record.index]
    if isinstance(record, Mapping):
        return [str(key) for key in record.keys()]
    attributes = getattr(record, "attributes", None)
    if callable(attributes):
        attributes = attributes()
    if attributes is not None:
        return [str(key) for key in attributes]
    if dataclasses.is_dataclass(record):
        return [field.name for field in dataclasses.fields(record)]
    if hasattr(record, "__dict__"):
        return [key for key in vars(record) if not key.startswith("_")]
    return []


def snapshot(record: Any) -> Any:
    """Plain representation of a record for log output."""

    if isinstance(record, pd.Series):
        return record.to_dict()
    if isinstance(record, Mapping):
        return dict(record)
    names = attribute_names(record)
    if names:
        return {name: get_value(record, name) for name in names}
    return repr(record)


class DefaultAccessor:
    """Accessor backed by the module level helpers."""

    def get_value(self, record: Any, path: str) -> Any:
        return get_value(record, path)

    def get_label(self, record: Any, attribute: str) -> str:
        return attribute_label(record, attribute)

    def attribute_names(self, record: Any) -> List[str]:
        return attribute_names(record)


def iter_records(source: Optional[Iterable[Any]]) -> Iterator[Any]:
    """Normalize a record source into an iterator consumed exactly once.

    DataFrames yield one dict per row. Lists are drained in place and iterators
    are returned as-is, so a second pass over the same source is empty.
    """

    if source is None:
        return iter(())
    if isinstance(source, pd.DataFrame):
        return iter(source.to_dict(orient="records"))
    if isinstance(source, Mapping):
        return iter([source])
    if isinstance(source, list):
        pending = list(source)
        source.clear()
        return iter(pending)
    return iter(source)
