"""Filesystem helpers for export file naming and placement."""

# Module responsibilities:
# - Map declared spreadsheet format names onto file extensions.
# - Resolve the final output path under a caller supplied save directory.

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

DEFAULT_FILE_NAME = "exports"
DEFAULT_FORMAT = "Xlsx"

EXTENSION_MAP: Dict[str, str] = {
    "Xlsx": ".xlsx",
    "Xls": ".xls",
    "Html": ".html",
    "Csv": ".csv",
}


def resolve_file_name(file_name: Optional[str] = None, fmt: Optional[str] = None) -> str:
    """Return the export file name with an extension inferred from ``fmt``.

    A name that already carries an extension is returned untouched. Without a
    declared format the XLSX extension is used; an unknown format name adds no
    extension at all.
    """

    name = file_name or DEFAULT_FILE_NAME
    if Path(name).suffix:
        return name
    if fmt is None:
        return name + EXTENSION_MAP[DEFAULT_FORMAT]
    return name + EXTENSION_MAP.get(fmt, "")


def prepare_output_path(save_path: Path, file_name: str) -> Path:
    """Prepare ``save_path/file_name``, creating the directory on demand."""

    save_path.mkdir(parents=True, exist_ok=True)
    return save_path / file_name
