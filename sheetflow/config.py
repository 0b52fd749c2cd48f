"""Option models for export and import runs.

Options are plain pydantic models so they can be built from keyword arguments
or loaded from YAML files; validation errors surface as
:class:`~sheetflow.errors.ConfigurationError` before any row is touched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .cells import DEFAULT_DATE_FORMAT, DEFAULT_DATETIME_FORMAT
from .errors import ConfigurationError
from .styles import DEFAULT_BODY_STYLE, DEFAULT_HEADER_STYLE

SpreadsheetFormat = Literal["Xlsx", "Xls", "Html", "Csv"]
IndexList = List[Union[int, str]]

_FORMAT_ALIASES = {
    "xlsx": "Xlsx",
    "excel2007": "Xlsx",
    "xls": "Xls",
    "excel5": "Xls",
    "html": "Html",
    "csv": "Csv",
}

OptionsT = TypeVar("OptionsT", bound=BaseModel)


def _normalize_format(value: Any) -> Any:
    if isinstance(value, str):
        return _FORMAT_ALIASES.get(value.strip().lower(), value)
    return value


class ExportOptions(BaseModel):
    """Settings for one export run.

    ``columns`` and ``headers`` hold a single list/mapping, or one per sheet
    title when ``is_multiple_sheet`` is set.
    """

    model_config = ConfigDict(extra="forbid")

    is_multiple_sheet: bool = False
    properties: Dict[str, Any] = Field(default_factory=dict)
    columns: Any = Field(default_factory=list)
    headers: Dict[str, Any] = Field(default_factory=dict)
    file_name: Optional[str] = None
    save_path: Optional[Path] = None
    format: Optional[SpreadsheetFormat] = None
    set_first_title: bool = True
    as_attachment: bool = True
    date_format: str = DEFAULT_DATE_FORMAT
    datetime_format: str = DEFAULT_DATETIME_FORMAT
    freeze_header: bool = True
    auto_filter: bool = True
    header_style: Optional[Dict[str, Any]] = Field(
        default_factory=lambda: dict(DEFAULT_HEADER_STYLE)
    )
    header_height: Optional[float] = None
    body_style: Optional[Dict[str, Any]] = Field(
        default_factory=lambda: dict(DEFAULT_BODY_STYLE)
    )
    title_start_row: Optional[int] = Field(default=None, ge=1)
    table_start_row: Optional[int] = Field(default=None, ge=1)
    title_rows: List[List[Any]] = Field(default_factory=list)
    footer_rows: List[List[Any]] = Field(default_factory=list)
    rows_style: Dict[str, Any] = Field(default_factory=dict)
    page_orientation_portrait: bool = True
    page_fit_to_page: bool = False
    decimal_separator: Optional[str] = None
    thousand_separator: Optional[str] = None

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, value: Any) -> Any:
        return _normalize_format(value)

    @field_validator("columns")
    @classmethod
    def check_columns(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, (list, tuple, dict)):
            raise ValueError("columns must be a list, or a mapping of sheet title to list")
        return value

    def sheet_columns(self, title: str) -> Any:
        """Columns of one sheet; a plain list applies to every sheet."""
        if isinstance(self.columns, dict):
            return self.columns.get(title, [])
        return self.columns

    def sheet_headers(self, title: str) -> Dict[str, Any]:
        """Header labels of one sheet; a flat mapping applies to every sheet."""
        if any(isinstance(value, dict) for value in self.headers.values()):
            headers = self.headers.get(title, {})
            return headers if isinstance(headers, dict) else {}
        return self.headers


class ImportOptions(BaseModel):
    """Settings for one import run.

    ``header_offset`` counts the rows discarded before the key row when
    ``set_first_record_as_keys`` is enabled.
    """

    model_config = ConfigDict(extra="forbid")

    set_first_record_as_keys: bool = True
    header_offset: int = Field(default=0, ge=0)
    set_index_sheet_by_name: bool = False
    get_only_sheet: Optional[str] = None
    get_only_record_by_index: Union[IndexList, Dict[Union[int, str], IndexList]] = Field(default_factory=list)
    leave_record_by_index: Union[IndexList, Dict[Union[int, str], IndexList]] = Field(default_factory=list)
    format: Optional[SpreadsheetFormat] = None

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, value: Any) -> Any:
        return _normalize_format(value)


def build_options(model: Type[OptionsT], payload: Optional[Dict[str, Any]] = None, **overrides: Any) -> OptionsT:
    """Validate ``payload`` merged with ``overrides`` into ``model``."""

    data = dict(payload or {})
    data.update(overrides)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid {model.__name__}: {exc}") from exc


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Options file not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        payload = yaml.safe_load(fh) or {}
    if not isinstance(payload, dict):
        raise ConfigurationError("Invalid options YAML structure (expected mapping)")
    return payload


def load_export_options(path: str | Path, **overrides: Any) -> ExportOptions:
    """Load export options from YAML; keyword overrides win over file values."""

    return build_options(ExportOptions, _load_yaml(Path(path)), **overrides)


def load_import_options(path: str | Path, **overrides: Any) -> ImportOptions:
    """Load import options from YAML; keyword overrides win over file values."""

    return build_options(ImportOptions, _load_yaml(Path(path)), **overrides)
