"""Value formatting service used for named column formats."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from .errors import ConfigurationError


class Formatter:
    """Turn raw attribute values into display text.

    ``format(value, name)`` dispatches to ``as_<name>``; extra positional
    options are forwarded (``format(1.5, "decimal", 3)``). ``None`` values are
    rendered as ``null_display``.
    """

    def __init__(
        self,
        *,
        decimal_separator: str = ".",
        thousand_separator: str = ",",
        date_format: str = "%Y-%m-%d",
        datetime_format: str = "%Y-%m-%d %H:%M:%S",
        time_format: str = "%H:%M:%S",
        boolean_format: tuple[str, str] = ("No", "Yes"),
        currency_code: str = "USD",
        null_display: Any = None,
    ) -> None:
        self.decimal_separator = decimal_separator
        self.thousand_separator = thousand_separator
        self.date_format = date_format
        self.datetime_format = datetime_format
        self.time_format = time_format
        self.boolean_format = boolean_format
        self.currency_code = currency_code
        self.null_display = null_display

    def format(self, value: Any, name: str, *options: Any) -> Any:
        method = getattr(self, f"as_{name.replace('-', '_').lower()}", None)
        if method is None:
            raise ConfigurationError(f"Unknown format type: {name}")
        return method(value, *options)

    # -- plain --------------------------------------------------------------

    def as_raw(self, value: Any) -> Any:
        if value is None:
            return self.null_display
        return value

    def as_text(self, value: Any) -> Any:
        if value is None:
            return self.null_display
        return str(value)

    def as_ntext(self, value: Any) -> Any:
        if value is None:
            return self.null_display
        return str(value).replace("\r\n", "\n")

    def as_boolean(self, value: Any) -> Any:
        if value is None:
            return self.null_display
        return self.boolean_format[1] if value else self.boolean_format[0]

    # -- numbers ------------------------------------------------------------

    def _to_decimal(self, value: Any) -> Decimal:
        try:
            return Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValueError(f"'{value}' is not a numeric value.") from exc

    def _group(self, number: Decimal, decimals: int) -> str:
        text = f"{number:,.{decimals}f}"
        integer, _, fraction = text.partition(".")
        integer = integer.replace(",", self.thousand_separator)
        if fraction:
            return f"{integer}{self.decimal_separator}{fraction}"
        return integer

    def as_integer(self, value: Any) -> Any:
        if value is None or value == "":
            return self.null_display
        number = self._to_decimal(value).to_integral_value(rounding=ROUND_HALF_UP)
        return self._group(number, 0)

    def as_decimal(self, value: Any, decimals: Optional[int] = 2) -> Any:
        if value is None or value == "":
            return self.null_display
        decimals = 2 if decimals is None else int(decimals)
        number = self._to_decimal(value).quantize(
            Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP
        )
        return self._group(number, decimals)

    def as_percent(self, value: Any, decimals: int = 0) -> Any:
        if value is None or value == "":
            return self.null_display
        return f"{self.as_decimal(self._to_decimal(value) * 100, decimals)}%"

    def as_currency(self, value: Any, currency: Optional[str] = None) -> Any:
        if value is None or value == "":
            return self.null_display
        return f"{currency or self.currency_code} {self.as_decimal(value, 2)}"

    # -- dates --------------------------------------------------------------

    def _to_datetime(self, value: Any) -> datetime:
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)
        text = str(value).strip()
        for pattern in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"):
            try:
                return datetime.strptime(text, pattern)
            except ValueError:
                continue
        raise ValueError(f"'{value}' is not a valid date time value.")

    def as_date(self, value: Any, pattern: Optional[str] = None) -> Any:
        if value is None or value == "":
            return self.null_display
        return self._to_datetime(value).strftime(pattern or self.date_format)

    def as_datetime(self, value: Any, pattern: Optional[str] = None) -> Any:
        if value is None or value == "":
            return self.null_display
        return self._to_datetime(value).strftime(pattern or self.datetime_format)

    def as_time(self, value: Any, pattern: Optional[str] = None) -> Any:
        if value is None or value == "":
            return self.null_display
        if isinstance(value, time):
            return value.strftime(pattern or self.time_format)
        return self._to_datetime(value).strftime(pattern or self.time_format)


def ensure_formatter(formatter: Any = None, **settings: Any) -> Any:
    """Return ``formatter`` or a new one, validating the ``format`` capability.

    ``settings`` (``decimal_separator``, ``thousand_separator``) only configure
    a formatter built here, from nothing or from a dict of constructor
    arguments; values set in the dict win and ``None`` settings are ignored.
    A formatter object passed in is used as-is.
    """

    defaults = {key: value for key, value in settings.items() if value is not None}
    if formatter is None:
        formatter = Formatter(**defaults)
    elif isinstance(formatter, dict):
        try:
            formatter = Formatter(**{**defaults, **formatter})
        except TypeError as exc:
            raise ConfigurationError(f"Invalid formatter configuration: {exc}") from exc
    if not callable(getattr(formatter, "format", None)):
        raise ConfigurationError(
            'The "formatter" must provide a callable format(value, name) method.'
        )
    return formatter
