"""Typed property value - one variant per value column."""

from dataclasses import dataclass
from datetime import date
from typing import Any

from dynprops.domain.value_objects.property_type import VALUE_COLUMNS


@dataclass(frozen=True)
class TextValue:
    """Text or select value, stored in string_value."""

    value: str
    column = "string_value"


@dataclass(frozen=True)
class NumberValue:
    """Numeric value, stored in number_value."""

    value: float
    column = "number_value"


@dataclass(frozen=True)
class BooleanValue:
    """Boolean value, stored in boolean_value."""

    value: bool
    column = "boolean_value"


@dataclass(frozen=True)
class DateValue:
    """Calendar date, stored in date_value."""

    value: date
    column = "date_value"


PropertyValue = TextValue | NumberValue | BooleanValue | DateValue


def value_columns(value: PropertyValue | None) -> dict[str, Any]:
    """Spread a value over the four physical columns; at most one is non-null."""
    columns: dict[str, Any] = dict.fromkeys(VALUE_COLUMNS)
    if value is not None:
        columns[value.column] = value.value
    return columns


def from_columns(
    string_value: str | None,
    number_value: Any,
    boolean_value: Any,
    date_value: date | None,
) -> PropertyValue | None:
    """Rebuild the value from whichever column is populated."""
    if string_value is not None:
        return TextValue(string_value)
    if number_value is not None:
        return NumberValue(float(number_value))
    if boolean_value is not None:
        return BooleanValue(bool(boolean_value))
    if date_value is not None:
        return DateValue(date_value)
    return None
