"""Value mapper - converts raw input to typed values and back."""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from dynprops.config import PropertySettings
from dynprops.domain.entities import PropertyDefinition
from dynprops.domain.exceptions import PropertyValidationError
from dynprops.domain.value_objects import (
    BooleanValue,
    DateValue,
    NumberValue,
    PropertyType,
    PropertyValue,
    TextValue,
)

_TRUE = frozenset({"1", "true"})
_FALSE = frozenset({"0", "false"})


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def parse_bool(raw: Any) -> bool:
    """Interpret True/False, 1/0, "1"/"0", "true"/"false" (any case)."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        key = raw.strip().lower()
        if key in _TRUE:
            return True
        if key in _FALSE:
            return False
    raise ValueError(f"Cannot interpret {raw!r} as boolean")


def parse_date(raw: Any) -> date:
    """Parse date, datetime or ISO 8601 string to a calendar date."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            return datetime.fromisoformat(text).date()
    raise ValueError(f"Cannot interpret {raw!r} as date")


def parse_number(raw: Any) -> float:
    """Parse a finite real number; numeric strings are accepted."""
    if isinstance(raw, bool):
        raise ValueError("Booleans are not numbers")
    if isinstance(raw, (int, float, Decimal)):
        number = float(raw)
    elif isinstance(raw, str):
        number = float(raw.strip())
    else:
        raise ValueError(f"Cannot interpret {raw!r} as number")
    if not math.isfinite(number):
        raise ValueError("Number must be finite")
    return number


class ValueMapper:
    """Routes values to the column matching the declared type."""

    def __init__(self, settings: PropertySettings) -> None:
        self._settings = settings

    def precision(self, definition: PropertyDefinition) -> int:
        precision = (definition.validation or {}).get("precision")
        if isinstance(precision, int) and not isinstance(precision, bool) and precision >= 0:
            return precision
        return self._settings.default_number_precision

    def coerce(self, definition: PropertyDefinition, raw: Any) -> PropertyValue | None:
        """Convert a validated raw value to its typed variant; empty means unset."""
        if is_empty(raw):
            return None
        match definition.type:
            case PropertyType.NUMBER:
                return NumberValue(round(parse_number(raw), self.precision(definition)))
            case PropertyType.BOOLEAN:
                return BooleanValue(parse_bool(raw))
            case PropertyType.DATE:
                return DateValue(parse_date(raw))
            case _:
                return TextValue(_to_text(raw))

    def coerce_operand(self, definition: PropertyDefinition, raw: Any) -> Any:
        """Convert a search operand to the declared type's column type.

        Routing is by declared type only, never by the operand's shape.
        """
        try:
            match definition.type:
                case PropertyType.NUMBER:
                    return parse_number(raw)
                case PropertyType.BOOLEAN:
                    return parse_bool(raw)
                case PropertyType.DATE:
                    return parse_date(raw)
                case _:
                    return _to_text(raw)
        except (TypeError, ValueError) as exc:
            raise PropertyValidationError(
                definition.name,
                raw,
                [f"Search value for {definition.label} is not a valid {definition.type}: {exc}"],
                rule="operand",
                label=definition.label,
            ) from exc

    @staticmethod
    def to_python(value: PropertyValue | None) -> Any:
        return None if value is None else value.value

    @staticmethod
    def to_json(value: PropertyValue | None) -> Any:
        """JSON-safe form used in the cache column (dates as ISO strings)."""
        if value is None:
            return None
        if isinstance(value, DateValue):
            return value.value.isoformat()
        return value.value

    @staticmethod
    def from_json(definition: PropertyDefinition | None, raw: Any) -> Any:
        """Decode a cached value back to its Python type."""
        if raw is None or definition is None:
            return raw
        match definition.type:
            case PropertyType.NUMBER:
                return parse_number(raw)
            case PropertyType.BOOLEAN:
                return parse_bool(raw)
            case PropertyType.DATE:
                return parse_date(raw)
            case _:
                return raw


def _to_text(raw: Any) -> str:
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)
