"""Property type for typed value storage."""

from enum import StrEnum


class PropertyType(StrEnum):
    """Supported property value types."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    SELECT = "select"

    @property
    def value_column(self) -> str:
        """Fact-row column that stores values of this type."""
        return _VALUE_COLUMNS[self]


_VALUE_COLUMNS: dict[PropertyType, str] = {
    PropertyType.TEXT: "string_value",
    PropertyType.SELECT: "string_value",
    PropertyType.NUMBER: "number_value",
    PropertyType.BOOLEAN: "boolean_value",
    PropertyType.DATE: "date_value",
}

VALUE_COLUMNS: tuple[str, ...] = (
    "string_value",
    "number_value",
    "boolean_value",
    "date_value",
)
