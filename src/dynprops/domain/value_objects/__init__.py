"""Domain value objects."""

from dynprops.domain.value_objects.capability import Capability
from dynprops.domain.value_objects.property_type import VALUE_COLUMNS, PropertyType
from dynprops.domain.value_objects.property_value import (
    BooleanValue,
    DateValue,
    NumberValue,
    PropertyValue,
    TextValue,
    from_columns,
    value_columns,
)

__all__ = [
    "VALUE_COLUMNS",
    "BooleanValue",
    "Capability",
    "DateValue",
    "NumberValue",
    "PropertyType",
    "PropertyValue",
    "TextValue",
    "from_columns",
    "value_columns",
]
