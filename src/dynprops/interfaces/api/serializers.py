"""JSON shapes for API responses."""

from datetime import date
from typing import Any

from dynprops.domain.entities import PropertyDefinition


def definition_to_dict(definition: PropertyDefinition) -> dict[str, Any]:
    return {
        "id": definition.id,
        "name": definition.name,
        "label": definition.label,
        "type": definition.type.value,
        "required": definition.required,
        "options": definition.options,
        "validation": definition.validation,
        "created_at": definition.created_at.isoformat() if definition.created_at else None,
        "updated_at": definition.updated_at.isoformat() if definition.updated_at else None,
    }


def value_to_json(value: Any) -> Any:
    """Dates as ISO strings; everything else is already JSON-safe."""
    if isinstance(value, date):
        return value.isoformat()
    return value


def values_to_json(values: dict[str, Any]) -> dict[str, Any]:
    return {name: value_to_json(v) for name, v in values.items()}
