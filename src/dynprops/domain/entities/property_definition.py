"""Property definition entity - typed schema for one dynamic property."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from dynprops.domain.value_objects import PropertyType


@dataclass
class PropertyDefinition:
    """Property definition - name, type, required flag, rules and options."""

    name: str
    label: str
    type: PropertyType
    required: bool = False
    options: list[str] = field(default_factory=list)
    validation: dict[str, Any] = field(default_factory=dict)
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def value_column(self) -> str:
        return self.type.value_column
