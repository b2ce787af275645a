"""Domain entities."""

from dynprops.domain.entities.entity_property import EntityPropertyValue
from dynprops.domain.entities.entity_ref import EntityRef
from dynprops.domain.entities.property_definition import PropertyDefinition

__all__ = [
    "EntityPropertyValue",
    "EntityRef",
    "PropertyDefinition",
]
