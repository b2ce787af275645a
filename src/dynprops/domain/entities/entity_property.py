"""Entity property entity - one fact row binding an entity, a name and a value."""

from dataclasses import dataclass

from dynprops.domain.value_objects import PropertyValue


@dataclass
class EntityPropertyValue:
    """Fact row - value of one property for one entity."""

    entity_type: str
    entity_id: str
    property_name: str
    value: PropertyValue | None
