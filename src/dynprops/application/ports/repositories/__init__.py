"""Repository ports."""

from dynprops.application.ports.repositories.entity_property_repository import (
    EntityPropertyRepository,
)
from dynprops.application.ports.repositories.json_cache_repository import (
    JsonCacheRepository,
)
from dynprops.application.ports.repositories.property_definition_repository import (
    PropertyDefinitionRepository,
)

__all__ = [
    "EntityPropertyRepository",
    "JsonCacheRepository",
    "PropertyDefinitionRepository",
]
