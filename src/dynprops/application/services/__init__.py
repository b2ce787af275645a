"""Application services."""

from dynprops.application.services.definition_cache import DefinitionCache
from dynprops.application.services.json_cache_sync import JsonCacheSynchronizer
from dynprops.application.services.property_service import PropertyService
from dynprops.application.services.validation import PropertyValidator
from dynprops.application.services.value_mapper import ValueMapper

__all__ = [
    "DefinitionCache",
    "JsonCacheSynchronizer",
    "PropertyService",
    "PropertyValidator",
    "ValueMapper",
]
