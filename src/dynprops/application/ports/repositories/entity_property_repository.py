"""Entity property repository port - typed fact rows."""

from typing import Protocol

from dynprops.application.dto.search_filter import ResolvedFilter, SearchLogic
from dynprops.domain.entities import EntityPropertyValue, EntityRef


class EntityPropertyRepository(Protocol):
    """Port for fact-row persistence and search."""

    def get(self, entity: EntityRef, property_name: str) -> EntityPropertyValue | None: ...

    def list_by_entity(self, entity: EntityRef) -> list[EntityPropertyValue]: ...

    def upsert(self, row: EntityPropertyValue) -> None: ...

    def delete(self, entity: EntityRef, property_name: str) -> bool: ...

    def delete_by_entity(self, entity: EntityRef) -> int: ...

    def count(self, entity: EntityRef, property_name: str) -> int: ...

    def entity_ids_with_property(self, property_name: str) -> list[EntityRef]: ...

    def delete_by_property(self, property_name: str) -> int: ...

    def search(
        self,
        entity_type: str,
        filters: list[ResolvedFilter],
        logic: SearchLogic,
    ) -> set[str]: ...
