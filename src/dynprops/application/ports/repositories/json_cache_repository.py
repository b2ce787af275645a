"""JSON cache repository port - per-entity denormalized snapshot."""

from typing import Any, Protocol

from dynprops.domain.entities import EntityRef


class JsonCacheRepository(Protocol):
    """Port for reading and writing the host table cache column."""

    def has_cache_column(self, entity_type: str) -> bool: ...

    def read(self, entity: EntityRef) -> dict[str, Any] | None: ...

    def write(self, entity: EntityRef, data: dict[str, Any] | None) -> None: ...

    def list_entity_ids(
        self, entity_type: str, after: str | None, limit: int
    ) -> list[str]: ...
