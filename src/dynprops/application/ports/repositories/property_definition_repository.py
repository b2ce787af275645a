"""Property definition repository port - schema registry."""

from typing import Protocol

from dynprops.domain.entities import PropertyDefinition


class PropertyDefinitionRepository(Protocol):
    """Port for property definition persistence."""

    def get_by_name(self, name: str) -> PropertyDefinition | None: ...

    def list_all(self) -> list[PropertyDefinition]: ...

    def list_by_names(self, names: list[str]) -> list[PropertyDefinition]: ...

    def create(self, definition: PropertyDefinition) -> PropertyDefinition: ...

    def delete(self, name: str) -> bool: ...
