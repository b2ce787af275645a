"""Entity reference - the host record a property value belongs to."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EntityRef:
    """Host entity identified by (entity_type, entity_id)."""

    entity_type: str
    entity_id: str

    def __post_init__(self) -> None:
        entity_id = "" if self.entity_id is None else str(self.entity_id)
        object.__setattr__(self, "entity_id", entity_id)
