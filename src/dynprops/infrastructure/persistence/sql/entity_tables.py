"""Host entity tables - where the JSON cache column lives."""

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import sqlalchemy as sa


@dataclass(frozen=True)
class EntityTable:
    """Host table of one entity type; the id column keys the cache row."""

    entity_type: str
    table: str
    id_column: str = "id"


class EntityTableRegistry:
    """Maps entity types to host tables and reflects them once per process.

    Unregistered entity types default to a table named after the type.
    """

    def __init__(
        self,
        tables: Iterable[EntityTable] = (),
        cache_column: str = "dynamic_properties",
    ) -> None:
        self._configured = {t.entity_type: t for t in tables}
        self._cache_column = cache_column
        self._reflected: dict[str, sa.Table | None] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_mapping(
        cls, mapping: dict[str, str], cache_column: str = "dynamic_properties"
    ) -> "EntityTableRegistry":
        return cls((EntityTable(k, v) for k, v in mapping.items()), cache_column)

    @property
    def cache_column(self) -> str:
        return self._cache_column

    def register(self, entity_type: str, table: str | None = None, id_column: str = "id") -> None:
        with self._lock:
            self._configured[entity_type] = EntityTable(entity_type, table or entity_type, id_column)
            self._reflected.pop(entity_type, None)

    def resolve(self, entity_type: str) -> EntityTable:
        return self._configured.get(entity_type) or EntityTable(entity_type, entity_type)

    def table(self, conn: sa.Connection, entity_type: str) -> sa.Table | None:
        """Reflected host table, or None when it does not exist."""
        with self._lock:
            if entity_type in self._reflected:
                return self._reflected[entity_type]
        target = self.resolve(entity_type)
        reflected: sa.Table | None = None
        if sa.inspect(conn).has_table(target.table):
            reflected = sa.Table(target.table, sa.MetaData(), autoload_with=conn)
            if target.id_column not in reflected.c:
                reflected = None
        with self._lock:
            self._reflected[entity_type] = reflected
        return reflected

    def id_column(self, conn: sa.Connection, entity_type: str) -> sa.Column[Any] | None:
        table = self.table(conn, entity_type)
        if table is None:
            return None
        return table.c[self.resolve(entity_type).id_column]

    def has_cache_column(self, conn: sa.Connection, entity_type: str) -> bool:
        table = self.table(conn, entity_type)
        return table is not None and self._cache_column in table.c
