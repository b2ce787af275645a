"""SQL JSON cache repository - reads and writes the host table cache column."""

import json
from typing import Any

import sqlalchemy as sa

from dynprops.domain.entities import EntityRef
from dynprops.domain.exceptions import StorageError
from dynprops.infrastructure.persistence.sql.entity_tables import EntityTableRegistry


class SqlJsonCacheRepository:
    """Cache column access on reflected host tables."""

    def __init__(self, conn: sa.Connection, registry: EntityTableRegistry) -> None:
        self._conn = conn
        self._registry = registry

    def has_cache_column(self, entity_type: str) -> bool:
        return self._registry.has_cache_column(self._conn, entity_type)

    def read(self, entity: EntityRef) -> dict[str, Any] | None:
        """Cached mapping, or None when stale, missing or the host row is absent."""
        if not self.has_cache_column(entity.entity_type):
            return None
        table, id_col = self._target(entity.entity_type)
        key = _coerce_id(id_col, entity.entity_id)
        if key is None:
            return None
        raw = self._conn.execute(
            sa.select(table.c[self._registry.cache_column]).where(id_col == key)
        ).scalar_one_or_none()
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw)
        return raw if isinstance(raw, dict) else None

    def write(self, entity: EntityRef, data: dict[str, Any] | None) -> None:
        """Store the snapshot; None marks it stale (SQL NULL)."""
        if not self.has_cache_column(entity.entity_type):
            return
        table, id_col = self._target(entity.entity_type)
        key = _coerce_id(id_col, entity.entity_id)
        if key is None:
            return
        column = table.c[self._registry.cache_column]
        if data is None:
            value: Any = sa.null()
        elif isinstance(column.type, sa.JSON):
            value = data
        else:
            value = json.dumps(data, sort_keys=True)
        self._conn.execute(sa.update(table).where(id_col == key).values({column.name: value}))

    def list_entity_ids(self, entity_type: str, after: str | None, limit: int) -> list[str]:
        """Host ids in ascending order after the keyset cursor."""
        if self._registry.table(self._conn, entity_type) is None:
            return []
        _, id_col = self._target(entity_type)
        stmt = sa.select(id_col).order_by(id_col).limit(limit)
        if after is not None:
            stmt = stmt.where(id_col > _coerce_id(id_col, after))
        return [str(v) for v in self._conn.execute(stmt).scalars()]

    def _target(self, entity_type: str) -> tuple[sa.Table, sa.Column[Any]]:
        table = self._registry.table(self._conn, entity_type)
        id_col = self._registry.id_column(self._conn, entity_type)
        if table is None or id_col is None:
            raise StorageError(f"No host table for entity type '{entity_type}'")
        return table, id_col


def _coerce_id(column: sa.Column[Any], entity_id: str) -> Any:
    """Entity ids travel as strings; integer host keys are compared as integers."""
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return entity_id
    if python_type is int:
        try:
            return int(entity_id)
        except ValueError:
            return None
    return entity_id
