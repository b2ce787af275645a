"""SQL entity property repository implementation - typed fact rows."""

from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa

from dynprops.application.dto.search_filter import ResolvedFilter, SearchLogic
from dynprops.domain.entities import EntityPropertyValue, EntityRef
from dynprops.domain.value_objects import VALUE_COLUMNS, from_columns, value_columns
from dynprops.infrastructure.persistence.sql.capabilities import DatabaseCompatibility
from dynprops.infrastructure.persistence.sql.query_translator import QueryTranslator
from dynprops.infrastructure.persistence.sql.tables import entity_property

_KEY = ["entity_type", "entity_id", "property_name"]


class SqlEntityPropertyRepository:
    """Fact rows keyed by (entity_type, entity_id, property_name)."""

    def __init__(self, conn: sa.Connection, compatibility: DatabaseCompatibility) -> None:
        self._conn = conn
        self._compat = compatibility
        self._translator = QueryTranslator(compatibility)

    def get(self, entity: EntityRef, property_name: str) -> EntityPropertyValue | None:
        row = self._conn.execute(
            sa.select(entity_property).where(
                _entity_clause(entity), entity_property.c.property_name == property_name
            )
        ).first()
        return _row_to_value(row) if row else None

    def list_by_entity(self, entity: EntityRef) -> list[EntityPropertyValue]:
        rows = self._conn.execute(
            sa.select(entity_property)
            .where(_entity_clause(entity))
            .order_by(entity_property.c.property_name)
        ).all()
        return [_row_to_value(r) for r in rows]

    def upsert(self, row: EntityPropertyValue) -> None:
        """Insert or overwrite; all four value columns are written so only one stays set."""
        now = datetime.now(UTC)
        values: dict[str, Any] = {
            "entity_type": row.entity_type,
            "entity_id": row.entity_id,
            "property_name": row.property_name,
            **value_columns(row.value),
            "created_at": now,
            "updated_at": now,
        }
        self._compat.backend.upsert(
            self._conn,
            entity_property,
            values,
            _KEY,
            [*VALUE_COLUMNS, "updated_at"],
        )

    def delete(self, entity: EntityRef, property_name: str) -> bool:
        result = self._conn.execute(
            sa.delete(entity_property).where(
                _entity_clause(entity), entity_property.c.property_name == property_name
            )
        )
        return result.rowcount > 0

    def delete_by_entity(self, entity: EntityRef) -> int:
        result = self._conn.execute(sa.delete(entity_property).where(_entity_clause(entity)))
        return result.rowcount

    def delete_by_property(self, property_name: str) -> int:
        result = self._conn.execute(
            sa.delete(entity_property).where(entity_property.c.property_name == property_name)
        )
        return result.rowcount

    def count(self, entity: EntityRef, property_name: str) -> int:
        return self._conn.execute(
            sa.select(sa.func.count())
            .select_from(entity_property)
            .where(_entity_clause(entity), entity_property.c.property_name == property_name)
        ).scalar_one()

    def entity_ids_with_property(self, property_name: str) -> list[EntityRef]:
        rows = self._conn.execute(
            sa.select(entity_property.c.entity_type, entity_property.c.entity_id)
            .where(entity_property.c.property_name == property_name)
            .distinct()
        ).all()
        return [EntityRef(r.entity_type, r.entity_id) for r in rows]

    def search(
        self,
        entity_type: str,
        filters: list[ResolvedFilter],
        logic: SearchLogic,
    ) -> set[str]:
        if not filters:
            return set()
        stmt = self._translator.entity_ids_query(entity_type, filters, logic)
        return {str(v) for v in self._conn.execute(stmt).scalars()}


def _entity_clause(entity: EntityRef) -> sa.ColumnElement[bool]:
    return sa.and_(
        entity_property.c.entity_type == entity.entity_type,
        entity_property.c.entity_id == entity.entity_id,
    )


def _row_to_value(row: Any) -> EntityPropertyValue:
    return EntityPropertyValue(
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        property_name=row.property_name,
        value=from_columns(row.string_value, row.number_value, row.boolean_value, row.date_value),
    )
