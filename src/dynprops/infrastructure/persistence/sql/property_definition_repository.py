"""SQL property definition repository implementation."""

from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa

from dynprops.domain.entities import PropertyDefinition
from dynprops.domain.exceptions import InvalidPropertyTypeError
from dynprops.domain.value_objects import PropertyType
from dynprops.infrastructure.persistence.sql.tables import property_definition


class SqlPropertyDefinitionRepository:
    """Property definition repository implementation."""

    def __init__(self, conn: sa.Connection) -> None:
        self._conn = conn

    def get_by_name(self, name: str) -> PropertyDefinition | None:
        row = self._conn.execute(
            sa.select(property_definition).where(property_definition.c.name == name)
        ).first()
        return _row_to_definition(row) if row else None

    def list_all(self) -> list[PropertyDefinition]:
        rows = self._conn.execute(
            sa.select(property_definition).order_by(property_definition.c.name)
        ).all()
        return [_row_to_definition(r) for r in rows]

    def list_by_names(self, names: list[str]) -> list[PropertyDefinition]:
        if not names:
            return []
        rows = self._conn.execute(
            sa.select(property_definition).where(property_definition.c.name.in_(names))
        ).all()
        return [_row_to_definition(r) for r in rows]

    def create(self, definition: PropertyDefinition) -> PropertyDefinition:
        """Insert definition and return it with its id."""
        now = datetime.now(UTC)
        definition.created_at = definition.created_at or now
        definition.updated_at = definition.updated_at or now
        result = self._conn.execute(
            sa.insert(property_definition).values(
                name=definition.name,
                label=definition.label,
                type=definition.type.value,
                required=definition.required,
                options=definition.options or None,
                validation=definition.validation or None,
                created_at=definition.created_at,
                updated_at=definition.updated_at,
            )
        )
        definition.id = result.inserted_primary_key[0]
        return definition

    def delete(self, name: str) -> bool:
        result = self._conn.execute(
            sa.delete(property_definition).where(property_definition.c.name == name)
        )
        return result.rowcount > 0


def _row_to_definition(row: Any) -> PropertyDefinition:
    try:
        property_type = PropertyType(row.type)
    except ValueError:
        raise InvalidPropertyTypeError(row.type, [t.value for t in PropertyType]) from None
    return PropertyDefinition(
        id=row.id,
        name=row.name,
        label=row.label,
        type=property_type,
        required=bool(row.required),
        options=list(row.options or []),
        validation=dict(row.validation or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
