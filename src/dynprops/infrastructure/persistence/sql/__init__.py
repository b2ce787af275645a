"""SQLAlchemy Core persistence for PostgreSQL, MySQL and SQLite."""

from dynprops.infrastructure.persistence.sql.capabilities import DatabaseCompatibility
from dynprops.infrastructure.persistence.sql.connection import create_db_engine
from dynprops.infrastructure.persistence.sql.entity_tables import (
    EntityTable,
    EntityTableRegistry,
)
from dynprops.infrastructure.persistence.sql.tables import create_schema, metadata
from dynprops.infrastructure.persistence.sql.unit_of_work import (
    SqlUnitOfWork,
    create_uow_factory,
)

__all__ = [
    "DatabaseCompatibility",
    "EntityTable",
    "EntityTableRegistry",
    "SqlUnitOfWork",
    "create_db_engine",
    "create_schema",
    "create_uow_factory",
    "metadata",
]
