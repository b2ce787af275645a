"""Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite database through the real SQL
adapters. Two host tables exist: ``users`` carries the JSON cache column,
``companies`` does not.
"""

from collections.abc import Callable, Iterator
from typing import Any

import pytest
import sqlalchemy as sa

from dynprops.application.services import PropertyService
from dynprops.config import PropertySettings
from dynprops.domain.entities import EntityRef, PropertyDefinition
from dynprops.infrastructure.persistence.sql import (
    DatabaseCompatibility,
    EntityTableRegistry,
    create_db_engine,
    create_schema,
    create_uow_factory,
)
from dynprops.infrastructure.persistence.sql.tables import json_cache_column

host_metadata = sa.MetaData()

users = sa.Table(
    "users",
    host_metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("name", sa.String(100)),
    json_cache_column(),
)

companies = sa.Table(
    "companies",
    host_metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("name", sa.String(100)),
)

STANDARD_DEFINITIONS: list[dict[str, Any]] = [
    {"name": "age", "label": "Age", "type": "number", "validation": {"min": 0, "max": 150}},
    {
        "name": "status",
        "label": "Status",
        "type": "select",
        "options": ["active", "inactive"],
    },
    {"name": "verified", "label": "Verified", "type": "boolean"},
    {"name": "bio", "label": "Biography", "type": "text", "validation": {"max": 500}},
    {"name": "joined", "label": "Joined", "type": "date"},
    {"name": "nickname", "label": "Nickname", "type": "text", "required": True},
]


def insert_hosts(engine: sa.Engine, table: sa.Table, ids: Iterator[int] | list[int]) -> None:
    """Insert bare host rows so the JSON cache has something to update."""
    rows = [{"id": i, "name": f"{table.name}-{i}"} for i in ids]
    if rows:
        with engine.begin() as conn:
            conn.execute(sa.insert(table), rows)


def read_cache(engine: sa.Engine, entity_id: int) -> Any:
    with engine.connect() as conn:
        return conn.execute(
            sa.select(users.c.dynamic_properties).where(users.c.id == entity_id)
        ).scalar_one()


@pytest.fixture
def engine() -> Iterator[sa.Engine]:
    """Fresh in-memory SQLite database with property and host tables."""
    engine = create_db_engine("sqlite://")
    create_schema(engine)
    host_metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def compatibility(engine: sa.Engine) -> DatabaseCompatibility:
    return DatabaseCompatibility(engine)


@pytest.fixture
def entity_tables() -> EntityTableRegistry:
    return EntityTableRegistry()


@pytest.fixture
def uow_factory(engine, compatibility, entity_tables):
    """Context-manager factory over the SQLite engine."""
    return create_uow_factory(engine, compatibility, entity_tables)


@pytest.fixture
def property_settings() -> PropertySettings:
    return PropertySettings()


@pytest.fixture
def service(uow_factory, compatibility, property_settings) -> PropertyService:
    return PropertyService(uow_factory, compatibility, property_settings)


@pytest.fixture
def define(service: PropertyService) -> Callable[..., PropertyDefinition]:
    """Create a definition: define("age", "number", validation={...})."""

    def _define(name: str, prop_type: str, label: str | None = None, **extra: Any):
        data = {"name": name, "label": label or name.title(), "type": prop_type, **extra}
        return service.create_property(data)

    return _define


@pytest.fixture
def standard_definitions(service: PropertyService) -> list[PropertyDefinition]:
    """age, status, verified, bio, joined and the required nickname."""
    return [service.create_property(dict(data)) for data in STANDARD_DEFINITIONS]


@pytest.fixture
def user(engine: sa.Engine) -> EntityRef:
    """Saved users row with id 1."""
    insert_hosts(engine, users, [1])
    return EntityRef("users", 1)


@pytest.fixture
def company(engine: sa.Engine) -> EntityRef:
    """Saved companies row with id 1 (no cache column)."""
    insert_hosts(engine, companies, [1])
    return EntityRef("companies", 1)
