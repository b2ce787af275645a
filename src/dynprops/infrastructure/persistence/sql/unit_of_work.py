"""SQL Unit of Work implementation."""

from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from dynprops.domain.exceptions import StorageError
from dynprops.infrastructure.persistence.sql.capabilities import DatabaseCompatibility
from dynprops.infrastructure.persistence.sql.entity_property_repository import (
    SqlEntityPropertyRepository,
)
from dynprops.infrastructure.persistence.sql.entity_tables import EntityTableRegistry
from dynprops.infrastructure.persistence.sql.json_cache_repository import (
    SqlJsonCacheRepository,
)
from dynprops.infrastructure.persistence.sql.property_definition_repository import (
    SqlPropertyDefinitionRepository,
)


class SqlUnitOfWork:
    """SQL Unit of Work - one connection, one transaction."""

    def __init__(
        self,
        engine: sa.Engine,
        compatibility: DatabaseCompatibility,
        entity_tables: EntityTableRegistry,
    ) -> None:
        self._engine = engine
        self._compatibility = compatibility
        self._entity_tables = entity_tables
        self._conn: sa.Connection | None = None
        self._transaction: sa.RootTransaction | None = None

    def __enter__(self) -> "SqlUnitOfWork":
        self._conn = self._engine.connect()
        self._transaction = self._conn.begin()
        self._definitions = SqlPropertyDefinitionRepository(self._conn)
        self._properties = SqlEntityPropertyRepository(self._conn, self._compatibility)
        self._json_cache = SqlJsonCacheRepository(self._conn, self._entity_tables)
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type:
            self.rollback()
        if self._conn is not None:
            self._conn.close()

    @property
    def connection(self) -> sa.Connection:
        if self._conn is None:
            raise StorageError("Unit of work is not active")
        return self._conn

    @property
    def definitions(self) -> SqlPropertyDefinitionRepository:
        return self._definitions

    @property
    def properties(self) -> SqlEntityPropertyRepository:
        return self._properties

    @property
    def json_cache(self) -> SqlJsonCacheRepository:
        return self._json_cache

    @contextmanager
    def savepoint(self) -> Iterator[None]:
        """Nested transaction; a database error rolls back only this block."""
        nested = self.connection.begin_nested()
        try:
            yield
        except SQLAlchemyError as exc:
            if nested.is_active:
                nested.rollback()
            raise StorageError(_describe(exc), {"error": type(exc).__name__}) from exc
        except BaseException:
            if nested.is_active:
                nested.rollback()
            raise
        else:
            nested.commit()

    def commit(self) -> None:
        if self._transaction is not None and self._transaction.is_active:
            self._transaction.commit()

    def rollback(self) -> None:
        if self._transaction is not None and self._transaction.is_active:
            self._transaction.rollback()


def create_uow_factory(
    engine: sa.Engine,
    compatibility: DatabaseCompatibility,
    entity_tables: EntityTableRegistry,
) -> Callable[[], AbstractContextManager[SqlUnitOfWork]]:
    """Create UnitOfWork factory (context manager); database errors become StorageError."""

    @contextmanager
    def factory() -> Iterator[SqlUnitOfWork]:
        try:
            with SqlUnitOfWork(engine, compatibility, entity_tables) as uow:
                try:
                    yield uow
                    uow.commit()
                except BaseException:
                    uow.rollback()
                    raise
        except SQLAlchemyError as exc:
            raise StorageError(_describe(exc), {"error": type(exc).__name__}) from exc

    return factory


def _describe(exc: SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc)
