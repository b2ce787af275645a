"""Unit of Work port - transactional boundary."""

from contextlib import AbstractContextManager
from typing import Protocol

from dynprops.application.ports.repositories import (
    EntityPropertyRepository,
    JsonCacheRepository,
    PropertyDefinitionRepository,
)


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def definitions(self) -> PropertyDefinitionRepository: ...

    @property
    def properties(self) -> EntityPropertyRepository: ...

    @property
    def json_cache(self) -> JsonCacheRepository: ...

    def savepoint(self) -> AbstractContextManager[None]: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    def __call__(self) -> AbstractContextManager[UnitOfWork]: ...
