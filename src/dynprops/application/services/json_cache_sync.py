"""JSON cache synchronizer - keeps the denormalized snapshot coherent with fact rows."""

import logging
from typing import Any

from dynprops.application.ports import UnitOfWork, UnitOfWorkFactory
from dynprops.application.services.value_mapper import ValueMapper
from dynprops.config import PropertySettings
from dynprops.domain.entities import EntityRef
from dynprops.domain.exceptions import DynPropsError

logger = logging.getLogger(__name__)


class JsonCacheSynchronizer:
    """Rebuilds per-entity JSON snapshots; never the source of truth.

    A cache value of None means stale or absent; readers fall back to fact rows.
    """

    def __init__(self, settings: PropertySettings, mapper: ValueMapper) -> None:
        self._settings = settings
        self._mapper = mapper
        self._has_cache: dict[str, bool] = {}

    def has_cache(self, uow: UnitOfWork, entity_type: str) -> bool:
        """Structural check, decided once per entity type."""
        if not self._settings.json_cache_enabled:
            return False
        if entity_type not in self._has_cache:
            self._has_cache[entity_type] = uow.json_cache.has_cache_column(entity_type)
        return self._has_cache[entity_type]

    def build(self, uow: UnitOfWork, entity: EntityRef) -> dict[str, Any]:
        """Project the entity's current fact rows to a JSON-safe mapping."""
        rows = uow.properties.list_by_entity(entity)
        return {
            row.property_name: self._mapper.to_json(row.value)
            for row in sorted(rows, key=lambda r: r.property_name)
            if row.value is not None
        }

    def sync(self, uow: UnitOfWork, entity: EntityRef) -> dict[str, Any] | None:
        """Recompute and store the snapshot; returns it, or None without a cache column."""
        if not self.has_cache(uow, entity.entity_type):
            return None
        data = self.build(uow, entity)
        uow.json_cache.write(entity, data)
        return data

    def invalidate(self, uow: UnitOfWork, entity: EntityRef) -> None:
        """Mark the snapshot stale so readers fall back to fact rows."""
        if self.has_cache(uow, entity.entity_type):
            uow.json_cache.write(entity, None)

    def read(self, uow: UnitOfWork, entity: EntityRef) -> dict[str, Any] | None:
        if not self.has_cache(uow, entity.entity_type):
            return None
        return uow.json_cache.read(entity)

    def sync_all(
        self,
        uow_factory: UnitOfWorkFactory,
        entity_type: str,
        batch_size: int,
    ) -> int:
        """Resync every entity of a type in keyset-paginated batches.

        Each batch commits on its own; each entity runs in a savepoint so a
        failing entity is marked stale and skipped. Returns the number synced.
        """
        batch_size = max(1, batch_size)
        synced = 0
        after: str | None = None
        while True:
            batch_synced = 0
            with uow_factory() as uow:
                if not self.has_cache(uow, entity_type):
                    return 0
                entity_ids = uow.json_cache.list_entity_ids(entity_type, after, batch_size)
                for entity_id in entity_ids:
                    entity = EntityRef(entity_type, entity_id)
                    try:
                        with uow.savepoint():
                            self.sync(uow, entity)
                    except DynPropsError as exc:
                        logger.warning(
                            "JSON cache sync failed for %s %s: %s",
                            entity_type,
                            entity_id,
                            exc,
                        )
                        self._mark_stale(uow, entity)
                        continue
                    batch_synced += 1
            synced += batch_synced
            logger.debug(
                "Synced %d/%d %s entities (after=%s)",
                batch_synced,
                len(entity_ids),
                entity_type,
                after,
            )
            if len(entity_ids) < batch_size:
                break
            after = entity_ids[-1]
        logger.info("JSON cache resync for %s finished: %d entities", entity_type, synced)
        return synced

    def _mark_stale(self, uow: UnitOfWork, entity: EntityRef) -> None:
        try:
            with uow.savepoint():
                self.invalidate(uow, entity)
        except DynPropsError as exc:
            logger.warning(
                "Could not mark JSON cache stale for %s %s: %s",
                entity.entity_type,
                entity.entity_id,
                exc,
            )
