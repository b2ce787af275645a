"""Property service - the public API for dynamic properties."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from dynprops.application.dto.search_filter import (
    FilterOperator,
    PropertyFilter,
    ResolvedFilter,
    SearchLogic,
    parse_filters,
)
from dynprops.application.ports import (
    DatabaseCapabilities,
    UnitOfWork,
    UnitOfWorkFactory,
)
from dynprops.application.services.definition_cache import DefinitionCache
from dynprops.application.services.json_cache_sync import JsonCacheSynchronizer
from dynprops.application.services.validation import PropertyValidator
from dynprops.application.services.value_mapper import ValueMapper
from dynprops.config import PropertySettings
from dynprops.domain.entities import EntityPropertyValue, EntityRef, PropertyDefinition
from dynprops.domain.exceptions import (
    PropertyNotFoundError,
    PropertyOperationError,
    PropertyValidationError,
    StorageError,
)
from dynprops.domain.value_objects import PropertyType

logger = logging.getLogger(__name__)


class PropertyService:
    """Set, read, remove and search typed properties of host entities.

    Every public call runs in one unit of work (one transaction). Validation
    and not-found errors surface as-is; storage failures are logged and
    re-raised as PropertyOperationError.
    """

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        compatibility: DatabaseCapabilities,
        settings: PropertySettings | None = None,
        validator: PropertyValidator | None = None,
        mapper: ValueMapper | None = None,
        cache_sync: JsonCacheSynchronizer | None = None,
        definition_cache: DefinitionCache | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._compatibility = compatibility
        self._settings = settings or PropertySettings()
        self._validator = validator or PropertyValidator(self._settings)
        self._mapper = mapper or ValueMapper(self._settings)
        self._cache_sync = cache_sync or JsonCacheSynchronizer(self._settings, self._mapper)
        self._definitions = definition_cache or DefinitionCache(self._settings.cache_ttl)

    @property
    def settings(self) -> PropertySettings:
        return self._settings

    @contextmanager
    def _operation(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except StorageError as exc:
            logger.error(
                "Property operation '%s' failed (%s): %s",
                operation,
                ", ".join(f"{k}={v}" for k, v in context.items()),
                exc,
            )
            raise PropertyOperationError(
                operation,
                "An unexpected storage error occurred",
                {**context, "original_error": str(exc)},
            ) from exc

    def _definition(self, uow: UnitOfWork, name: str) -> PropertyDefinition | None:
        return self._definitions.get(name, uow.definitions.get_by_name)

    def _require_definition(
        self, uow: UnitOfWork, name: str, entity: EntityRef
    ) -> PropertyDefinition:
        definition = self._definition(uow, name)
        if definition is None:
            raise PropertyNotFoundError(
                name, {"entity_type": entity.entity_type, "entity_id": entity.entity_id}
            )
        return definition

    @staticmethod
    def _require_saved(entity: EntityRef, operation: str) -> None:
        if not entity.entity_id:
            raise PropertyOperationError(
                operation,
                "Entity must be saved before setting properties",
                {"entity_type": entity.entity_type},
            )

    def _write(
        self,
        uow: UnitOfWork,
        entity: EntityRef,
        definition: PropertyDefinition,
        raw: Any,
    ) -> None:
        value = self._mapper.coerce(definition, raw)
        if value is None:
            uow.properties.delete(entity, definition.name)
            return
        uow.properties.upsert(
            EntityPropertyValue(
                entity_type=entity.entity_type,
                entity_id=entity.entity_id,
                property_name=definition.name,
                value=value,
            )
        )

    # Writes

    def set_property(self, entity: EntityRef, name: str, value: Any) -> None:
        """Validate, coerce and upsert one value, then resync the entity's cache."""
        self._require_saved(entity, "set property")
        with self._operation(
            "set property",
            entity_type=entity.entity_type,
            entity_id=entity.entity_id,
            property_name=name,
        ):
            with self._uow_factory() as uow:
                definition = self._require_definition(uow, name, entity)
                self._validator.validate_value(definition, value)
                self._write(uow, entity, definition, value)
                self._cache_sync.sync(uow, entity)

    def set_properties(self, entity: EntityRef, values: dict[str, Any]) -> None:
        """Set many values atomically; nothing is written unless all validate."""
        if not values:
            return
        self._require_saved(entity, "set properties")
        with self._operation(
            "set properties",
            entity_type=entity.entity_type,
            entity_id=entity.entity_id,
            properties=list(values),
        ):
            with self._uow_factory() as uow:
                definitions = {name: self._definition(uow, name) for name in values}
                missing = [name for name, d in definitions.items() if d is None]
                if missing:
                    raise PropertyNotFoundError(
                        missing[0],
                        {
                            "entity_type": entity.entity_type,
                            "entity_id": entity.entity_id,
                            "missing_properties": missing,
                        },
                    )

                errors: dict[str, str] = {}
                rules: list[str | None] = []
                for name, value in values.items():
                    try:
                        self._validator.validate_value(definitions[name], value)
                    except PropertyValidationError as exc:
                        errors[name] = exc.user_message
                        rules.append(exc.rule)
                if errors:
                    raise PropertyValidationError(
                        "multiple properties",
                        values,
                        errors,
                        rule=rules[0] if len(rules) == 1 else "multiple",
                        context={
                            "entity_type": entity.entity_type,
                            "entity_id": entity.entity_id,
                            "failed_properties": list(errors),
                        },
                    )

                for name, value in values.items():
                    self._write(uow, entity, definitions[name], value)
                self._cache_sync.sync(uow, entity)

    def remove_property(self, entity: EntityRef, name: str) -> bool:
        """Delete the value if present; returns whether a row was removed."""
        with self._operation(
            "remove property",
            entity_type=entity.entity_type,
            entity_id=entity.entity_id,
            property_name=name,
        ):
            with self._uow_factory() as uow:
                removed = uow.properties.delete(entity, name)
                self._cache_sync.sync(uow, entity)
        return removed

    def remove_all_properties(self, entity: EntityRef) -> int:
        """Delete every value of an entity (host entity deletion cascade)."""
        with self._operation(
            "remove properties",
            entity_type=entity.entity_type,
            entity_id=entity.entity_id,
        ):
            with self._uow_factory() as uow:
                removed = uow.properties.delete_by_entity(entity)
                self._cache_sync.sync(uow, entity)
        return removed

    # Reads

    def get_property(self, entity: EntityRef, name: str) -> Any:
        """Typed value or None when unset; the JSON cache is preferred when fresh."""
        with self._operation(
            "get property",
            entity_type=entity.entity_type,
            entity_id=entity.entity_id,
            property_name=name,
        ):
            with self._uow_factory() as uow:
                cached = self._cache_sync.read(uow, entity)
                if cached is not None:
                    if name not in cached:
                        return None
                    return self._mapper.from_json(self._definition(uow, name), cached[name])
                row = uow.properties.get(entity, name)
                return self._mapper.to_python(row.value) if row else None

    def get_properties(self, entity: EntityRef) -> dict[str, Any]:
        """All values of an entity as {name: typed value}."""
        with self._operation(
            "get properties",
            entity_type=entity.entity_type,
            entity_id=entity.entity_id,
        ):
            with self._uow_factory() as uow:
                cached = self._cache_sync.read(uow, entity)
                if cached is not None:
                    definitions = {
                        d.name: d for d in uow.definitions.list_by_names(list(cached))
                    }
                    return {
                        name: self._mapper.from_json(definitions.get(name), raw)
                        for name, raw in cached.items()
                    }
                return {
                    row.property_name: self._mapper.to_python(row.value)
                    for row in uow.properties.list_by_entity(entity)
                    if row.value is not None
                }

    # JSON cache

    def sync_json_column(self, entity: EntityRef) -> dict[str, Any] | None:
        """Rebuild one entity's cache from fact rows; None when the type has no cache."""
        with self._operation(
            "sync json column",
            entity_type=entity.entity_type,
            entity_id=entity.entity_id,
        ):
            with self._uow_factory() as uow:
                return self._cache_sync.sync(uow, entity)

    def sync_all_json_columns(self, entity_type: str, batch_size: int | None = None) -> int:
        """Rebuild caches for all entities of a type; returns the count synced."""
        with self._operation("sync json columns", entity_type=entity_type):
            return self._cache_sync.sync_all(
                self._uow_factory,
                entity_type,
                batch_size or self._settings.batch_size,
            )

    # Search

    def search(self, entity_type: str, filters: dict[str, Any]) -> set[str]:
        """Entity ids matching every filter (implicit AND)."""
        return self.advanced_search(entity_type, filters, SearchLogic.AND)

    def advanced_search(
        self,
        entity_type: str,
        filters: dict[str, Any],
        logic: str | SearchLogic = SearchLogic.AND,
    ) -> set[str]:
        """Entity ids matching the filters combined with AND or OR."""
        if not filters:
            return set()
        return self._search(entity_type, parse_filters(filters), SearchLogic.parse(logic))

    def search_text(
        self,
        entity_type: str,
        property_name: str,
        term: str,
        options: dict[str, Any] | None = None,
    ) -> set[str]:
        """Substring (or full-text, when requested and available) match on a text property."""
        return self._search(
            entity_type,
            [PropertyFilter(property_name, FilterOperator.LIKE, term, options=dict(options or {}))],
            SearchLogic.AND,
            expected_type=PropertyType.TEXT,
        )

    def search_number_range(
        self, entity_type: str, property_name: str, min_value: Any, max_value: Any
    ) -> set[str]:
        return self._search(
            entity_type,
            [PropertyFilter(property_name, FilterOperator.BETWEEN, min=min_value, max=max_value)],
            SearchLogic.AND,
            expected_type=PropertyType.NUMBER,
        )

    def search_date_range(
        self, entity_type: str, property_name: str, start: Any, end: Any
    ) -> set[str]:
        return self._search(
            entity_type,
            [PropertyFilter(property_name, FilterOperator.BETWEEN, min=start, max=end)],
            SearchLogic.AND,
            expected_type=PropertyType.DATE,
        )

    def search_boolean(self, entity_type: str, property_name: str, value: Any) -> set[str]:
        return self._search(
            entity_type,
            [PropertyFilter(property_name, FilterOperator.EQ, value)],
            SearchLogic.AND,
            expected_type=PropertyType.BOOLEAN,
        )

    def _search(
        self,
        entity_type: str,
        filters: list[PropertyFilter],
        logic: SearchLogic,
        expected_type: PropertyType | None = None,
    ) -> set[str]:
        with self._operation("search", entity_type=entity_type, logic=logic.value):
            with self._uow_factory() as uow:
                definitions = [self._definition(uow, f.property_name) for f in filters]
                if expected_type is not None and any(
                    d is None or d.type != expected_type for d in definitions
                ):
                    return set()
                resolved = [self._resolve(f, d) for f, d in zip(filters, definitions)]
                return uow.properties.search(entity_type, resolved, logic)

    def _resolve(
        self, search_filter: PropertyFilter, definition: PropertyDefinition | None
    ) -> ResolvedFilter:
        """Coerce operands by the declared type only."""
        if definition is None:
            return ResolvedFilter(search_filter, None)

        operator = search_filter.operator
        if search_filter.value is None and operator in (FilterOperator.EQ, FilterOperator.NE):
            operator = FilterOperator.NULL if operator == FilterOperator.EQ else FilterOperator.NOT_NULL
            search_filter = replace(search_filter, operator=operator)

        coerce = self._mapper.coerce_operand
        match operator:
            case FilterOperator.NULL | FilterOperator.NOT_NULL:
                return ResolvedFilter(search_filter, definition)
            case FilterOperator.BETWEEN:
                return ResolvedFilter(
                    search_filter,
                    definition,
                    min=None if search_filter.min is None else coerce(definition, search_filter.min),
                    max=None if search_filter.max is None else coerce(definition, search_filter.max),
                )
            case FilterOperator.IN:
                raw = search_filter.value
                values = raw if isinstance(raw, (list, tuple, set, frozenset)) else [raw]
                return ResolvedFilter(
                    search_filter,
                    definition,
                    value=[coerce(definition, v) for v in values if v is not None],
                )
            case FilterOperator.LIKE | FilterOperator.ILIKE | FilterOperator.FULLTEXT:
                return ResolvedFilter(
                    search_filter,
                    definition,
                    value="" if search_filter.value is None else str(search_filter.value),
                )
            case _:
                return ResolvedFilter(
                    search_filter, definition, value=coerce(definition, search_filter.value)
                )

    # Definitions

    def create_property(self, data: dict[str, Any]) -> PropertyDefinition:
        """Validate and store a new property definition."""
        errors = self._validator.validate_definition(data)
        if errors:
            raise PropertyValidationError(
                "property definition",
                data,
                errors,
                rule="definition",
                context={"operation": "create_property"},
            )

        name = data["name"]
        with self._operation("create property", property_name=name):
            with self._uow_factory() as uow:
                if uow.definitions.get_by_name(name) is not None:
                    raise PropertyValidationError(
                        "property definition",
                        data,
                        [f"A property with the name '{name}' already exists."],
                        rule="duplicate",
                        context={"operation": "create_property", "duplicate_name": name},
                    )
                now = datetime.now(UTC)
                created = uow.definitions.create(
                    PropertyDefinition(
                        name=name,
                        label=data["label"],
                        type=PropertyType(data["type"]),
                        required=bool(data.get("required", False)),
                        options=list(data.get("options") or []),
                        validation=dict(data.get("validation") or {}),
                        created_at=now,
                        updated_at=now,
                    )
                )
        self._definitions.invalidate(name)
        logger.info("Created property '%s' (%s)", name, created.type)
        return created

    def delete_property(self, name: str) -> int:
        """Delete a definition and its values; returns the number of entities affected."""
        with self._operation("delete property", property_name=name):
            with self._uow_factory() as uow:
                if uow.definitions.get_by_name(name) is None:
                    raise PropertyNotFoundError(name)
                affected = uow.properties.entity_ids_with_property(name)
                uow.properties.delete_by_property(name)
                uow.definitions.delete(name)
                for entity in affected:
                    self._cache_sync.sync(uow, entity)
        self._definitions.invalidate(name)
        logger.info("Deleted property '%s' (%d entities affected)", name, len(affected))
        return len(affected)

    def list_properties(self) -> list[PropertyDefinition]:
        with self._operation("list properties"):
            with self._uow_factory() as uow:
                return uow.definitions.list_all()

    def get_property_definition(self, name: str) -> PropertyDefinition:
        with self._operation("get property definition", property_name=name):
            with self._uow_factory() as uow:
                definition = self._definition(uow, name)
        if definition is None:
            raise PropertyNotFoundError(name)
        return definition

    # Database

    def get_database_info(self) -> dict[str, Any]:
        return self._compatibility.info()

    def optimize_database(self) -> list[str]:
        """Apply backend-specific search indexes; returns the statements that succeeded."""
        with self._operation("optimize database", driver=self._compatibility.driver):
            return self._compatibility.apply_optimizations()
