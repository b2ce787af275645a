"""Query translator - filter mappings to dialect-aware SQL."""

from typing import Any

import sqlalchemy as sa

from dynprops.application.dto.search_filter import FilterOperator, ResolvedFilter, SearchLogic
from dynprops.domain.entities import PropertyDefinition
from dynprops.domain.exceptions import PropertyValidationError
from dynprops.domain.value_objects import Capability, PropertyType
from dynprops.infrastructure.persistence.sql.capabilities import DatabaseCompatibility
from dynprops.infrastructure.persistence.sql.tables import entity_property

_COMPARISONS = {
    FilterOperator.EQ: lambda col, v: col == v,
    FilterOperator.NE: lambda col, v: col != v,
    FilterOperator.LT: lambda col, v: col < v,
    FilterOperator.LTE: lambda col, v: col <= v,
    FilterOperator.GT: lambda col, v: col > v,
    FilterOperator.GTE: lambda col, v: col >= v,
}

_TEXT_OPERATORS = (FilterOperator.LIKE, FilterOperator.ILIKE, FilterOperator.FULLTEXT)


class QueryTranslator:
    """Builds SELECT DISTINCT entity_id with one correlated EXISTS per predicate.

    Each predicate targets the column of the property's declared type.
    Unknown properties match nothing.
    """

    def __init__(self, compatibility: DatabaseCompatibility) -> None:
        self._compat = compatibility

    def entity_ids_query(
        self,
        entity_type: str,
        filters: list[ResolvedFilter],
        logic: SearchLogic = SearchLogic.AND,
    ) -> sa.Select[Any]:
        outer = entity_property
        predicates = [self.predicate(r, index) for index, r in enumerate(filters)]
        combined = sa.and_(*predicates) if logic == SearchLogic.AND else sa.or_(*predicates)
        return (
            sa.select(outer.c.entity_id)
            .where(outer.c.entity_type == entity_type, combined)
            .distinct()
        )

    def predicate(self, resolved: ResolvedFilter, index: int = 0) -> sa.ColumnElement[bool]:
        definition = resolved.definition
        if definition is None:
            return sa.false()

        fact = entity_property.alias(f"ep_{index}")
        column = fact.c[definition.value_column]
        scope = [
            fact.c.entity_type == entity_property.c.entity_type,
            fact.c.entity_id == entity_property.c.entity_id,
            fact.c.property_name == definition.name,
        ]

        if resolved.operator == FilterOperator.NULL:
            return ~sa.exists().where(*scope, column.is_not(None))
        return sa.exists().where(*scope, self._typed_predicate(resolved, definition, fact, column))

    def _typed_predicate(
        self,
        resolved: ResolvedFilter,
        definition: PropertyDefinition,
        fact: sa.FromClause,
        column: sa.ColumnElement[Any],
    ) -> sa.ColumnElement[bool]:
        operator = resolved.operator

        if operator in _COMPARISONS:
            return _COMPARISONS[operator](column, resolved.value)
        if operator == FilterOperator.NOT_NULL:
            return column.is_not(None)
        if operator == FilterOperator.IN:
            return column.in_(resolved.value or [])
        if operator == FilterOperator.BETWEEN:
            return _range(resolved, definition.name, column)
        if operator in _TEXT_OPERATORS:
            return self._text_predicate(resolved, definition, fact, column)
        raise PropertyValidationError(
            definition.name, operator, [f"Unsupported search operator '{operator}'."], rule="operator"
        )

    def _text_predicate(
        self,
        resolved: ResolvedFilter,
        definition: PropertyDefinition,
        fact: sa.FromClause,
        column: sa.ColumnElement[Any],
    ) -> sa.ColumnElement[bool]:
        term = str(resolved.value or "")
        backend = self._compat.backend

        if (
            resolved.filter.full_text
            and definition.type == PropertyType.TEXT
            and self._compat.supports(Capability.FULLTEXT_SEARCH)
        ):
            return backend.fulltext_predicate(fact, term)

        if definition.value_column != "string_value":
            column = sa.cast(column, sa.String)
        case_sensitive = (
            resolved.operator == FilterOperator.LIKE
            and resolved.filter.case_sensitive
            and self._compat.supports(Capability.CASE_SENSITIVE_LIKE)
        )
        return backend.like_predicate(column, term, case_sensitive)


def _range(
    resolved: ResolvedFilter, name: str, column: sa.ColumnElement[Any]
) -> sa.ColumnElement[bool]:
    """Inclusive range; a missing bound leaves that side open."""
    low, high = resolved.min, resolved.max
    if low is not None and high is not None:
        return column.between(low, high)
    if low is not None:
        return column >= low
    if high is not None:
        return column <= high
    raise PropertyValidationError(
        name, None, ["A between search needs a min or max value."], rule="between"
    )
