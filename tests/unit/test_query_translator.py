"""Unit tests for filter-to-SQL translation across dialects."""

import pytest
from sqlalchemy.dialects import mysql, postgresql, sqlite

from dynprops.application.dto.search_filter import (
    FilterOperator,
    PropertyFilter,
    ResolvedFilter,
    SearchLogic,
)
from dynprops.domain.entities import PropertyDefinition
from dynprops.domain.exceptions import PropertyValidationError
from dynprops.domain.value_objects import Capability, PropertyType
from dynprops.infrastructure.persistence.sql.capabilities import (
    MySQLBackend,
    PostgresBackend,
    SqlBackend,
    SQLiteBackend,
)
from dynprops.infrastructure.persistence.sql.query_translator import QueryTranslator

ALL_ON = dict.fromkeys(Capability, True)


class StubCompatibility:
    """Fixed backend and flags without a live database."""

    def __init__(self, backend: SqlBackend, features: dict[Capability, bool]) -> None:
        self.backend = backend
        self._features = features

    def supports(self, capability) -> bool:
        return self._features.get(Capability(capability), False)


BIO = PropertyDefinition(name="bio", label="Bio", type=PropertyType.TEXT)
AGE = PropertyDefinition(name="age", label="Age", type=PropertyType.NUMBER)


def _sql(backend: SqlBackend, dialect, resolved: list[ResolvedFilter], features=None) -> str:
    translator = QueryTranslator(StubCompatibility(backend, ALL_ON if features is None else features))
    stmt = translator.entity_ids_query("users", resolved, SearchLogic.AND)
    return str(stmt.compile(dialect=dialect))


def _text(operator=FilterOperator.LIKE, **options) -> ResolvedFilter:
    return ResolvedFilter(PropertyFilter("bio", operator, "Smith", options=options), BIO, "Smith")


def test_one_exists_per_filter() -> None:
    """Each predicate is its own correlated EXISTS on an aliased fact table."""
    sql = _sql(
        SqlBackend(),
        sqlite.dialect(),
        [
            ResolvedFilter(PropertyFilter("age", FilterOperator.GT, 18), AGE, 18.0),
            _text(),
        ],
    )
    assert sql.startswith("SELECT DISTINCT entity_property.entity_id")
    assert "ep_0.number_value >" in sql
    assert "ep_1" in sql
    assert sql.count("EXISTS") == 2


def test_generic_like_is_escaped_and_case_insensitive() -> None:
    sql = _sql(SqlBackend(), sqlite.dialect(), [_text()], features={})
    assert "lower(ep_0.string_value) LIKE" in sql
    assert "ESCAPE '!'" in sql


def test_postgres_fulltext_uses_tsvector() -> None:
    sql = _sql(PostgresBackend(), postgresql.dialect(), [_text(full_text=True)])
    assert "to_tsvector" in sql
    assert "@@ plainto_tsquery" in sql


def test_postgres_fulltext_falls_back_without_capability() -> None:
    """Without the capability the same request degrades to LIKE."""
    sql = _sql(PostgresBackend(), postgresql.dialect(), [_text(full_text=True)], features={})
    assert "to_tsvector" not in sql
    assert "LIKE" in sql


def test_mysql_fulltext_uses_match_against() -> None:
    sql = _sql(MySQLBackend(), mysql.dialect(), [_text(FilterOperator.FULLTEXT)])
    assert "MATCH (ep_0.string_value) AGAINST" in sql


def test_mysql_case_sensitive_like_uses_binary_collation() -> None:
    sql = _sql(MySQLBackend(), mysql.dialect(), [_text(case_sensitive=True)])
    assert "COLLATE utf8mb4_bin" in sql


def test_sqlite_case_sensitive_like_uses_instr() -> None:
    sql = _sql(SQLiteBackend(), sqlite.dialect(), [_text(case_sensitive=True)])
    assert "instr(ep_0.string_value" in sql


def test_ilike_ignores_case_sensitive_option() -> None:
    sql = _sql(SQLiteBackend(), sqlite.dialect(), [_text(FilterOperator.ILIKE, case_sensitive=True)])
    assert "instr(" not in sql
    assert "lower(" in sql


def test_like_on_number_casts_to_string() -> None:
    resolved = ResolvedFilter(PropertyFilter("age", FilterOperator.LIKE, "3"), AGE, "3")
    sql = _sql(PostgresBackend(), postgresql.dialect(), [resolved])
    assert "CAST(ep_0.number_value AS VARCHAR)" in sql


def test_between_with_open_bound() -> None:
    resolved = ResolvedFilter(
        PropertyFilter("age", FilterOperator.BETWEEN, min=20), AGE, min=20.0
    )
    sql = _sql(SqlBackend(), sqlite.dialect(), [resolved])
    assert "ep_0.number_value >=" in sql
    assert "BETWEEN" not in sql


def test_between_without_bounds_is_rejected() -> None:
    resolved = ResolvedFilter(PropertyFilter("age", FilterOperator.BETWEEN), AGE)
    with pytest.raises(PropertyValidationError) as info:
        _sql(SqlBackend(), sqlite.dialect(), [resolved])
    assert info.value.rule == "between"
    assert info.value.property_name == "age"


def test_null_is_negated_exists() -> None:
    resolved = ResolvedFilter(PropertyFilter("age", FilterOperator.NULL), AGE)
    sql = _sql(SqlBackend(), sqlite.dialect(), [resolved])
    assert "NOT" in sql
    assert "ep_0.number_value IS NOT NULL" in sql


def test_or_logic_joins_predicates_with_or() -> None:
    translator = QueryTranslator(StubCompatibility(SqlBackend(), {}))
    stmt = translator.entity_ids_query(
        "users",
        [
            ResolvedFilter(PropertyFilter("age", FilterOperator.EQ, 1), AGE, 1.0),
            ResolvedFilter(PropertyFilter("age", FilterOperator.EQ, 2), AGE, 2.0),
        ],
        SearchLogic.OR,
    )
    assert " OR " in str(stmt.compile(dialect=sqlite.dialect()))


def test_unknown_property_adds_no_subquery() -> None:
    resolved = ResolvedFilter(PropertyFilter("ghost", FilterOperator.EQ, "x"), None)
    sql = _sql(SqlBackend(), sqlite.dialect(), [resolved])
    assert "ep_0" not in sql
