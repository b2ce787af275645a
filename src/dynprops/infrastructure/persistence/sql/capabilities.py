"""Capability negotiation - per-dialect backend adapters behind supports() flags."""

import logging
from collections.abc import Callable, Iterable
from typing import Any

import sqlalchemy as sa
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from dynprops.domain.value_objects import Capability

logger = logging.getLogger(__name__)

FTS_TABLE = "entity_property_fts"
MYSQL_FULLTEXT_INDEX = "ft_string_content"
_LIKE_ESCAPE = "!"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user terms match literally."""
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def _probe(engine: sa.Engine, check: Callable[[sa.Connection], Any], name: str) -> bool:
    """Run a probe on its own connection; any database error means absent."""
    try:
        with engine.connect() as conn:
            result = check(conn)
            conn.rollback()
    except SQLAlchemyError as exc:
        logger.debug("Capability probe %s failed: %s", name, exc)
        return False
    return result is not False


class SqlBackend:
    """Portable adapter; dialect backends override what they do natively."""

    name = "generic"
    json_column_type = "text"

    def probe(self, engine: sa.Engine) -> dict[Capability, bool]:
        return dict.fromkeys(Capability, False)

    def fulltext_predicate(self, table: sa.FromClause, term: str) -> sa.ColumnElement[bool]:
        return self.like_predicate(table.c.string_value, term, case_sensitive=False)

    def like_predicate(
        self, column: sa.ColumnElement[Any], term: str, case_sensitive: bool
    ) -> sa.ColumnElement[bool]:
        """Substring match; case-insensitive unless requested and overridden."""
        pattern = f"%{escape_like(term.lower())}%"
        return sa.func.lower(column).like(pattern, escape=_LIKE_ESCAPE)

    def upsert(
        self,
        conn: sa.Connection,
        table: sa.Table,
        values: dict[str, Any],
        keys: list[str],
        update_columns: Iterable[str],
    ) -> None:
        where = sa.and_(*(table.c[k] == values[k] for k in keys))
        updated = conn.execute(
            sa.update(table).where(where).values({c: values[c] for c in update_columns})
        )
        if updated.rowcount == 0:
            conn.execute(sa.insert(table).values(values))

    def optimization_statements(self, features: dict[Capability, bool]) -> list[str]:
        return []

    def migration_config(self, features: dict[Capability, bool]) -> dict[str, Any]:
        return {
            "supports_fulltext": features.get(Capability.FTS_EXTENSION, False),
            "json_column_type": self.json_column_type,
            "text_column_type": "text",
            "supports_generated_columns": features.get(Capability.GENERATED_COLUMNS, False),
        }


class PostgresBackend(SqlBackend):
    name = "postgresql"
    json_column_type = "jsonb"

    def probe(self, engine: sa.Engine) -> dict[Capability, bool]:
        with engine.connect() as conn:
            version = conn.dialect.server_version_info or (0,)
        return {
            Capability.GENERATED_COLUMNS: version >= (12,),
            Capability.FTS_EXTENSION: True,
            Capability.JSON1_EXTENSION: True,
            Capability.JSON_FUNCTIONS: True,
            Capability.FULLTEXT_SEARCH: True,
            Capability.CASE_SENSITIVE_LIKE: True,
        }

    def fulltext_predicate(self, table: sa.FromClause, term: str) -> sa.ColumnElement[bool]:
        regconfig = sa.literal_column("'english'::regconfig")
        return sa.func.to_tsvector(regconfig, table.c.string_value).bool_op("@@")(
            sa.func.plainto_tsquery(regconfig, term)
        )

    def like_predicate(
        self, column: sa.ColumnElement[Any], term: str, case_sensitive: bool
    ) -> sa.ColumnElement[bool]:
        if case_sensitive:
            return column.like(f"%{escape_like(term)}%", escape=_LIKE_ESCAPE)
        return super().like_predicate(column, term, case_sensitive)

    def upsert(
        self,
        conn: sa.Connection,
        table: sa.Table,
        values: dict[str, Any],
        keys: list[str],
        update_columns: Iterable[str],
    ) -> None:
        stmt = postgresql.insert(table).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=keys,
            set_={c: stmt.excluded[c] for c in update_columns},
        )
        conn.execute(stmt)

    def optimization_statements(self, features: dict[Capability, bool]) -> list[str]:
        statements = [
            "CREATE INDEX IF NOT EXISTS idx_entity_property_number_present "
            "ON entity_property (entity_type, property_name, number_value) "
            "WHERE number_value IS NOT NULL",
            "CREATE INDEX IF NOT EXISTS idx_entity_property_date_present "
            "ON entity_property (entity_type, property_name, date_value) "
            "WHERE date_value IS NOT NULL",
        ]
        if features.get(Capability.FTS_EXTENSION):
            statements.insert(
                0,
                "CREATE INDEX IF NOT EXISTS idx_entity_property_gin_string "
                "ON entity_property USING gin (to_tsvector('english', string_value)) "
                "WHERE string_value IS NOT NULL",
            )
        return statements


class MySQLBackend(SqlBackend):
    name = "mysql"
    json_column_type = "json"

    def probe(self, engine: sa.Engine) -> dict[Capability, bool]:
        with engine.connect() as conn:
            version = conn.dialect.server_version_info or (0,)
        has_index = _probe(
            engine,
            lambda conn: any(
                ix.get("name") == MYSQL_FULLTEXT_INDEX
                for ix in sa.inspect(conn).get_indexes("entity_property")
            ),
            "mysql fulltext index",
        )
        return {
            Capability.GENERATED_COLUMNS: version >= (5, 7),
            Capability.FTS_EXTENSION: version >= (5, 6),
            Capability.JSON1_EXTENSION: version >= (5, 7),
            Capability.JSON_FUNCTIONS: version >= (5, 7),
            Capability.FULLTEXT_SEARCH: has_index,
            Capability.CASE_SENSITIVE_LIKE: True,
        }

    def fulltext_predicate(self, table: sa.FromClause, term: str) -> sa.ColumnElement[bool]:
        # MATCH ... AGAINST (... IN BOOLEAN MODE)
        return table.c.string_value.match(term)

    def like_predicate(
        self, column: sa.ColumnElement[Any], term: str, case_sensitive: bool
    ) -> sa.ColumnElement[bool]:
        if case_sensitive:
            return column.collate("utf8mb4_bin").like(
                f"%{escape_like(term)}%", escape=_LIKE_ESCAPE
            )
        return super().like_predicate(column, term, case_sensitive)

    def upsert(
        self,
        conn: sa.Connection,
        table: sa.Table,
        values: dict[str, Any],
        keys: list[str],
        update_columns: Iterable[str],
    ) -> None:
        stmt = mysql.insert(table).values(values)
        stmt = stmt.on_duplicate_key_update({c: stmt.inserted[c] for c in update_columns})
        conn.execute(stmt)

    def optimization_statements(self, features: dict[Capability, bool]) -> list[str]:
        if features.get(Capability.FTS_EXTENSION) and not features.get(Capability.FULLTEXT_SEARCH):
            return [
                f"ALTER TABLE entity_property ADD FULLTEXT INDEX {MYSQL_FULLTEXT_INDEX} (string_value)"
            ]
        return []


class SQLiteBackend(SqlBackend):
    name = "sqlite"

    def probe(self, engine: sa.Engine) -> dict[Capability, bool]:
        with engine.connect() as conn:
            version = conn.dialect.server_version_info or (0,)
        fts = _probe(
            engine,
            lambda conn: (
                conn.exec_driver_sql(
                    "CREATE VIRTUAL TABLE IF NOT EXISTS temp.dynprops_fts_probe USING fts5(content)"
                ),
                conn.exec_driver_sql("DROP TABLE IF EXISTS temp.dynprops_fts_probe"),
            ),
            "fts5",
        )
        json1 = _probe(
            engine, lambda conn: conn.exec_driver_sql("SELECT json('{}')").scalar(), "json1"
        )
        fts_table = fts and _probe(
            engine, lambda conn: sa.inspect(conn).has_table(FTS_TABLE), "fts table"
        )
        return {
            Capability.GENERATED_COLUMNS: version >= (3, 31),
            Capability.FTS_EXTENSION: fts,
            Capability.JSON1_EXTENSION: json1,
            Capability.JSON_FUNCTIONS: json1,
            Capability.FULLTEXT_SEARCH: fts_table,
            Capability.CASE_SENSITIVE_LIKE: True,
        }

    def fulltext_predicate(self, table: sa.FromClause, term: str) -> sa.ColumnElement[bool]:
        fts = sa.table(FTS_TABLE, sa.column("rowid"))
        phrase = '"' + term.replace('"', '""') + '"'
        matched = sa.select(fts.c.rowid).where(
            sa.literal_column(FTS_TABLE).bool_op("MATCH")(phrase)
        )
        return table.c.id.in_(matched)

    def like_predicate(
        self, column: sa.ColumnElement[Any], term: str, case_sensitive: bool
    ) -> sa.ColumnElement[bool]:
        if case_sensitive:
            # LIKE ignores ASCII case on SQLite
            return sa.func.instr(column, term) > 0
        return super().like_predicate(column, term, case_sensitive)

    def upsert(
        self,
        conn: sa.Connection,
        table: sa.Table,
        values: dict[str, Any],
        keys: list[str],
        update_columns: Iterable[str],
    ) -> None:
        stmt = sqlite.insert(table).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=keys,
            set_={c: stmt.excluded[c] for c in update_columns},
        )
        conn.execute(stmt)

    def optimization_statements(self, features: dict[Capability, bool]) -> list[str]:
        if not features.get(Capability.FTS_EXTENSION):
            return []
        return [
            f"CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE} USING fts5("
            "string_value, content='entity_property', content_rowid='id')",
            f"CREATE TRIGGER IF NOT EXISTS {FTS_TABLE}_insert AFTER INSERT ON entity_property "
            f"BEGIN INSERT INTO {FTS_TABLE}(rowid, string_value) "
            "VALUES (new.id, new.string_value); END",
            f"CREATE TRIGGER IF NOT EXISTS {FTS_TABLE}_delete AFTER DELETE ON entity_property "
            f"BEGIN INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, string_value) "
            "VALUES ('delete', old.id, old.string_value); END",
            f"CREATE TRIGGER IF NOT EXISTS {FTS_TABLE}_update AFTER UPDATE ON entity_property "
            f"BEGIN INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, string_value) "
            "VALUES ('delete', old.id, old.string_value); "
            f"INSERT INTO {FTS_TABLE}(rowid, string_value) VALUES (new.id, new.string_value); END",
            f"INSERT INTO {FTS_TABLE}({FTS_TABLE}) VALUES ('rebuild')",
        ]


BACKENDS: dict[str, type[SqlBackend]] = {
    "postgresql": PostgresBackend,
    "mysql": MySQLBackend,
    "mariadb": MySQLBackend,
    "sqlite": SQLiteBackend,
}


class DatabaseCompatibility:
    """Detected backend plus capability flags; call sites only ask supports()."""

    def __init__(self, engine: sa.Engine, backend: SqlBackend | None = None) -> None:
        self._engine = engine
        self._backend = backend or BACKENDS.get(engine.dialect.name, SqlBackend)()
        self._features: dict[Capability, bool] = {}
        self.refresh()

    @property
    def driver(self) -> str:
        return self._engine.dialect.name

    @property
    def backend(self) -> SqlBackend:
        return self._backend

    @property
    def features(self) -> dict[str, bool]:
        return {cap.value: flag for cap, flag in self._features.items()}

    def supports(self, capability: Capability | str) -> bool:
        try:
            return self._features.get(Capability(capability), False)
        except ValueError:
            return False

    def refresh(self) -> None:
        """Re-probe the backend; failures degrade to absent."""
        try:
            features = self._backend.probe(self._engine)
        except SQLAlchemyError as exc:
            logger.warning("Capability detection failed for %s: %s", self.driver, exc)
            features = {}
        self._features = {cap: bool(features.get(cap, False)) for cap in Capability}

    def info(self) -> dict[str, Any]:
        return {
            "driver": self.driver,
            "features": self.features,
            "migration_config": self._backend.migration_config(self._features),
        }

    def optimization_statements(self) -> list[str]:
        return self._backend.optimization_statements(self._features)

    def apply_optimizations(self) -> list[str]:
        """Run backend DDL one statement per transaction; failures are logged and skipped."""
        executed: list[str] = []
        for statement in self.optimization_statements():
            try:
                with self._engine.begin() as conn:
                    conn.exec_driver_sql(statement)
            except SQLAlchemyError as exc:
                logger.warning("Database optimization failed: %s (%s)", statement, exc)
                continue
            logger.info("Database optimization applied: %s", statement)
            executed.append(statement)
        if executed:
            self.refresh()
        return executed
