"""Backend search optimizations - full-text indexes driven by capability flags.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""

from collections.abc import Sequence

from alembic import op

from dynprops.infrastructure.persistence.sql.capabilities import (
    FTS_TABLE,
    MYSQL_FULLTEXT_INDEX,
    DatabaseCompatibility,
)

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    compatibility = DatabaseCompatibility(op.get_bind().engine)
    for statement in compatibility.optimization_statements():
        op.execute(statement)


def downgrade() -> None:
    dialect = op.get_bind().dialect.name
    if dialect == "sqlite":
        for suffix in ("insert", "delete", "update"):
            op.execute(f"DROP TRIGGER IF EXISTS {FTS_TABLE}_{suffix}")
        op.execute(f"DROP TABLE IF EXISTS {FTS_TABLE}")
    elif dialect in ("mysql", "mariadb"):
        op.execute(f"ALTER TABLE entity_property DROP INDEX {MYSQL_FULLTEXT_INDEX}")
    elif dialect == "postgresql":
        for index in (
            "idx_entity_property_gin_string",
            "idx_entity_property_number_present",
            "idx_entity_property_date_present",
        ):
            op.execute(f"DROP INDEX IF EXISTS {index}")
