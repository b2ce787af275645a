"""Initial schema - property definitions and typed fact rows.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_BigId = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "property_definition",
        sa.Column("id", _BigId, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("options", sa.JSON(), nullable=True),
        sa.Column("validation", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("name", name="uq_property_definition_name"),
    )
    op.create_index("ix_property_definition_type", "property_definition", ["type"])

    op.create_table(
        "entity_property",
        sa.Column("id", _BigId, primary_key=True, autoincrement=True),
        sa.Column("entity_type", sa.String(255), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column(
            "property_name",
            sa.String(255),
            sa.ForeignKey("property_definition.name", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("string_value", sa.Text(), nullable=True),
        sa.Column("number_value", sa.Numeric(20, 4), nullable=True),
        sa.Column("boolean_value", sa.Boolean(), nullable=True),
        sa.Column("date_value", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "entity_type", "entity_id", "property_name", name="uq_entity_property"
        ),
    )
    op.create_index("idx_entity", "entity_property", ["entity_type", "entity_id"])
    op.create_index(
        "idx_string_search",
        "entity_property",
        ["entity_type", "property_name", "string_value"],
        mysql_length={"string_value": 191},
    )
    op.create_index(
        "idx_number_search", "entity_property", ["entity_type", "property_name", "number_value"]
    )
    op.create_index(
        "idx_date_search", "entity_property", ["entity_type", "property_name", "date_value"]
    )
    op.create_index(
        "idx_boolean_search", "entity_property", ["entity_type", "property_name", "boolean_value"]
    )


def downgrade() -> None:
    op.drop_table("entity_property")
    op.drop_index("ix_property_definition_type", table_name="property_definition")
    op.drop_table("property_definition")
