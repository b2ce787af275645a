"""SQLAlchemy Core tables for property definitions and fact rows."""

import sqlalchemy as sa

metadata = sa.MetaData()

# BIGINT primary keys do not autoincrement on SQLite; INTEGER is a rowid alias there.
_BigId = sa.BigInteger().with_variant(sa.Integer(), "sqlite")

property_definition = sa.Table(
    "property_definition",
    metadata,
    sa.Column("id", _BigId, primary_key=True, autoincrement=True),
    sa.Column("name", sa.String(255), nullable=False, unique=True),
    sa.Column("label", sa.String(255), nullable=False),
    sa.Column("type", sa.String(20), nullable=False),
    sa.Column("required", sa.Boolean(), nullable=False, default=False),
    sa.Column("options", sa.JSON(), nullable=True),
    sa.Column("validation", sa.JSON(), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    sa.Index("ix_property_definition_type", "type"),
)

entity_property = sa.Table(
    "entity_property",
    metadata,
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
    sa.Column("number_value", sa.Numeric(20, 4, asdecimal=False), nullable=True),
    sa.Column("boolean_value", sa.Boolean(), nullable=True),
    sa.Column("date_value", sa.Date(), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    sa.UniqueConstraint(
        "entity_type", "entity_id", "property_name", name="uq_entity_property"
    ),
    sa.Index("idx_entity", "entity_type", "entity_id"),
    sa.Index(
        "idx_string_search",
        "entity_type",
        "property_name",
        "string_value",
        mysql_length={"string_value": 191},
    ),
    sa.Index("idx_number_search", "entity_type", "property_name", "number_value"),
    sa.Index("idx_date_search", "entity_type", "property_name", "date_value"),
    sa.Index("idx_boolean_search", "entity_type", "property_name", "boolean_value"),
)


def json_cache_column(name: str = "dynamic_properties") -> sa.Column:
    """Nullable JSON cache column to add to a host entity table."""
    return sa.Column(name, sa.JSON(none_as_null=True), nullable=True)


def create_schema(engine: sa.Engine) -> None:
    """Create the property tables if missing (tests and local setups)."""
    metadata.create_all(engine)
