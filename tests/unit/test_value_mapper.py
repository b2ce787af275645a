"""Unit tests for value coercion."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from dynprops.application.services import ValueMapper
from dynprops.application.services.value_mapper import parse_bool, parse_date, parse_number
from dynprops.config import PropertySettings
from dynprops.domain.entities import PropertyDefinition
from dynprops.domain.exceptions import PropertyValidationError
from dynprops.domain.value_objects import (
    BooleanValue,
    DateValue,
    NumberValue,
    PropertyType,
    TextValue,
    from_columns,
    value_columns,
)


@pytest.fixture
def mapper() -> ValueMapper:
    return ValueMapper(PropertySettings())


def _definition(prop_type: PropertyType, **kwargs) -> PropertyDefinition:
    return PropertyDefinition(name="field", label="Field", type=prop_type, **kwargs)


def test_parse_number_accepts_numeric_forms() -> None:
    """ints, floats, Decimals and numeric strings parse to float."""
    assert parse_number(25) == 25.0
    assert parse_number("25") == 25.0
    assert parse_number(" 2.5 ") == 2.5
    assert parse_number(Decimal("1.25")) == 1.25


def test_parse_number_rejects_booleans_and_infinity() -> None:
    with pytest.raises(ValueError):
        parse_number(True)
    with pytest.raises(ValueError):
        parse_number("inf")


def test_parse_bool_and_date() -> None:
    assert parse_bool("TRUE") is True
    assert parse_bool(0) is False
    assert parse_date(datetime(2024, 1, 2, 3, 4)) == date(2024, 1, 2)
    assert parse_date("2024-01-02") == date(2024, 1, 2)


def test_coerce_routes_by_declared_type(mapper: ValueMapper) -> None:
    """Each declared type yields its own value variant."""
    assert mapper.coerce(_definition(PropertyType.NUMBER), "25") == NumberValue(25.0)
    assert mapper.coerce(_definition(PropertyType.BOOLEAN), "false") == BooleanValue(False)
    assert mapper.coerce(_definition(PropertyType.DATE), "2024-05-01") == DateValue(
        date(2024, 5, 1)
    )
    assert mapper.coerce(_definition(PropertyType.SELECT, options=["a"]), "a") == TextValue("a")


def test_coerce_text_keeps_digits_as_text(mapper: ValueMapper) -> None:
    """A text property stores numeric input as its string form."""
    assert mapper.coerce(_definition(PropertyType.TEXT), 42) == TextValue("42")
    assert mapper.coerce(_definition(PropertyType.TEXT), 42.0) == TextValue("42")
    assert mapper.coerce(_definition(PropertyType.TEXT), 4.5) == TextValue("4.5")


@pytest.mark.parametrize("empty", [None, ""])
def test_coerce_empty_means_unset(mapper: ValueMapper, empty) -> None:
    assert mapper.coerce(_definition(PropertyType.NUMBER), empty) is None


def test_coerce_number_rounds_to_precision(mapper: ValueMapper) -> None:
    """Numbers keep the default 4 decimals unless the definition declares precision."""
    assert mapper.coerce(_definition(PropertyType.NUMBER), 1.234567) == NumberValue(1.2346)
    two = _definition(PropertyType.NUMBER, validation={"precision": 2})
    assert mapper.coerce(two, "9.999") == NumberValue(10.0)


def test_coerce_operand_failure_is_validation_error(mapper: ValueMapper) -> None:
    """Search operands that do not fit the declared type raise rule 'operand'."""
    with pytest.raises(PropertyValidationError) as info:
        mapper.coerce_operand(_definition(PropertyType.NUMBER), "abc")
    assert info.value.rule == "operand"


def test_coerce_operand_text_stays_text(mapper: ValueMapper) -> None:
    """A digit string searched on a text property is not turned into a number."""
    assert mapper.coerce_operand(_definition(PropertyType.TEXT), "123") == "123"


def test_json_round_trip_per_type(mapper: ValueMapper) -> None:
    """to_json / from_json restore the typed value."""
    cases = [
        (PropertyType.NUMBER, NumberValue(25.0), 25.0),
        (PropertyType.BOOLEAN, BooleanValue(True), True),
        (PropertyType.DATE, DateValue(date(2024, 5, 1)), "2024-05-01"),
        (PropertyType.TEXT, TextValue("hi"), "hi"),
    ]
    for prop_type, value, encoded in cases:
        assert mapper.to_json(value) == encoded
        assert mapper.from_json(_definition(prop_type), encoded) == value.value


def test_from_json_without_definition_returns_raw(mapper: ValueMapper) -> None:
    """Values of deleted definitions are passed through as stored."""
    assert mapper.from_json(None, "2024-05-01") == "2024-05-01"


def test_value_columns_sets_exactly_one() -> None:
    """A value populates only the column of its variant."""
    columns = value_columns(NumberValue(3.0))
    assert columns == {
        "string_value": None,
        "number_value": 3.0,
        "boolean_value": None,
        "date_value": None,
    }
    assert value_columns(None) == dict.fromkeys(columns)


def test_from_columns_reads_populated_column() -> None:
    assert from_columns(None, 5, None, None) == NumberValue(5.0)
    assert from_columns(None, None, 0, None) == BooleanValue(False)
    assert from_columns(None, None, None, None) is None
