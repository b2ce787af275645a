"""Unit tests for PropertyValidator."""

from datetime import date, timedelta

import pytest

from dynprops.application.services import PropertyValidator
from dynprops.config import PropertySettings
from dynprops.domain.entities import PropertyDefinition
from dynprops.domain.exceptions import PropertyValidationError
from dynprops.domain.value_objects import PropertyType


def _definition(prop_type: PropertyType, **kwargs) -> PropertyDefinition:
    return PropertyDefinition(
        name=kwargs.pop("name", "field"),
        label=kwargs.pop("label", "Field"),
        type=prop_type,
        **kwargs,
    )


@pytest.fixture
def validator() -> PropertyValidator:
    return PropertyValidator(PropertySettings())


@pytest.fixture
def strict_validator() -> PropertyValidator:
    return PropertyValidator(PropertySettings(strict_mode=True))


def _rule_of(validator: PropertyValidator, definition: PropertyDefinition, value) -> str | None:
    with pytest.raises(PropertyValidationError) as info:
        validator.validate_value(definition, value)
    return info.value.rule


# Values


@pytest.mark.parametrize("empty", [None, ""])
def test_required_rejects_empty(validator: PropertyValidator, empty) -> None:
    """A required property fails with rule 'required' for None and ''."""
    definition = _definition(PropertyType.TEXT, required=True, label="Nickname")
    with pytest.raises(PropertyValidationError) as info:
        validator.validate_value(definition, empty)
    assert info.value.rule == "required"
    assert info.value.errors == ["The Nickname field is required."]


def test_optional_empty_is_valid(validator: PropertyValidator) -> None:
    """Empty values on optional properties skip every other rule."""
    definition = _definition(PropertyType.NUMBER, validation={"min": 10})
    validator.validate_value(definition, None)
    validator.validate_value(definition, "")


def test_text_accepts_numbers_when_lenient(validator: PropertyValidator) -> None:
    """Numbers are accepted as text outside strict mode."""
    validator.validate_value(_definition(PropertyType.TEXT), 42)


def test_text_rejects_numbers_when_strict(strict_validator: PropertyValidator) -> None:
    """Strict mode accepts only real strings for text."""
    assert _rule_of(strict_validator, _definition(PropertyType.TEXT), 42) == "type"


def test_text_rejects_non_scalar(validator: PropertyValidator) -> None:
    """Lists are never text."""
    assert _rule_of(validator, _definition(PropertyType.TEXT), ["a"]) == "type"


def test_text_default_max_length(validator: PropertyValidator) -> None:
    """Text without a declared max is capped at the configured default."""
    definition = _definition(PropertyType.TEXT)
    validator.validate_value(definition, "x" * 255)
    assert _rule_of(validator, definition, "x" * 256) == "max_length"


def test_text_declared_max_overrides_default(validator: PropertyValidator) -> None:
    """A declared max replaces the default length cap."""
    definition = _definition(PropertyType.TEXT, validation={"max": 500})
    validator.validate_value(definition, "x" * 400)
    assert _rule_of(validator, definition, "x" * 501) == "max"


def test_text_min_length(validator: PropertyValidator) -> None:
    """min_length rejects short text."""
    definition = _definition(PropertyType.TEXT, validation={"min_length": 3})
    assert _rule_of(validator, definition, "ab") == "min_length"
    validator.validate_value(definition, "abc")


def test_number_accepts_numeric_string_when_lenient(validator: PropertyValidator) -> None:
    """'25' is a valid number outside strict mode."""
    validator.validate_value(_definition(PropertyType.NUMBER), "25")


def test_number_rejects_numeric_string_when_strict(strict_validator: PropertyValidator) -> None:
    """Strict mode rejects numeric strings for number properties."""
    with pytest.raises(PropertyValidationError) as info:
        strict_validator.validate_value(_definition(PropertyType.NUMBER, label="Age"), "25")
    assert info.value.errors == ["The Age must be a number, not a numeric string."]


@pytest.mark.parametrize("value", ["abc", True, float("nan"), [1]])
def test_number_rejects_non_numbers(validator: PropertyValidator, value) -> None:
    """Non-numeric input, booleans and NaN are not numbers."""
    assert _rule_of(validator, _definition(PropertyType.NUMBER), value) == "type"


def test_number_min_max(validator: PropertyValidator) -> None:
    """Numbers outside [min, max] fail the matching rule."""
    definition = _definition(PropertyType.NUMBER, validation={"min": 0, "max": 150})
    assert _rule_of(validator, definition, -1) == "min"
    assert _rule_of(validator, definition, 151) == "max"
    validator.validate_value(definition, 150)
    validator.validate_value(definition, "0")


@pytest.mark.parametrize("value", [True, False, 1, 0, "1", "0", "true", "FALSE", " True "])
def test_boolean_accepts_boolean_forms(validator: PropertyValidator, value) -> None:
    """Booleans, 0/1 and their string forms are accepted."""
    validator.validate_value(_definition(PropertyType.BOOLEAN), value)


@pytest.mark.parametrize("value", ["yes", 2, 0.5, "on"])
def test_boolean_rejects_other_values(validator: PropertyValidator, value) -> None:
    """Anything outside the boolean forms fails with rule 'type'."""
    assert _rule_of(validator, _definition(PropertyType.BOOLEAN), value) == "type"


def test_date_accepts_iso_strings_and_dates(validator: PropertyValidator) -> None:
    """ISO date strings, datetimes strings and date objects are valid."""
    definition = _definition(PropertyType.DATE)
    validator.validate_value(definition, "2024-03-01")
    validator.validate_value(definition, "2024-03-01T10:30:00")
    validator.validate_value(definition, date(2024, 3, 1))


def test_date_rejects_garbage(validator: PropertyValidator) -> None:
    """Unparseable dates fail with rule 'type'."""
    assert _rule_of(validator, _definition(PropertyType.DATE), "not a date") == "type"


def test_date_after_before(validator: PropertyValidator) -> None:
    """after/before bounds are exclusive."""
    definition = _definition(
        PropertyType.DATE, validation={"after": "2020-01-01", "before": "2030-01-01"}
    )
    validator.validate_value(definition, "2024-06-15")
    assert _rule_of(validator, definition, "2020-01-01") == "after"
    assert _rule_of(validator, definition, "2030-01-01") == "before"


def test_date_before_today(validator: PropertyValidator) -> None:
    """'today' resolves to the current date."""
    definition = _definition(PropertyType.DATE, validation={"before": "today"})
    validator.validate_value(definition, date.today() - timedelta(days=1))
    assert _rule_of(validator, definition, date.today() + timedelta(days=1)) == "before"


def test_select_rejects_unknown_option(validator: PropertyValidator) -> None:
    """Values outside the options fail with rule 'invalid_option'."""
    definition = _definition(PropertyType.SELECT, label="Status", options=["active", "inactive"])
    with pytest.raises(PropertyValidationError) as info:
        validator.validate_value(definition, "invalid")
    assert info.value.rule == "invalid_option"
    assert "invalid option" in info.value.user_message
    validator.validate_value(definition, "active")


def test_select_string_comparison_only_when_lenient(
    validator: PropertyValidator, strict_validator: PropertyValidator
) -> None:
    """Numeric input matches a string option only outside strict mode."""
    definition = _definition(PropertyType.SELECT, options=["1", "2"])
    validator.validate_value(definition, 1)
    assert _rule_of(strict_validator, definition, 1) == "invalid_option"


def test_type_failure_reported_before_rules(validator: PropertyValidator) -> None:
    """The type check wins over range rules."""
    definition = _definition(PropertyType.NUMBER, validation={"min": 5})
    assert _rule_of(validator, definition, "abc") == "type"


# Definitions


def test_valid_definition_has_no_errors(validator: PropertyValidator) -> None:
    """A well-formed definition passes."""
    errors = validator.validate_definition(
        {"name": "age", "label": "Age", "type": "number", "validation": {"min": 0, "max": 150}}
    )
    assert errors == {}


@pytest.mark.parametrize("name", ["", "1age", "has space", "dash-name", "_private"])
def test_definition_name_pattern(validator: PropertyValidator, name: str) -> None:
    """Names start with a letter and contain only letters, digits and underscores."""
    errors = validator.validate_definition({"name": name, "label": "X", "type": "text"})
    assert "name" in errors


def test_definition_requires_label_and_known_type(validator: PropertyValidator) -> None:
    """Missing label and unknown type are both reported."""
    errors = validator.validate_definition({"name": "color", "type": "colour"})
    assert errors["label"] == "Property label is required."
    assert errors["type"].startswith("Property type must be one of: text, number")


def test_select_definition_needs_options(validator: PropertyValidator) -> None:
    """Select properties need at least one non-empty string option."""
    errors = validator.validate_definition({"name": "s", "label": "S", "type": "select"})
    assert "options" in errors
    errors = validator.validate_definition(
        {"name": "s", "label": "S", "type": "select", "options": ["a", " "]}
    )
    assert errors["options"] == "Option at index 1 must be a non-empty string."


def test_definition_rule_grammar(validator: PropertyValidator) -> None:
    """Rules must fit the declared type."""
    errors = validator.validate_definition(
        {
            "name": "flag",
            "label": "Flag",
            "type": "boolean",
            "validation": {"min": 1, "after": "2020-01-01", "colour": "red"},
        }
    )
    rules = errors["validation"]
    assert set(rules) == {"min", "after", "colour"}
    assert rules["colour"] == "Unknown validation rule: colour"


def test_definition_min_greater_than_max(validator: PropertyValidator) -> None:
    """min above max is rejected."""
    errors = validator.validate_definition(
        {"name": "n", "label": "N", "type": "number", "validation": {"min": 10, "max": 5}}
    )
    assert errors["validation"]["min"] == "Minimum value cannot be greater than maximum value."


def test_definition_precision_rule(validator: PropertyValidator) -> None:
    """precision must be a non-negative integer on number properties."""
    ok = validator.validate_definition(
        {"name": "n", "label": "N", "type": "number", "validation": {"precision": 2}}
    )
    assert ok == {}
    errors = validator.validate_definition(
        {"name": "n", "label": "N", "type": "number", "validation": {"precision": -1}}
    )
    assert "precision" in errors["validation"]
