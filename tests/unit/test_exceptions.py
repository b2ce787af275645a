"""Unit tests for domain exceptions."""

import pytest

from dynprops.domain.exceptions import (
    DynPropsError,
    InvalidPropertyTypeError,
    PropertyNotFoundError,
    PropertyOperationError,
    PropertyValidationError,
    StorageError,
)


@pytest.mark.parametrize(
    "exc_type",
    [
        PropertyNotFoundError,
        PropertyValidationError,
        PropertyOperationError,
        InvalidPropertyTypeError,
        StorageError,
    ],
)
def test_exceptions_inherit_dynprops_error(exc_type) -> None:
    """Every domain exception is a subclass of DynPropsError."""
    assert issubclass(exc_type, DynPropsError)


def test_not_found_catchable_as_dynprops_error() -> None:
    """PropertyNotFoundError can be caught as DynPropsError."""
    with pytest.raises(DynPropsError):
        raise PropertyNotFoundError("color")


def test_not_found_message_and_context() -> None:
    """PropertyNotFoundError names the property and merges extra context."""
    exc = PropertyNotFoundError("color", {"entity_type": "users"})
    assert str(exc) == "Property 'color' does not exist."
    assert exc.context == {"property_name": "color", "entity_type": "users"}
    assert exc.status_code == 404
    assert "check the property name" in exc.user_message


def test_validation_error_carries_rule_and_errors() -> None:
    """PropertyValidationError keeps the failing rule and its messages."""
    exc = PropertyValidationError(
        "age", 200, ["The Age may not be greater than 150."], rule="max", label="Age"
    )
    assert exc.rule == "max"
    assert exc.value == 200
    assert exc.status_code == 422
    assert exc.user_message == "Validation failed for Age: The Age may not be greater than 150."
    assert exc.context["rule"] == "max"


def test_validation_error_flattens_error_mapping() -> None:
    """Field-keyed errors are flattened into the message."""
    exc = PropertyValidationError(
        "property definition",
        {},
        {"name": "Property name is required.", "validation": {"min": "bad"}},
        rule="definition",
    )
    assert "name: Property name is required." in str(exc)
    assert "validation: bad" in str(exc)
    assert exc.to_dict()["validation_errors"]["name"] == "Property name is required."


def test_validation_error_without_messages_has_generic_user_message() -> None:
    """An empty error list still produces a readable message."""
    exc = PropertyValidationError("age", "x", [], label="Age")
    assert exc.user_message == "The value provided for Age is not valid."


def test_operation_error_hides_reason_from_user_message() -> None:
    """PropertyOperationError keeps the reason in context, not in user_message."""
    exc = PropertyOperationError("set property", "disk full", {"entity_id": "1"})
    assert "disk full" in str(exc)
    assert "disk full" not in exc.user_message
    assert exc.context == {"operation": "set property", "reason": "disk full", "entity_id": "1"}


def test_invalid_type_lists_valid_types() -> None:
    """InvalidPropertyTypeError lists the accepted types."""
    exc = InvalidPropertyTypeError("color", ["text", "number"])
    assert str(exc) == "Invalid property type 'color'. Valid types are: text, number"
    assert exc.status_code == 400


def test_to_dict_shape() -> None:
    """to_dict exposes error class, message and context."""
    body = PropertyNotFoundError("color").to_dict()
    assert body["error"] == "PropertyNotFoundError"
    assert body["context"] == {"property_name": "color"}
