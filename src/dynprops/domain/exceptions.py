"""Domain exceptions."""

from typing import Any


class DynPropsError(Exception):
    """Base exception for dynprops."""

    status_code = 500

    def __init__(self, message: str = "", context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = dict(context or {})

    @property
    def user_message(self) -> str:
        """Message suitable for showing to the person authoring the data."""
        return str(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.user_message,
            "context": self.context,
        }


class PropertyNotFoundError(DynPropsError):
    """Referenced property name has no definition."""

    status_code = 404

    def __init__(self, property_name: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"Property '{property_name}' does not exist.",
            {"property_name": property_name, **(context or {})},
        )
        self.property_name = property_name

    @property
    def user_message(self) -> str:
        return (
            f"The property '{self.property_name}' does not exist. "
            "Please check the property name and try again."
        )


class PropertyValidationError(DynPropsError):
    """Value (or definition) fails a declared rule."""

    status_code = 422

    def __init__(
        self,
        property_name: str,
        value: Any,
        errors: list[str] | dict[str, Any],
        rule: str | None = None,
        label: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.property_name = property_name
        self.value = value
        self.errors = errors
        self.rule = rule
        self.label = label or property_name
        message = f"Validation failed for property '{property_name}'."
        if errors:
            message += " Errors: " + ", ".join(_flatten(errors))
        super().__init__(
            message,
            {
                "property_name": property_name,
                "value": value,
                "rule": rule,
                "validation_errors": errors,
                **(context or {}),
            },
        )

    @property
    def user_message(self) -> str:
        if self.errors:
            return f"Validation failed for {self.label}: " + ", ".join(_flatten(self.errors))
        return f"The value provided for {self.label} is not valid."

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "validation_errors": self.errors}


class PropertyOperationError(DynPropsError):
    """Storage-layer failure while persisting or reading properties."""

    status_code = 500

    def __init__(self, operation: str, reason: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"Property operation '{operation}' failed: {reason}",
            {"operation": operation, "reason": reason, **(context or {})},
        )
        self.operation = operation

    @property
    def user_message(self) -> str:
        return f"The property {self.operation} could not be completed. Please try again later."


class InvalidPropertyTypeError(DynPropsError):
    """Property type outside the supported set."""

    status_code = 400

    def __init__(self, property_type: str, valid_types: list[str] | None = None) -> None:
        self.property_type = property_type
        self.valid_types = valid_types or []
        message = f"Invalid property type '{property_type}'."
        if self.valid_types:
            message += " Valid types are: " + ", ".join(self.valid_types)
        super().__init__(
            message,
            {"invalid_type": property_type, "valid_types": self.valid_types},
        )


class StorageError(DynPropsError):
    """Storage backend failure raised by the persistence adapters."""

    status_code = 500


def _flatten(errors: list[str] | dict[str, Any]) -> list[str]:
    if isinstance(errors, dict):
        out: list[str] = []
        for key, err in errors.items():
            if isinstance(err, dict):
                out.append(f"{key}: " + ", ".join(str(v) for v in err.values()))
            elif isinstance(err, list):
                out.append(f"{key}: " + ", ".join(str(v) for v in err))
            else:
                out.append(f"{key}: {err}")
        return out
    return [str(e) for e in errors]
