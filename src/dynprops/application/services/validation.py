"""Validation engine - per-type rules checked before any write."""

import re
from datetime import date
from decimal import Decimal
from typing import Any

from dynprops.application.services.value_mapper import (
    is_empty,
    parse_bool,
    parse_date,
    parse_number,
)
from dynprops.config import PropertySettings
from dynprops.domain.entities import PropertyDefinition
from dynprops.domain.exceptions import PropertyValidationError
from dynprops.domain.value_objects import PropertyType

NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")
VALID_TYPES = [t.value for t in PropertyType]


class PropertyValidator:
    """Checks candidate values against a definition and definitions against the rule grammar."""

    def __init__(self, settings: PropertySettings) -> None:
        self._settings = settings

    @property
    def strict(self) -> bool:
        return self._settings.strict_mode

    def validate_value(self, definition: PropertyDefinition, value: Any) -> None:
        """Raise PropertyValidationError naming the first violated rule."""
        label = definition.label or definition.name
        if is_empty(value):
            if definition.required:
                raise PropertyValidationError(
                    definition.name,
                    value,
                    [f"The {label} field is required."],
                    rule="required",
                    label=label,
                )
            return

        type_failure = self._check_type(definition, value)
        failures = [type_failure] if type_failure else self._check_rules(definition, value)
        if failures:
            raise PropertyValidationError(
                definition.name,
                value,
                [message for _, message in failures],
                rule=failures[0][0],
                label=label,
            )

    def _check_type(self, definition: PropertyDefinition, value: Any) -> tuple[str, str] | None:
        label = definition.label or definition.name
        match definition.type:
            case PropertyType.TEXT:
                if isinstance(value, str):
                    return None
                if _is_real(value) and not self.strict:
                    return None
                return ("type", f"The {label} must be text.")
            case PropertyType.NUMBER:
                if isinstance(value, str) and self.strict:
                    return ("type", f"The {label} must be a number, not a numeric string.")
                try:
                    parse_number(value)
                except (TypeError, ValueError):
                    return ("type", f"The {label} must be a number.")
                return None
            case PropertyType.BOOLEAN:
                try:
                    parse_bool(value)
                except ValueError:
                    return ("type", f"The {label} must be true or false.")
                return None
            case PropertyType.DATE:
                try:
                    parse_date(value)
                except (TypeError, ValueError):
                    return ("type", f"The {label} must be a valid date.")
                return None
            case PropertyType.SELECT:
                options = definition.options or []
                if value in options or (not self.strict and str(value) in options):
                    return None
                return (
                    "invalid_option",
                    f"The {label} has an invalid option '{value}'; "
                    f"must be one of: {', '.join(options)}.",
                )
        return None

    def _check_rules(self, definition: PropertyDefinition, value: Any) -> list[tuple[str, str]]:
        rules = definition.validation or {}
        label = definition.label or definition.name
        failures: list[tuple[str, str]] = []

        if definition.type == PropertyType.TEXT:
            length = len(str(value))
            for rule in ("min", "min_length"):
                if rule in rules and length < rules[rule]:
                    failures.append((rule, f"The {label} must be at least {rules[rule]} characters."))
            max_rules = [r for r in ("max", "max_length") if r in rules]
            if not max_rules:
                limit = self._settings.default_text_max_length
                if length > limit:
                    failures.append(
                        ("max_length", f"The {label} may not be greater than {limit} characters.")
                    )
            for rule in max_rules:
                if length > rules[rule]:
                    failures.append(
                        (rule, f"The {label} may not be greater than {rules[rule]} characters.")
                    )

        elif definition.type == PropertyType.NUMBER:
            number = parse_number(value)
            if "min" in rules and number < parse_number(rules["min"]):
                failures.append(("min", f"The {label} must be at least {rules['min']}."))
            if "max" in rules and number > parse_number(rules["max"]):
                failures.append(("max", f"The {label} may not be greater than {rules['max']}."))

        elif definition.type == PropertyType.DATE:
            day = parse_date(value)
            if "after" in rules:
                bound = _date_bound(rules["after"])
                if bound is None or not day > bound:
                    failures.append(("after", f"The {label} must be after {rules['after']}."))
            if "before" in rules:
                bound = _date_bound(rules["before"])
                if bound is None or not day < bound:
                    failures.append(("before", f"The {label} must be before {rules['before']}."))

        return failures

    def validate_definition(self, data: dict[str, Any]) -> dict[str, Any]:
        """Check a new property definition; returns {field: message} (empty when valid)."""
        errors: dict[str, Any] = {}
        name = data.get("name")
        if not name:
            errors["name"] = "Property name is required."
        elif not isinstance(name, str) or not NAME_PATTERN.match(name):
            errors["name"] = (
                "Property name must start with a letter and contain only "
                "letters, numbers, and underscores."
            )

        if not data.get("label"):
            errors["label"] = "Property label is required."

        prop_type = data.get("type")
        if not prop_type:
            errors["type"] = "Property type is required."
        elif prop_type not in VALID_TYPES:
            errors["type"] = "Property type must be one of: " + ", ".join(VALID_TYPES)

        if prop_type == PropertyType.SELECT:
            options = data.get("options")
            if not options or not isinstance(options, list):
                errors["options"] = "Select properties must have at least one option."
            else:
                for index, option in enumerate(options):
                    if not isinstance(option, str) or not option.strip():
                        errors["options"] = f"Option at index {index} must be a non-empty string."
                        break

        rules = data.get("validation")
        if rules:
            if not isinstance(rules, dict):
                errors["validation"] = {"validation": "Validation rules must be a mapping."}
            else:
                rule_errors = _validate_rules(rules, prop_type)
                if rule_errors:
                    errors["validation"] = rule_errors
        return errors


def _validate_rules(rules: dict[str, Any], prop_type: str | None) -> dict[str, str]:
    errors: dict[str, str] = {}
    for rule, value in rules.items():
        if rule in ("min", "max"):
            if prop_type == PropertyType.TEXT:
                if not _is_non_negative_int(value):
                    errors[rule] = f"Text {rule} length must be a non-negative integer."
            elif prop_type == PropertyType.NUMBER:
                if not _is_numeric(value):
                    errors[rule] = f"Number {rule} value must be numeric."
            else:
                errors[rule] = f"{rule} validation is only supported for text and number properties."
        elif rule in ("min_length", "max_length"):
            if prop_type != PropertyType.TEXT:
                errors[rule] = f"{rule} validation is only supported for text properties."
            elif not _is_non_negative_int(value):
                errors[rule] = f"{rule} must be a non-negative integer."
        elif rule in ("after", "before"):
            if prop_type != PropertyType.DATE:
                errors[rule] = f"{rule} validation is only supported for date properties."
            elif not isinstance(value, str) or _date_bound(value) is None:
                errors[rule] = f"{rule} must be 'today' or a valid date string."
        elif rule == "precision":
            if prop_type != PropertyType.NUMBER:
                errors[rule] = "precision is only supported for number properties."
            elif not _is_non_negative_int(value):
                errors[rule] = "precision must be a non-negative integer."
        else:
            errors[rule] = f"Unknown validation rule: {rule}"

    for low, high, message in (
        ("min", "max", "Minimum value cannot be greater than maximum value."),
        ("min_length", "max_length", "Minimum length cannot be greater than maximum length."),
    ):
        if low in errors or high in errors or low not in rules or high not in rules:
            continue
        if parse_number(rules[low]) > parse_number(rules[high]):
            errors[low] = message
    return errors


def _date_bound(raw: Any) -> date | None:
    if raw == "today":
        return date.today()
    try:
        return parse_date(raw)
    except (TypeError, ValueError):
        return None


def _is_real(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _is_non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_numeric(value: Any) -> bool:
    try:
        parse_number(value)
    except (TypeError, ValueError):
        return False
    return True
