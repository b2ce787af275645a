"""Search filter DTOs - parsed form of a filter mapping."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from dynprops.domain.entities import PropertyDefinition
from dynprops.domain.exceptions import PropertyValidationError


class FilterOperator(StrEnum):
    """Comparison operators accepted in advanced filters."""

    EQ = "="
    NE = "!="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="
    LIKE = "like"
    ILIKE = "ilike"
    IN = "in"
    BETWEEN = "between"
    NOT_NULL = "not null"
    NULL = "null"
    FULLTEXT = "fulltext"

    @classmethod
    def parse(cls, raw: str) -> "FilterOperator":
        key = " ".join(str(raw).strip().lower().split())
        key = _OPERATOR_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise PropertyValidationError(
                "operator",
                raw,
                [f"Unsupported search operator '{raw}'."],
                rule="operator",
            ) from None


_OPERATOR_ALIASES = {
    "==": "=",
    "<>": "!=",
    "is null": "null",
    "is not null": "not null",
    "notnull": "not null",
}


class SearchLogic(StrEnum):
    """How predicates on different properties combine."""

    AND = "AND"
    OR = "OR"

    @classmethod
    def parse(cls, raw: "str | SearchLogic | None") -> "SearchLogic":
        if raw is None:
            return cls.AND
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            raise PropertyValidationError(
                "logic", raw, [f"Logic must be AND or OR, got '{raw}'."], rule="logic"
            ) from None


@dataclass
class PropertyFilter:
    """One predicate on one property."""

    property_name: str
    operator: FilterOperator = FilterOperator.EQ
    value: Any = None
    min: Any = None
    max: Any = None
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def full_text(self) -> bool:
        return self.operator == FilterOperator.FULLTEXT or bool(self.options.get("full_text"))

    @property
    def case_sensitive(self) -> bool:
        return bool(self.options.get("case_sensitive", False))


@dataclass
class ResolvedFilter:
    """Filter paired with its definition and operands coerced to the declared type.

    definition is None for unknown property names.
    """

    filter: PropertyFilter
    definition: PropertyDefinition | None
    value: Any = None
    min: Any = None
    max: Any = None

    @property
    def operator(self) -> FilterOperator:
        return self.filter.operator


def parse_filters(filters: dict[str, Any]) -> list[PropertyFilter]:
    """Turn `{name: value}` / `{name: {operator, value, ...}}` into filters.

    A bare list means `in`, a bare None means `null`, anything else `=`.
    """
    parsed: list[PropertyFilter] = []
    for name, spec in filters.items():
        if isinstance(spec, PropertyFilter):
            parsed.append(spec)
        elif isinstance(spec, dict):
            options = {
                k: v
                for k, v in spec.items()
                if k not in ("operator", "value", "min", "max", "options")
            }
            options.update(spec.get("options") or {})
            parsed.append(
                PropertyFilter(
                    property_name=name,
                    operator=FilterOperator.parse(spec.get("operator", "=")),
                    value=spec.get("value"),
                    min=spec.get("min"),
                    max=spec.get("max"),
                    options=options,
                )
            )
        elif isinstance(spec, (list, tuple, set, frozenset)):
            parsed.append(PropertyFilter(name, FilterOperator.IN, list(spec)))
        elif spec is None:
            parsed.append(PropertyFilter(name, FilterOperator.NULL))
        else:
            parsed.append(PropertyFilter(name, FilterOperator.EQ, spec))
    return parsed
