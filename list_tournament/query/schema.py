"""
Field schema for query validation.

The schema is the closed set of fields a query may reference, with the kind
of value each one holds. Reserved item fields are always present; the rest
are inferred from the attributes of the items being queried.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from ..models import AttributeValue, Item


class FieldKind(str, Enum):
    NUMBER = "number"
    TEXT = "text"
    DATE = "date"
    BOOLEAN = "boolean"
    MIXED = "mixed"  # attribute holds values of different kinds across items


RESERVED_FIELDS: Mapping[str, FieldKind] = {
    "score": FieldKind.NUMBER,
    "name": FieldKind.TEXT,
    "hidden": FieldKind.BOOLEAN,
}


def kind_of(value: AttributeValue) -> FieldKind:
    """Return the field kind of an attribute value."""
    if isinstance(value, bool):
        return FieldKind.BOOLEAN
    if isinstance(value, (int, float)):
        return FieldKind.NUMBER
    if isinstance(value, date):
        return FieldKind.DATE
    return FieldKind.TEXT


@dataclass(frozen=True)
class Schema:
    """Known attribute fields and their kinds (reserved fields excluded)."""

    attributes: Mapping[str, FieldKind] = field(default_factory=dict)

    @classmethod
    def from_items(cls, items: Iterable[Item]) -> "Schema":
        """Infer the schema from every attribute present on the given items."""
        kinds: dict[str, FieldKind] = {}
        for item in items:
            for name, value in item.attributes.items():
                kind = kind_of(value)
                previous = kinds.get(name)
                if previous is None:
                    kinds[name] = kind
                elif previous != kind:
                    kinds[name] = FieldKind.MIXED
        return cls(attributes=kinds)

    def kind(self, name: str) -> FieldKind | None:
        """Return the kind of a field, or None if the field is unknown."""
        if name in RESERVED_FIELDS:
            return RESERVED_FIELDS[name]
        return self.attributes.get(name)
