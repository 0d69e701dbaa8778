"""Query AST node definitions and canonical text rendering"""

import json
from dataclasses import dataclass
from datetime import date
from enum import Enum


class Operator(str, Enum):
    EQ = "="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    CONTAINS = "contains"


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


Literal = float | int | str | bool | date


@dataclass(frozen=True)
class Filter:
    """Compare one field of an item against a literal"""
    field: str
    operator: Operator
    value: Literal


@dataclass(frozen=True)
class And:
    children: tuple["QueryNode", ...]


@dataclass(frozen=True)
class Or:
    children: tuple["QueryNode", ...]


@dataclass(frozen=True)
class Sort:
    """Order the items selected by child (all items when child is None)"""
    field: str
    direction: Direction = Direction.ASC
    child: "QueryNode | None" = None


QueryNode = Filter | And | Or | Sort


def _format_literal(value: Literal) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return f"'{value.isoformat()}'"
    if isinstance(value, str):
        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return json.dumps(value)


def _format_expr(node: QueryNode, parent: type | None = None) -> str:
    if isinstance(node, Filter):
        return f"{node.field} {node.operator.value} {_format_literal(node.value)}"
    if isinstance(node, And):
        return " and ".join(_format_expr(child, And) for child in node.children)
    if isinstance(node, Or):
        text = " or ".join(_format_expr(child, Or) for child in node.children)
        return f"({text})" if parent is And else text
    raise TypeError(f"Sort cannot appear inside a filter expression: {node!r}")


def format_query(node: QueryNode | None) -> str:
    """Render a query AST as canonical text that parses back to the same AST."""
    if node is None:
        return ""
    if isinstance(node, Sort):
        clause = f"order by {node.field} {node.direction.value}"
        if node.child is None:
            return clause
        return f"{_format_expr(node.child)} {clause}"
    return _format_expr(node)
