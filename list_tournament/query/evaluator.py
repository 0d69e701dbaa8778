"""
Query evaluator.

Applies a parsed QueryNode to a sequence of items. Evaluation is a pure
visitor over the closed set of AST node types: input items are never
modified and the result is a new list.
"""

from collections.abc import Iterable, Sequence
from datetime import date

from ..exceptions import TypeMismatch
from ..logging_config import get_logger
from ..models import Item
from .ast_nodes import And, Direction, Filter, Literal, Operator, Or, QueryNode, Sort

logger = get_logger("query_evaluator")


def field_value(item: Item, field: str) -> Literal | None:
    """Return the value of a reserved field or attribute, None when the item lacks it."""
    if field == "score":
        return item.score
    if field == "name":
        return item.name
    if field == "hidden":
        return item.hidden
    return item.attributes.get(field)


def requests_hidden(node: QueryNode | None) -> bool:
    """True if the query contains an explicit ``hidden = true`` term."""
    if node is None:
        return False
    if isinstance(node, Filter):
        return node.field == "hidden" and node.operator == Operator.EQ and node.value is True
    if isinstance(node, Sort):
        return requests_hidden(node.child)
    return any(requests_hidden(child) for child in node.children)


def _same_kind(left: object, right: object) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool)
    if isinstance(left, (int, float)) or isinstance(right, (int, float)):
        return isinstance(left, (int, float)) and isinstance(right, (int, float))
    if isinstance(left, date) or isinstance(right, date):
        return isinstance(left, date) and isinstance(right, date)
    return isinstance(left, str) and isinstance(right, str)


def _compare(node: Filter, item: Item) -> bool:
    value = field_value(item, node.field)
    if value is None:
        return False
    if not _same_kind(value, node.value):
        raise TypeMismatch(
            f"Item {item.id} has {type(value).__name__} for {node.field}, "
            f"query compares against {type(node.value).__name__}"
        )

    expected = node.value
    if node.operator == Operator.EQ:
        return value == expected
    if node.operator == Operator.NE:
        return value != expected
    if node.operator == Operator.CONTAINS:
        assert isinstance(value, str) and isinstance(expected, str)
        return expected.casefold() in value.casefold()
    if node.operator == Operator.LT:
        return value < expected  # type: ignore[operator]
    if node.operator == Operator.LE:
        return value <= expected  # type: ignore[operator]
    if node.operator == Operator.GT:
        return value > expected  # type: ignore[operator]
    return value >= expected  # type: ignore[operator]


def matches(node: QueryNode, item: Item) -> bool:
    """Return whether an item satisfies a filter expression."""
    if isinstance(node, Filter):
        return _compare(node, item)
    if isinstance(node, And):
        return all(matches(child, item) for child in node.children)
    if isinstance(node, Or):
        return any(matches(child, item) for child in node.children)
    if node.child is None:
        return True
    return matches(node.child, item)


def sort_items(items: Iterable[Item], field: str, direction: Direction = Direction.ASC) -> list[Item]:
    """
    Stable sort by a field, ties broken by item id.

    Items that lack the field are placed last in id order.
    """
    present: list[Item] = []
    missing: list[Item] = []
    for item in items:
        (missing if field_value(item, field) is None else present).append(item)

    present.sort(key=lambda i: i.id)
    try:
        present.sort(key=lambda i: field_value(i, field), reverse=direction == Direction.DESC)  # type: ignore[arg-type,return-value]
    except TypeError as e:
        raise TypeMismatch(f"Cannot sort by {field}: values of different kinds") from e
    missing.sort(key=lambda i: i.id)
    return present + missing


def evaluate(node: QueryNode | None, items: Sequence[Item]) -> list[Item]:
    """
    Apply a query to items.

    An empty query returns every item in stored order. Otherwise hidden items
    are dropped unless the query asks for them with ``hidden = true``.
    """
    if node is None:
        return list(items)

    include_hidden = requests_hidden(node)
    candidates = [item for item in items if include_hidden or not item.hidden]

    if isinstance(node, Sort):
        selected = [item for item in candidates if matches(node, item)]
        result = sort_items(selected, node.field, node.direction)
    else:
        result = [item for item in candidates if matches(node, item)]

    logger.debug(f"Query selected {len(result)} of {len(items)} items")
    return result
