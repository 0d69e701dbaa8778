"""
Query language for filtering and sorting list items.

Example::

    node = parse("genre = 'rock' and year >= 1990 order by score desc", Schema.from_items(items))
    visible = evaluate(node, items)
"""

from .ast_nodes import And, Direction, Filter, Operator, Or, QueryNode, Sort, format_query
from .evaluator import evaluate
from .parser import QueryParser, parse
from .schema import FieldKind, Schema

__all__ = [
    "And",
    "Direction",
    "FieldKind",
    "Filter",
    "Operator",
    "Or",
    "QueryNode",
    "QueryParser",
    "Schema",
    "Sort",
    "evaluate",
    "format_query",
    "parse",
]
