"""
Query parser.

Turns query text into a QueryNode tree. Field references and literal types
are checked against a Schema while parsing, so a query that parses can
always be evaluated against items matching that schema.
"""

import math
import re
from datetime import date

from ..exceptions import ParseError, TypeMismatch, UnknownField
from ..logging_config import get_logger
from .ast_nodes import And, Direction, Filter, Literal, Operator, Or, QueryNode, Sort
from .lexer import QueryLexer, Token, unescape
from .schema import FieldKind, Schema

logger = get_logger("query_parser")

_ISO_DATE = re.compile(r'\d{4}-\d{2}-\d{2}')
_ORDERING = frozenset({Operator.LT, Operator.LE, Operator.GT, Operator.GE})


class QueryParser:
    """Recursive descent parser for list queries."""

    def __init__(self, schema: Schema | None = None):
        self.schema = schema or Schema()
        self.tokens: list[Token] = []
        self.pos = 0

    def parse(self, text: str) -> QueryNode | None:
        """
        Parse query text into an AST.

        Args:
            text: Query text, e.g. ``genre = 'rock' and year >= 1990 order by score desc``

        Returns:
            Root QueryNode, or None when the text is empty

        Raises:
            ParseError: malformed text
            UnknownField: a field absent from the schema
            TypeMismatch: a literal or operator incompatible with the field kind
        """
        self.tokens = QueryLexer(text).tokens
        self.pos = 0

        if self._peek().type == 'EOF':
            return None

        expr = None
        if not self._at_sort_clause():
            expr = self._parse_or()

        if self._peek().type != 'EOF':
            if not self._at_sort_clause():
                token = self._peek()
                raise ParseError(f"Unexpected token: {token.value}", token.position)
            node = self._parse_sort(expr)
        else:
            node = expr

        token = self._peek()
        if token.type != 'EOF':
            raise ParseError(f"Unexpected token: {token.value}", token.position)

        logger.debug(f"Parsed query {text!r} -> {node!r}")
        return node

    def _peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _consume(self, expected_type: str | None = None, description: str | None = None) -> Token:
        token = self._peek()
        if expected_type and token.type != expected_type:
            found = token.value if token.type != 'EOF' else "end of query"
            raise ParseError(f"Expected {description or expected_type}, found: {found}", token.position)
        if token.type != 'EOF':
            self.pos += 1
        return token

    def _at_sort_clause(self) -> bool:
        token = self._peek()
        if token.type == 'ORDER':
            return True
        return token.type == 'IDENTIFIER' and self._peek(1).type in ('ASC', 'DESC', 'EOF')

    def _parse_or(self) -> QueryNode:
        children = [self._parse_and()]
        while self._peek().type == 'OR':
            self._consume('OR')
            children.append(self._parse_and())
        return _combine(Or, children)

    def _parse_and(self) -> QueryNode:
        children = [self._parse_factor()]
        while self._peek().type == 'AND':
            self._consume('AND')
            children.append(self._parse_factor())
        return _combine(And, children)

    def _parse_factor(self) -> QueryNode:
        if self._peek().type == 'LPAREN':
            self._consume('LPAREN')
            expr = self._parse_or()
            self._consume('RPAREN', "')'")
            return expr
        return self._parse_comparison()

    def _parse_field(self) -> tuple[str, FieldKind, Token]:
        token = self._consume('IDENTIFIER', "field name")
        kind = self.schema.kind(token.value)
        if kind is None:
            raise UnknownField(token.value, token.position)
        return token.value, kind, token

    def _parse_comparison(self) -> Filter:
        field, kind, field_token = self._parse_field()

        op_token = self._peek()
        if op_token.type == 'OPERATOR' or op_token.type == 'CONTAINS':
            self._consume()
            operator = Operator(op_token.value.lower())
        else:
            found = op_token.value if op_token.type != 'EOF' else "end of query"
            raise ParseError(f"Expected comparison operator, found: {found}", op_token.position)

        value_token = self._consume()
        if value_token.type not in ('NUMBER', 'STRING', 'TRUE', 'FALSE'):
            found = value_token.value if value_token.type != 'EOF' else "end of query"
            raise ParseError(f"Expected a value, found: {found}", value_token.position)

        value = self._check_types(field, kind, operator, value_token, field_token)
        return Filter(field=field, operator=operator, value=value)

    def _check_types(
        self,
        field: str,
        kind: FieldKind,
        operator: Operator,
        value_token: Token,
        field_token: Token,
    ) -> Literal:
        """Validate operator and literal against the field kind and return the typed literal."""
        position = value_token.position

        if kind == FieldKind.MIXED:
            raise TypeMismatch(f"Field {field} holds values of different kinds", field_token.position)

        if operator == Operator.CONTAINS and kind != FieldKind.TEXT:
            raise TypeMismatch(f"'contains' requires a text field, {field} is {kind.value}", field_token.position)

        if kind == FieldKind.NUMBER:
            if value_token.type != 'NUMBER':
                raise TypeMismatch(f"Field {field} is a number, got {value_token.value}", position)
            return _parse_number(value_token)

        if kind == FieldKind.TEXT:
            if value_token.type != 'STRING':
                raise TypeMismatch(f"Field {field} is text, got {value_token.value}", position)
            return unescape(value_token.value)

        if kind == FieldKind.DATE:
            if value_token.type != 'STRING':
                raise TypeMismatch(f"Field {field} is a date, got {value_token.value}", position)
            text = unescape(value_token.value)
            if not _ISO_DATE.fullmatch(text):
                raise TypeMismatch(f"Field {field} is a date, expected 'YYYY-MM-DD', got {text!r}", position)
            try:
                return date.fromisoformat(text)
            except ValueError as e:
                raise TypeMismatch(f"Invalid date {text!r}: {e}", position) from e

        # Boolean
        if operator in _ORDERING:
            raise TypeMismatch(f"Field {field} only supports = and !=", field_token.position)
        if value_token.type not in ('TRUE', 'FALSE'):
            raise TypeMismatch(f"Field {field} is a boolean, got {value_token.value}", position)
        return value_token.type == 'TRUE'

    def _parse_sort(self, child: QueryNode | None) -> Sort:
        if self._peek().type == 'ORDER':
            self._consume('ORDER')
            self._consume('BY', "'by'")
        field, kind, field_token = self._parse_field()
        if kind == FieldKind.MIXED:
            raise TypeMismatch(f"Cannot sort by {field}: values of different kinds", field_token.position)

        direction = Direction.ASC
        if self._peek().type in ('ASC', 'DESC'):
            direction = Direction(self._consume().value.lower())
        return Sort(field=field, direction=direction, child=child)


def _parse_number(token: Token) -> int | float:
    text = token.value
    if re.fullmatch(r'-?\d+', text):
        return int(text)
    value = float(text)
    if not math.isfinite(value):
        raise ParseError(f"Number out of range: {text}", token.position)
    return value


def _combine(node_type: type[And] | type[Or], children: list[QueryNode]) -> QueryNode:
    """Build an And/Or node, splicing nested nodes of the same type."""
    if len(children) == 1:
        return children[0]
    flat: list[QueryNode] = []
    for child in children:
        if isinstance(child, node_type):
            flat.extend(child.children)
        else:
            flat.append(child)
    return node_type(children=tuple(flat))


def parse(text: str, schema: Schema | None = None) -> QueryNode | None:
    """Parse query text against a schema (reserved fields only when omitted)."""
    return QueryParser(schema).parse(text)
