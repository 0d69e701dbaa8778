"""Tokenizer for list query text"""

import re
from dataclasses import dataclass

from ..exceptions import ParseError

KEYWORDS = frozenset({"and", "or", "contains", "order", "by", "asc", "desc", "true", "false"})


@dataclass(frozen=True)
class Token:
    type: str
    value: str
    position: int


class QueryLexer:
    """Tokenizer for the query language"""

    TOKEN_PATTERNS = [
        ('WHITESPACE', r'\s+'),
        ('NUMBER', r'-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?(?![A-Za-z0-9_])'),
        ('STRING', r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\""),
        ('IDENTIFIER', r'[A-Za-z_][A-Za-z0-9_]*'),
        ('OPERATOR', r'!=|<=|>=|=|<|>'),
        ('LPAREN', r'\('),
        ('RPAREN', r'\)'),
    ]

    _REGEXES = [(token_type, re.compile(pattern)) for token_type, pattern in TOKEN_PATTERNS]

    def __init__(self, text: str):
        self.text = text
        self.tokens: list[Token] = []
        self._tokenize()

    def _tokenize(self) -> None:
        """Tokenize the input text"""
        pos = 0
        while pos < len(self.text):
            for token_type, regex in self._REGEXES:
                match = regex.match(self.text, pos)
                if match:
                    value = match.group(0)
                    if token_type == 'IDENTIFIER' and value.lower() in KEYWORDS:
                        self.tokens.append(Token(value.upper(), value, pos))
                    elif token_type != 'WHITESPACE':
                        self.tokens.append(Token(token_type, value, pos))
                    pos = match.end()
                    break
            else:
                char = self.text[pos]
                if char in "'\"":
                    raise ParseError("Unterminated string literal", pos)
                raise ParseError(f"Unexpected character: {char}", pos)
        self.tokens.append(Token('EOF', '', len(self.text)))


def unescape(literal: str) -> str:
    """Strip quotes and resolve backslash escapes of a STRING token."""
    body = literal[1:-1]
    return re.sub(r'\\(.)', r'\1', body, flags=re.DOTALL)
