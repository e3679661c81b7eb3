"""
Tokenizer for graph expressions.

This module provides the token model and a regex-based scanner. The scanner
is lenient: it never fails, and characters it does not recognize are dropped.
It handles numbers, the input variable ``x``, named variables, the reserved
function names, and the single-character operators and parentheses.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from ..core.logging import get_logger

if TYPE_CHECKING:
    from .context import Context

logger = get_logger(__name__)


class TokenType(Enum):
    """Token types for graph expressions."""

    UNKNOWN = auto()

    # Identifiers
    INPUT_X = auto()  # x
    VARIABLE = auto()  # a, b, c ...
    SINE = auto()  # sin
    COSINE = auto()  # cos
    TANGENT = auto()  # tan
    ARC_SINE = auto()  # asin
    ARC_COSINE = auto()  # acos
    ARC_TANGENT = auto()  # atan
    LOG = auto()  # log
    EXP = auto()  # exp
    SQRT = auto()  # sqrt
    ABS = auto()  # abs

    # Literals
    NUMBER = auto()

    # Operators
    PLUS = auto()  # +
    MINUS = auto()  # -
    MULTIPLY = auto()  # *
    DIVIDE = auto()  # /
    MODULO = auto()  # %
    POWER = auto()  # ^
    NEGATE = auto()  # unary -

    # Punctuators
    LPAREN = auto()  # (
    RPAREN = auto()  # )


OPERAND_TYPES = frozenset({TokenType.NUMBER, TokenType.INPUT_X, TokenType.VARIABLE})

FUNCTION_TYPES = frozenset({
    TokenType.SINE,
    TokenType.COSINE,
    TokenType.TANGENT,
    TokenType.ARC_SINE,
    TokenType.ARC_COSINE,
    TokenType.ARC_TANGENT,
    TokenType.LOG,
    TokenType.EXP,
    TokenType.SQRT,
    TokenType.ABS,
})

OPERATOR_TYPES = frozenset({
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.MULTIPLY,
    TokenType.DIVIDE,
    TokenType.MODULO,
    TokenType.POWER,
    TokenType.NEGATE,
})


@dataclass(frozen=True)
class Token:
    """
    Represents a single token in the expression.

    Attributes:
        type: The token type
        value: The source text of the token (a single character for operators)
        pos: Position in the source string (for error reporting)
    """

    type: TokenType
    value: str
    pos: int

    @property
    def is_operand(self) -> bool:
        return self.type in OPERAND_TYPES

    @property
    def is_function(self) -> bool:
        return self.type in FUNCTION_TYPES

    @property
    def is_operator(self) -> bool:
        return self.type in OPERATOR_TYPES

    def __repr__(self) -> str:
        return f"Token({self.type.name}, '{self.value}', pos={self.pos})"


class Tokenizer:
    """
    Scans graph expressions into tokens in a single left-to-right pass.

    Each position is classified as whitespace, a digit run, a letter run,
    an operator/punctuator, or anything else. Whitespace and unrecognized
    characters produce no token.
    """

    # Regex patterns for token matching (order matters)
    PATTERNS = {
        # Digits, then an optional '.' and more digits; "3." is accepted
        "NUMBER": r"[0-9]+(?:\.[0-9]*)?",
        "IDENTIFIER": r"[a-zA-Z]+",
        "SYMBOL": r"[-+*/%^()]",
        "WHITESPACE": r"[ \t\r\n]+",
        "UNKNOWN": r".",
    }

    def __init__(self, context: "Context | None" = None):
        """
        Initialize tokenizer with optional context.

        Args:
            context: Grammar tables (defaults to the standard graph context)
        """
        from .context import Context

        self.context = context or Context.default()
        self._compile_patterns()

    def _compile_patterns(self) -> None:
        """Compile regex patterns for faster matching."""
        pattern_parts = []
        for name, pattern in self.PATTERNS.items():
            pattern_parts.append(f"(?P<{name}>{pattern})")

        self.combined_pattern = re.compile("|".join(pattern_parts), re.DOTALL)

    def tokenize(self, expression: str) -> list[Token]:
        """
        Tokenize a graph expression.

        Args:
            expression: The expression to tokenize

        Returns:
            List of tokens; never contains an UNKNOWN token
        """
        tokens: list[Token] = []

        for match in self.combined_pattern.finditer(expression):
            kind = match.lastgroup
            value = match.group()
            pos = match.start()

            if kind == "WHITESPACE":
                continue

            if kind == "UNKNOWN":
                logger.debug(
                    "Dropping unrecognized character %r at position %d", value, pos
                )
                continue

            if kind == "NUMBER":
                token_type = TokenType.NUMBER
            elif kind == "IDENTIFIER":
                token_type = self.context.identifier_type(value)
            else:
                token_type = self.context.symbol_type(value)
                if token_type == TokenType.MINUS and self._is_unary_position(tokens):
                    token_type = TokenType.NEGATE

            tokens.append(Token(token_type, value, pos))

        return tokens

    def _is_unary_position(self, tokens: list[Token]) -> bool:
        """
        Check whether a '-' at the end of ``tokens`` is a negation.

        A minus is binary only when it follows something that ends an
        operand: a number, a variable, or a closing parenthesis.
        """
        if not tokens:
            return True

        previous = tokens[-1]
        return not (previous.is_operand or previous.type == TokenType.RPAREN)


def scan(expression: str, context: "Context | None" = None) -> list[Token]:
    """Scan ``expression`` into tokens."""
    return Tokenizer(context).tokenize(expression)
