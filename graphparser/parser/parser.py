"""
Shunting-yard parser for graph expressions.

The parser converts the scanner's token stream into a postfix
(Reverse-Polish) token sequence. It does not build a tree; the evaluator
recovers structure from stack discipline alone.

Operators are popped while the operator on top of the stack has a precedence
greater than or equal to the incoming one, so operators of equal precedence
are left-associative. ``^`` is no exception: ``2^3^2`` parses as ``(2^3)^2``.
Negation and functions are prefix operators; they are pushed without popping,
so ``--x`` and ``sin -x`` apply the innermost operator first.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ..core.errors import GraphParserError
from ..core.logging import get_logger
from .context import Context
from .tokenizer import Token, TokenType

logger = get_logger(__name__)


class ParseError(GraphParserError):
    """Exception raised during parsing."""

    def __init__(self, message: str, token: Token):
        self.token = token
        super().__init__(
            f"{message} at position {token.pos}: '{token.value}'",
            details={
                "token": token.type.name,
                "value": token.value,
                "position": token.pos,
            },
        )


def format_postfix(postfix: Iterable[Token]) -> str:
    """
    Render a postfix sequence as space-separated source text.

    Negation is written as ``neg`` so it cannot be confused with subtraction.

    Examples:
    - [x, 10, /, sin] → "x 10 / sin"
    - [x, NEGATE] → "x neg"
    """
    parts = []
    for token in postfix:
        if token.type == TokenType.NEGATE:
            parts.append("neg")
        else:
            parts.append(token.value)
    return " ".join(parts)


class Parser:
    """
    Operator-precedence parser producing postfix token sequences.

    Operands go straight to the output. Operators, negation and functions
    wait on an auxiliary stack until an operator of lower precedence, a
    closing parenthesis, or the end of input releases them.
    """

    def __init__(self, context: Context | None = None):
        """
        Initialize parser with optional context.

        Args:
            context: Grammar tables (defaults to the standard graph context)
        """
        self.context = context or Context.default()

    def parse(self, tokens: Sequence[Token]) -> list[Token]:
        """
        Convert an infix token sequence to postfix order.

        Args:
            tokens: Tokens produced by the tokenizer

        Returns:
            Postfix token sequence (parentheses removed)

        Raises:
            ParseError: If the parentheses are unbalanced
        """
        stack: list[Token] = []
        postfix: list[Token] = []

        for token in tokens:
            if token.is_operand:
                postfix.append(token)

            elif token.type == TokenType.LPAREN:
                stack.append(token)

            elif token.type == TokenType.RPAREN:
                while stack and stack[-1].type != TokenType.LPAREN:
                    postfix.append(stack.pop())
                if not stack:
                    raise ParseError("Unmatched closing parenthesis", token)
                stack.pop()

            elif token.type == TokenType.NEGATE or token.is_function:
                # Prefix operators have no left operand to complete
                stack.append(token)

            elif token.is_operator:
                precedence = self.context.get_precedence(token.type)
                while (
                    stack
                    and stack[-1].type != TokenType.LPAREN
                    and self.context.get_precedence(stack[-1].type) >= precedence
                ):
                    postfix.append(stack.pop())
                stack.append(token)

            else:
                raise ParseError("Unexpected token", token)

        while stack:
            token = stack.pop()
            if token.type == TokenType.LPAREN:
                raise ParseError("Unclosed parenthesis", token)
            postfix.append(token)

        logger.debug("Parsed %d tokens to postfix: %s", len(tokens), format_postfix(postfix))
        return postfix


def parse(tokens: Sequence[Token], context: Context | None = None) -> list[Token]:
    """Convert ``tokens`` to postfix order."""
    return Parser(context).parse(tokens)
