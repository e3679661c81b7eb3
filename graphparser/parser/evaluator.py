"""
Stack-machine evaluator for postfix graph expressions.

Values are single-precision floats (``numpy.float32``). Floating-point domain
cases such as division by zero or ``log`` of a negative number follow IEEE
rules and propagate as inf/NaN. Structural problems in the postfix sequence
raise an ``EvaluationError`` subclass instead.
"""

from __future__ import annotations

import operator
from types import MappingProxyType
from typing import Callable, Mapping, Sequence

import numpy as np

from ..core.errors import GraphParserError
from ..core.logging import get_logger
from .context import Context
from .parser import format_postfix
from .tokenizer import Token, TokenType

logger = get_logger(__name__)


class EvaluationError(GraphParserError):
    """Exception raised while evaluating a postfix sequence."""

    def __init__(self, message: str, postfix: Sequence[Token], token: Token | None = None):
        self.token = token
        details = {"expression": format_postfix(postfix)}
        if token is not None:
            details.update(token=token.type.name, value=token.value, position=token.pos)
            message = f"{message} at position {token.pos}: '{token.value}'"
        super().__init__(message, details=details)


class StackUnderflowError(EvaluationError):
    """An operator found fewer operands than it needs."""


class UnboundVariableError(EvaluationError):
    """A named variable has no value in the binding map."""

    def __init__(self, name: str, postfix: Sequence[Token], token: Token):
        self.name = name
        super().__init__(f"Unbound variable '{name}'", postfix, token)
        self.details["variable"] = name


class MalformedExpressionError(EvaluationError):
    """The postfix sequence does not reduce to exactly one value."""


def _modulo(left: np.float32, right: np.float32) -> np.float32:
    """Truncate both operands to integers and take the C-style remainder."""
    a, b = int(left), int(right)
    remainder = abs(a) % abs(b)
    return np.float32(-remainder if a < 0 else remainder)


_BINARY_OPERATIONS: Mapping[TokenType, Callable[[np.float32, np.float32], np.float32]] = MappingProxyType({
    TokenType.PLUS: operator.add,
    TokenType.MINUS: operator.sub,
    TokenType.MULTIPLY: operator.mul,
    TokenType.DIVIDE: operator.truediv,
    TokenType.POWER: np.power,
    TokenType.MODULO: _modulo,
})


class Evaluator:
    """
    Evaluates postfix token sequences for a given coordinate.

    Each call owns a private value stack; the postfix sequence and the
    variable map are only read, so one evaluator can be shared freely.
    """

    def __init__(self, context: Context | None = None):
        self.context = context or Context.default()

    def evaluate(
        self,
        postfix: Sequence[Token],
        x: float,
        variables: Mapping[str, float] | None = None,
    ) -> np.float32:
        """
        Evaluate a postfix sequence.

        Args:
            postfix: Tokens in Reverse-Polish order
            x: Value of the input variable
            variables: Values of the named variables

        Returns:
            The single value left on the stack

        Raises:
            StackUnderflowError: If an operator lacks operands
            UnboundVariableError: If a named variable is missing from ``variables``
            MalformedExpressionError: If the stack does not end with exactly one value
            EvaluationError: If a variable is bound to a non-numeric value, or a
                modulo operand cannot be truncated or is zero
        """
        variables = variables or {}
        x_value = np.float32(x)
        stack: list[np.float32] = []

        def pop(token: Token) -> np.float32:
            if not stack:
                raise StackUnderflowError(
                    f"Missing operand for '{token.value}'", postfix, token
                )
            return stack.pop()

        with np.errstate(all="ignore"):
            for token in postfix:
                if token.type == TokenType.NUMBER:
                    stack.append(np.float32(float(token.value)))

                elif token.type == TokenType.INPUT_X:
                    stack.append(x_value)

                elif token.type == TokenType.VARIABLE:
                    if token.value not in variables:
                        raise UnboundVariableError(token.value, postfix, token)
                    try:
                        stack.append(np.float32(variables[token.value]))
                    except (TypeError, ValueError) as e:
                        raise EvaluationError(
                            f"Variable '{token.value}' is bound to non-numeric value "
                            f"{variables[token.value]!r}",
                            postfix,
                            token,
                        ) from e

                elif token.type == TokenType.NEGATE:
                    stack.append(-pop(token))

                elif token.is_function:
                    function = self.context.get_function(token.type)
                    stack.append(np.float32(function.evaluator(pop(token))))

                elif token.type in _BINARY_OPERATIONS:
                    right = pop(token)
                    left = pop(token)
                    stack.append(self._apply_binary(token, left, right, postfix))

                else:
                    raise MalformedExpressionError(
                        f"Unexpected {token.type.name} token", postfix, token
                    )

        if len(stack) != 1:
            raise MalformedExpressionError(
                f"Expression left {len(stack)} values on the stack, expected 1",
                postfix,
            )

        return stack[0]

    def _apply_binary(
        self,
        token: Token,
        left: np.float32,
        right: np.float32,
        postfix: Sequence[Token],
    ) -> np.float32:
        if token.type == TokenType.MODULO:
            try:
                return _modulo(left, right)
            except (ValueError, OverflowError) as e:
                raise EvaluationError(
                    f"Modulo operand {left} % {right} is not finite", postfix, token
                ) from e
            except ZeroDivisionError as e:
                raise EvaluationError("Integer modulo by zero", postfix, token) from e

        return np.float32(_BINARY_OPERATIONS[token.type](left, right))


def evaluate(
    postfix: Sequence[Token],
    x: float,
    variables: Mapping[str, float] | None = None,
    context: Context | None = None,
) -> np.float32:
    """Evaluate ``postfix`` at coordinate ``x``."""
    return Evaluator(context).evaluate(postfix, x, variables)
