"""
Grammar context for graph expressions.

The context holds the read-only tables shared by the tokenizer, the parser
and the evaluator:
- Reserved function names and their numeric implementations
- Single-character operators and punctuators
- Operator precedence

The parser pops on equal precedence, so every operator is left-associative,
including ``^``: ``2^3^2`` is ``(2^3)^2 = 64``. This differs from the usual
mathematical reading and is kept on purpose.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Callable, Mapping

import numpy as np

from .tokenizer import TokenType


@dataclass(frozen=True)
class OperatorConfig:
    """Configuration for an operator or punctuator."""

    symbol: str
    token_type: TokenType
    precedence: int


@dataclass(frozen=True)
class FunctionConfig:
    """Configuration for a unary function."""

    name: str
    token_type: TokenType
    evaluator: Callable[[np.float32], np.float32]
    precedence: int = 5


def _freeze(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


# Precedence, low to high. Modulo sits with the parenthesis at the bottom,
# so it binds looser than every other operator: 1 + 7 % 2 is (1 + 7) % 2.
_OPERATORS = (
    OperatorConfig("(", TokenType.LPAREN, 0),
    OperatorConfig(")", TokenType.RPAREN, 0),
    OperatorConfig("%", TokenType.MODULO, 0),
    OperatorConfig("+", TokenType.PLUS, 1),
    OperatorConfig("-", TokenType.MINUS, 1),
    OperatorConfig("*", TokenType.MULTIPLY, 2),
    OperatorConfig("/", TokenType.DIVIDE, 2),
    OperatorConfig("^", TokenType.POWER, 3),
    OperatorConfig("-", TokenType.NEGATE, 4),
)

_FUNCTIONS = (
    FunctionConfig("sin", TokenType.SINE, np.sin),
    FunctionConfig("cos", TokenType.COSINE, np.cos),
    FunctionConfig("tan", TokenType.TANGENT, np.tan),
    FunctionConfig("asin", TokenType.ARC_SINE, np.arcsin),
    FunctionConfig("acos", TokenType.ARC_COSINE, np.arccos),
    FunctionConfig("atan", TokenType.ARC_TANGENT, np.arctan),
    FunctionConfig("log", TokenType.LOG, np.log),
    FunctionConfig("exp", TokenType.EXP, np.exp),
    FunctionConfig("sqrt", TokenType.SQRT, np.sqrt),
    FunctionConfig("abs", TokenType.ABS, np.abs),
)


@dataclass(frozen=True)
class Context:
    """
    Grammar environment for scanning, parsing and evaluating expressions.

    Attributes:
        name: Context name
        input_variable: Identifier of the sampled coordinate
        operators: Operator and punctuator configurations keyed by token type
        functions: Function configurations keyed by token type
    """

    name: str
    input_variable: str = "x"
    operators: Mapping[TokenType, OperatorConfig] = field(default_factory=dict)
    functions: Mapping[TokenType, FunctionConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "operators", _freeze(self.operators))
        object.__setattr__(self, "functions", _freeze(self.functions))
        object.__setattr__(
            self,
            "_symbols",
            _freeze({
                op.symbol: op.token_type
                for op in self.operators.values()
                if op.token_type != TokenType.NEGATE
            }),
        )
        object.__setattr__(
            self,
            "_function_names",
            _freeze({fn.name: fn.token_type for fn in self.functions.values()}),
        )

    @classmethod
    def default(cls) -> "Context":
        """Return the shared standard graph context."""
        return _default_context()

    def identifier_type(self, name: str) -> TokenType:
        """Classify a letter run as the input variable, a function, or a named variable."""
        if name == self.input_variable:
            return TokenType.INPUT_X
        return self._function_names.get(name, TokenType.VARIABLE)

    def symbol_type(self, symbol: str) -> TokenType:
        """
        Map an operator/punctuator character to its token type.

        Raises:
            KeyError: If the character is not an operator or punctuator
        """
        return self._symbols[symbol]

    def get_precedence(self, token_type: TokenType) -> int:
        """
        Get the precedence of an operator, punctuator or function.

        Raises:
            KeyError: If the token type has no precedence (operands)
        """
        if token_type in self.functions:
            return self.functions[token_type].precedence
        return self.operators[token_type].precedence

    def get_function(self, token_type: TokenType) -> FunctionConfig:
        return self.functions[token_type]

    @property
    def function_names(self) -> frozenset[str]:
        return frozenset(self._function_names)


@lru_cache(maxsize=1)
def _default_context() -> Context:
    return Context(
        name="Graph",
        operators={op.token_type: op for op in _OPERATORS},
        functions={fn.token_type: fn for fn in _FUNCTIONS},
    )
