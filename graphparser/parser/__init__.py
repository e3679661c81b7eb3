"""
Graph expression parser package.

This package provides the scanning, shunting-yard parsing and postfix
evaluation stages for graph expressions.
"""

from .tokenizer import Token, TokenType, Tokenizer, scan
from .context import Context, FunctionConfig, OperatorConfig
from .parser import ParseError, Parser, format_postfix, parse
from .evaluator import (
    EvaluationError,
    Evaluator,
    MalformedExpressionError,
    StackUnderflowError,
    UnboundVariableError,
    evaluate,
)

__all__ = [
    "Token",
    "TokenType",
    "Tokenizer",
    "scan",
    "Context",
    "FunctionConfig",
    "OperatorConfig",
    "ParseError",
    "Parser",
    "format_postfix",
    "parse",
    "EvaluationError",
    "Evaluator",
    "MalformedExpressionError",
    "StackUnderflowError",
    "UnboundVariableError",
    "evaluate",
]
