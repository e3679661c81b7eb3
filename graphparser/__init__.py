"""
graphparser - sample mathematical expressions of x for plotting.

    >>> from graphparser import sample_expression
    >>> [p.as_tuple() for p in sample_expression("a + x", 0, 2, 1, {"a": 10})]
    [(0.0, 10.0), (1.0, 11.0), (2.0, 12.0)]
"""

from .core.errors import GraphParserError, SamplingError
from .parser import (
    EvaluationError,
    MalformedExpressionError,
    ParseError,
    StackUnderflowError,
    Token,
    TokenType,
    UnboundVariableError,
    evaluate,
    parse,
    scan,
)
from .sampler import CompiledExpression, GraphParser, Sample, sample_expression

__version__ = "1.0.0"

__all__ = [
    "GraphParserError",
    "SamplingError",
    "EvaluationError",
    "MalformedExpressionError",
    "ParseError",
    "StackUnderflowError",
    "UnboundVariableError",
    "Token",
    "TokenType",
    "evaluate",
    "parse",
    "scan",
    "CompiledExpression",
    "GraphParser",
    "Sample",
    "sample_expression",
]
