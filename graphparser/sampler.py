"""
Sampling of graph expressions over a coordinate range.

An expression is scanned and parsed once; only the evaluator runs for each
sampled coordinate.

Example:
    >>> parser = GraphParser()
    >>> points = parser.exec("sin(x / 10.0) * 50.0 + 100", 0.0, 500.0, 0.5)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .core.config import get_settings
from .core.errors import SamplingError
from .core.logging import get_context_logger
from .parser.context import Context
from .parser.evaluator import Evaluator
from .parser.parser import Parser, format_postfix
from .parser.tokenizer import Token, TokenType, Tokenizer


class Sample(BaseModel):
    """
    One (x, y) point of a sampled graph.

    Both coordinates are stored as the nearest single-precision value. Samples
    also behave as 2-D vectors: they add and subtract with each other and
    scale by a number.
    """

    model_config = ConfigDict(frozen=True)

    x: float = Field(default=0.0, description="Sampled coordinate")
    y: float = Field(default=0.0, description="Expression value at x")

    @field_validator("x", "y", mode="before")
    @classmethod
    def to_single_precision(cls, v):
        return float(np.float32(v))

    def __add__(self, other: "Sample") -> "Sample":
        if not isinstance(other, Sample):
            return NotImplemented
        return Sample(x=self.x + other.x, y=self.y + other.y)

    def __sub__(self, other: "Sample") -> "Sample":
        if not isinstance(other, Sample):
            return NotImplemented
        return Sample(x=self.x - other.x, y=self.y - other.y)

    def __mul__(self, scalar: float) -> "Sample":
        if not isinstance(scalar, (int, float, np.number)):
            return NotImplemented
        return Sample(x=self.x * scalar, y=self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Sample":
        if not isinstance(scalar, (int, float, np.number)):
            return NotImplemented
        return Sample(x=self.x / scalar, y=self.y / scalar)

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class CompiledExpression:
    """
    A scanned and parsed expression, ready for repeated evaluation.

    Attributes:
        source: The original expression string
        postfix: Tokens in Reverse-Polish order
    """

    source: str
    postfix: tuple[Token, ...]
    evaluator: Evaluator

    @property
    def variables(self) -> frozenset[str]:
        """Names of the named variables the expression refers to."""
        return frozenset(
            token.value for token in self.postfix if token.type == TokenType.VARIABLE
        )

    def evaluate(self, x: float, variables: Mapping[str, float] | None = None) -> np.float32:
        """Evaluate the expression at ``x``."""
        return self.evaluator.evaluate(self.postfix, x, variables)

    def __str__(self) -> str:
        return format_postfix(self.postfix)


class _Unset:
    """Marker for an argument the caller did not pass."""

    def __repr__(self) -> str:
        return "<unset>"


_UNSET = _Unset()


class GraphParser:
    """
    Samples an expression of ``x`` and named constants over a range.

    Each call to ``exec`` owns its token sequences and variable bindings;
    nothing is kept between calls.
    """

    def __init__(
        self,
        context: Context | None = None,
        max_samples: Optional[int] | _Unset = _UNSET,
    ):
        """
        Args:
            context: Grammar tables (defaults to the standard graph context)
            max_samples: Upper bound on samples per run; ``None`` means
                unbounded. When omitted, the ``MAX_SAMPLES`` setting applies.
        """
        self.context = context or Context.default()
        if isinstance(max_samples, _Unset):
            max_samples = get_settings().MAX_SAMPLES
        self.max_samples = max_samples

    def compile(self, expression: str) -> CompiledExpression:
        """
        Scan and parse an expression.

        Raises:
            ParseError: If the parentheses are unbalanced
        """
        tokens = Tokenizer(self.context).tokenize(expression)
        postfix = Parser(self.context).parse(tokens)
        return CompiledExpression(
            source=expression,
            postfix=tuple(postfix),
            evaluator=Evaluator(self.context),
        )

    def exec(
        self,
        expression: str,
        x_begin: float,
        x_end: float,
        x_step: float,
        variables: Mapping[str, float] | None = None,
    ) -> list[Sample]:
        """
        Evaluate ``expression`` from ``x_begin`` towards ``x_end``.

        A positive step samples while ``x <= x_end``; a zero or negative step
        samples while ``x >= x_end``. A zero step with ``x_end <= x_begin``
        never leaves the range, nor does a step too small to change ``x`` in
        single precision; such runs continue until ``max_samples`` is hit, or
        forever when no limit is set.

        Args:
            expression: Expression in ``x`` and named variables
            x_begin: First sampled coordinate
            x_end: Last coordinate (inclusive)
            x_step: Coordinate increment
            variables: Values of the named variables for this run

        Returns:
            Samples in iteration order

        Raises:
            ParseError: If the expression cannot be parsed
            EvaluationError: If evaluation fails at any coordinate
            SamplingError: If more than ``max_samples`` samples would be produced
        """
        bindings = dict(variables or {})
        compiled = self.compile(expression)

        log = get_context_logger(__name__, expression=expression)
        log.debug(
            "Sampling",
            extra_data={
                "postfix": str(compiled),
                "x_begin": x_begin,
                "x_end": x_end,
                "x_step": x_step,
            },
        )

        x = np.float32(x_begin)
        end = np.float32(x_end)
        step = np.float32(x_step)

        if step > 0:
            def in_range(value):
                return value <= end
        else:
            def in_range(value):
                return value >= end

        samples: list[Sample] = []
        while in_range(x):
            if self.max_samples is not None and len(samples) >= self.max_samples:
                raise SamplingError(expression, self.max_samples)
            samples.append(Sample(x=x, y=compiled.evaluate(x, bindings)))
            x = np.float32(x + step)

        log.debug("Sampled %d points", len(samples))
        return samples


def sample_expression(
    expression: str,
    x_begin: float,
    x_end: float,
    x_step: float,
    variables: Mapping[str, float] | None = None,
) -> list[Sample]:
    """Sample ``expression`` with a fresh ``GraphParser``."""
    return GraphParser().exec(expression, x_begin, x_end, x_step, variables)
