"""Tests for sampling expressions over a coordinate range."""

import math

import numpy as np
import pytest

import graphparser.sampler as sampler_module
from graphparser import (
    CompiledExpression,
    GraphParser,
    ParseError,
    Sample,
    SamplingError,
    UnboundVariableError,
    sample_expression,
)
from graphparser.core.config import get_settings
from graphparser.parser import Tokenizer


class TestSample:
    """Test the Sample point model."""

    def test_create_sample(self):
        """Test creating a sample with keyword fields."""
        sample = Sample(x=1.0, y=2.0)
        assert sample.x == 1.0
        assert sample.y == 2.0

    def test_defaults_to_origin(self):
        """Test a sample defaults to (0, 0)."""
        assert Sample().as_tuple() == (0.0, 0.0)

    def test_single_precision(self):
        """Test coordinates are rounded to float32."""
        sample = Sample(x=0.1, y=np.float32(0.2))
        assert sample.x == float(np.float32(0.1))
        assert sample.y == float(np.float32(0.2))

    def test_frozen(self, assert_validation_error):
        """Test samples are immutable."""
        sample = Sample(x=1.0, y=2.0)
        with pytest.raises(Exception):
            sample.x = 5.0
        assert_validation_error(Sample, {"x": "left", "y": 0.0}, expected_field="x")

    def test_vector_arithmetic(self):
        """Test samples add, subtract and scale like 2-D vectors."""
        a = Sample(x=1.0, y=2.0)
        b = Sample(x=3.0, y=4.0)
        assert a + b == Sample(x=4.0, y=6.0)
        assert b - a == Sample(x=2.0, y=2.0)
        assert a * 2 == Sample(x=2.0, y=4.0)
        assert 2 * a == Sample(x=2.0, y=4.0)
        assert b / 2 == Sample(x=1.5, y=2.0)

    def test_length(self):
        """Test vector length and squared length."""
        sample = Sample(x=3.0, y=4.0)
        assert sample.length() == 5.0
        assert sample.length_squared() == 25.0

    def test_unsupported_operand(self):
        """Test arithmetic with unrelated types is rejected."""
        with pytest.raises(TypeError):
            Sample(x=1.0, y=1.0) + 1


class TestGraphParserExec:
    """Test GraphParser.exec sampling."""

    def test_ascending(self, graph_parser):
        """Test a positive step samples x = 0..5 inclusive."""
        samples = graph_parser.exec("x", 0, 5, 1, {})
        assert [s.x for s in samples] == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]
        assert [s.y for s in samples] == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]

    def test_descending(self, graph_parser):
        """Test a negative step samples x = 5..0 in iteration order."""
        samples = graph_parser.exec("x", 5, 0, -1, {})
        assert [s.x for s in samples] == [5.0, 4.0, 3.0, 2.0, 1.0, 0.0]

    def test_single_point(self, graph_parser):
        """Test 'a + x' over [0, 0] with a = 10."""
        samples = graph_parser.exec("a + x", 0, 0, 1, {"a": 10})
        assert samples == [Sample(x=0.0, y=10.0)]

    def test_missing_variable(self, graph_parser):
        """Test omitting a referenced variable raises UnboundVariableError."""
        with pytest.raises(UnboundVariableError):
            graph_parser.exec("a + x", 0, 0, 1, {})

    def test_variables_optional(self, graph_parser):
        """Test variables may be omitted."""
        assert len(graph_parser.exec("x ^ 2", -1, 1, 0.5)) == 5

    def test_empty_range(self, graph_parser):
        """Test a step pointing away from the end produces no samples."""
        assert graph_parser.exec("x", 1, 0, 1) == []
        assert graph_parser.exec("x", 0, 1, -1) == []

    def test_coordinates_accumulate_in_single_precision(self, graph_parser):
        """Test x advances by repeated float32 addition."""
        samples = graph_parser.exec("x", 0, 1, 0.1)
        x = np.float32(0)
        expected = []
        while x <= np.float32(1):
            expected.append(float(x))
            x = np.float32(x + np.float32(0.1))
        assert [s.x for s in samples] == expected

    def test_plotting_example(self, graph_parser):
        """Test the classic plotted curve from 0 to 500 in steps of 0.5."""
        samples = graph_parser.exec("sin(x / 10.0) * 50.0 + 100", 0.0, 500.0, 0.5, {})
        assert len(samples) == 1001
        assert samples[0] == Sample(x=0.0, y=100.0)
        assert samples[-1].x == 500.0
        assert samples[-1].y == pytest.approx(math.sin(50.0) * 50.0 + 100, rel=1e-5)

    def test_parse_error_propagates(self, graph_parser):
        """Test malformed expressions fail before sampling."""
        with pytest.raises(ParseError):
            graph_parser.exec("sin(x", 0, 1, 1)

    def test_scans_and_parses_once(self, graph_parser, monkeypatch):
        """Test the expression is tokenized once per run, not per sample."""
        calls = []

        class CountingTokenizer(Tokenizer):
            def tokenize(self, expression):
                calls.append(expression)
                return super().tokenize(expression)

        monkeypatch.setattr(sampler_module, "Tokenizer", CountingTokenizer)
        samples = graph_parser.exec("x * 2", 0, 10, 1)
        assert len(samples) == 11
        assert calls == ["x * 2"]

    def test_caller_variables_not_retained(self, graph_parser):
        """Test later changes to the caller's map do not affect a finished run."""
        variables = {"a": 1.0}
        first = graph_parser.exec("a", 0, 0, 1, variables)
        variables["a"] = 2.0
        assert first == [Sample(x=0.0, y=1.0)]
        assert graph_parser.exec("a", 0, 0, 1, variables) == [Sample(x=0.0, y=2.0)]

    def test_sample_expression_shortcut(self):
        """Test the module-level shortcut."""
        samples = sample_expression("2 * x", 0, 2, 1)
        assert [s.as_tuple() for s in samples] == [(0.0, 0.0), (1.0, 2.0), (2.0, 4.0)]


class TestSampleLimit:
    """Test the optional sample-count guard."""

    def test_zero_step_hits_limit(self):
        """Test a zero step that never leaves the range is stopped by the limit."""
        with pytest.raises(SamplingError) as exc_info:
            GraphParser(max_samples=3).exec("x", 1, 0, 0)
        assert exc_info.value.details == {"expression": "x", "max_samples": 3}

    def test_limit_not_hit(self):
        """Test a run producing exactly the limit succeeds."""
        assert len(GraphParser(max_samples=6).exec("x", 0, 5, 1)) == 6

    def test_limit_from_settings(self, monkeypatch):
        """Test the default limit comes from the MAX_SAMPLES setting."""
        monkeypatch.setattr(get_settings(), "MAX_SAMPLES", 2)
        parser = GraphParser()
        assert parser.max_samples == 2
        with pytest.raises(SamplingError):
            parser.exec("x", 0, 5, 1)

    def test_explicit_none_overrides_setting(self, monkeypatch):
        """Test max_samples=None is unbounded even when MAX_SAMPLES is set."""
        monkeypatch.setattr(get_settings(), "MAX_SAMPLES", 3)
        parser = GraphParser(max_samples=None)
        assert parser.max_samples is None
        assert len(parser.exec("x", 0, 5, 1)) == 6

    def test_unlimited_by_default(self):
        """Test no limit is set unless configured."""
        assert get_settings().MAX_SAMPLES is None
        assert GraphParser().max_samples is None


class TestCompiledExpression:
    """Test compiling an expression once and evaluating it repeatedly."""

    def test_compile(self, graph_parser):
        """Test compile returns the postfix form."""
        compiled = graph_parser.compile("sin(x / 10.0) * amp")
        assert isinstance(compiled, CompiledExpression)
        assert compiled.source == "sin(x / 10.0) * amp"
        assert str(compiled) == "x 10.0 / sin amp *"

    def test_referenced_variables(self, graph_parser):
        """Test the named variables are listed without x or functions."""
        compiled = graph_parser.compile("a * x + b - sqrt(a)")
        assert compiled.variables == {"a", "b"}

    def test_evaluate(self, graph_parser):
        """Test evaluating a compiled expression at several points."""
        compiled = graph_parser.compile("a * x")
        assert compiled.evaluate(2.0, {"a": 3.0}) == 6.0
        assert compiled.evaluate(4.0, {"a": 3.0}) == 12.0

    def test_compiled_is_immutable(self, graph_parser):
        """Test the compiled postfix is a tuple on a frozen object."""
        compiled = graph_parser.compile("x")
        assert isinstance(compiled.postfix, tuple)
        with pytest.raises(AttributeError):
            compiled.source = "y"
