"""
Shared pytest fixtures for graphparser tests.

This module provides:
- A pipeline fixture running scan, parse and evaluate on a source string
- Utilities for testing Pydantic validation of Sample
"""

import logging

import numpy as np
import pytest
from typing import Any, Type
from pydantic import BaseModel, ValidationError

from graphparser import GraphParser
from graphparser.parser import evaluate, parse, scan


@pytest.fixture
def run():
    """Evaluate an expression string at a single coordinate."""
    def _run(expression: str, x: float = 0.0, variables: dict[str, float] | None = None) -> np.float32:
        return evaluate(parse(scan(expression)), x, variables)
    return _run


@pytest.fixture
def token_types():
    """Scan an expression and return the token type names."""
    def _token_types(expression: str) -> list[str]:
        return [token.type.name for token in scan(expression)]
    return _token_types


@pytest.fixture
def graph_parser():
    """A GraphParser with no sample limit."""
    return GraphParser(max_samples=None)


@pytest.fixture
def assert_validation_error():
    """Helper to assert that a ValidationError is raised with expected details."""
    def _assert_validation(
        model_class: Type[BaseModel],
        data: dict[str, Any],
        expected_field: str | None = None,
    ) -> ValidationError:
        with pytest.raises(ValidationError) as exc_info:
            model_class(**data)

        error = exc_info.value
        if expected_field:
            field_errors = [e for e in error.errors() if e['loc'][0] == expected_field]
            assert len(field_errors) > 0, f"Expected error for field '{expected_field}' not found"

        return error

    return _assert_validation


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level changed by setup_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


pytestmark = [
    pytest.mark.filterwarnings("ignore::DeprecationWarning"),
]
