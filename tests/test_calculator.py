"""Tests for the floating point calculator tool."""

import math

import pytest

from agentlink.core.errors import (
    MissingArgumentError,
    ToolExecutionError,
)
from agentlink.tools.calculator import (
    CalculatorTool,
    format_float,
    perform_calculation,
)


def test_multiplication_drops_trailing_zero() -> None:
    """2 * 2.5 is formatted as the shortest decimal string."""

    assert perform_calculation("2", "2.5", "*") == "5"


@pytest.mark.parametrize(
    "one, two, operator, expected",
    [
        ("1.5", "2.25", "+", 1.5 + 2.25),
        ("10", "4", "-", 10 - 4.0),
        ("7", "2", "/", 3.5),
        ("0.1", "0.2", "+", 0.1 + 0.2),
        ("7.5", "2", "%", 1.5),
        ("-7.5", "2", "%", -1.5),
        ("2.5", "3.1415926536", "*", 2.5 * 3.1415926536),
    ],
)
def test_result_round_trips(one: str, two: str, operator: str, expected: float) -> None:
    """The string result parses back to exactly the floating point result."""

    assert float(perform_calculation(one, two, operator)) == expected


def test_unknown_operator_returns_zero() -> None:
    """An unsupported operator is not an error; the result is zero."""

    assert perform_calculation("3", "4", "^") == "0"


@pytest.mark.parametrize(
    "one, two, operator, expected",
    [
        ("1", "0", "/", "+Inf"),
        ("-1", "0", "/", "-Inf"),
        ("0", "0", "/", "NaN"),
        ("1", "0", "%", "NaN"),
    ],
)
def test_division_by_zero_follows_ieee(one: str, two: str, operator: str, expected: str) -> None:
    """Division and remainder by zero produce infinities and NaN instead of raising."""

    assert perform_calculation(one, two, operator) == expected


def test_format_float_never_uses_exponent() -> None:
    """Very small and very large values are written out in full."""

    assert format_float(1e-7) == "0.0000001"
    assert format_float(1e21) == "1000000000000000000000"
    assert format_float(math.pi) == "3.141592653589793"


def test_invalid_operand_fails() -> None:
    """A non-numeric operand is a tool failure."""

    with pytest.raises(ToolExecutionError, match="valueOne"):
        perform_calculation("two", "2", "+")


def test_tool_invoke() -> None:
    """The tool reads its operands from the string arguments."""

    tool = CalculatorTool()
    assert tool.name == "performCalculation"
    assert tool.invoke({"valueOne": "2", "valueTwo": "2.5", "operator": "*"}) == "5"


def test_tool_missing_argument() -> None:
    """A missing required argument raises MissingArgumentError naming it."""

    try:
        CalculatorTool().invoke({"valueOne": "2", "valueTwo": "2.5"})
    except MissingArgumentError as exc:
        assert exc.argument == "operator"
    else:  # pragma: no cover
        raise AssertionError("MissingArgumentError was not raised")
