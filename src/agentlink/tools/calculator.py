"""High precision floating point calculator exposed to the model as ``performCalculation``."""

import logging
import math
from decimal import Decimal
from typing import (
    Callable,
    Dict,
    Mapping,
)

from agentlink.core.errors import ToolExecutionError
from agentlink.core.schema import ToolDeclaration
from agentlink.tools import (
    Tool,
    require_args,
)

logger = logging.getLogger(__name__)


def _divide(one: float, two: float) -> float:
    if two == 0.0:
        if one == 0.0 or math.isnan(one):
            return math.nan
        return math.copysign(math.inf, one) * math.copysign(1.0, two)
    return one / two


def _remainder(one: float, two: float) -> float:
    if two == 0.0 or math.isinf(one):
        return math.nan
    return math.fmod(one, two)


_OPERATORS: Dict[str, Callable[[float, float], float]] = {
    "+": lambda one, two: one + two,
    "-": lambda one, two: one - two,
    "*": lambda one, two: one * two,
    "/": _divide,
    "%": _remainder,
}


def format_float(value: float) -> str:
    """
    Shortest decimal string that round-trips to *value*, without exponent notation.

    >>> format_float(5.0)
    '5'
    >>> format_float(1e-7)
    '0.0000001'
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return format(Decimal(repr(value)).normalize(), "f")


def _parse_operand(tool: str, name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ToolExecutionError(f"Tool '{tool}': {name} is not a number: {raw!r}") from exc


def perform_calculation(value_one: str, value_two: str, operator: str) -> str:
    """
    Apply *operator* to two floating point operands given as strings.

    Supported operators are ``+ - * / %``; ``%`` is the floating point remainder.  An unsupported
    operator is logged and yields ``"0"`` rather than an error.
    """
    logger.info("Running calculation: %s %s %s", value_one, operator, value_two)
    one = _parse_operand(CALCULATION_TOOL.name, "valueOne", value_one)
    two = _parse_operand(CALCULATION_TOOL.name, "valueTwo", value_two)

    op = _OPERATORS.get(operator)
    if op is None:
        logger.warning("Unsupported operator: %r", operator)
        result = 0.0
    else:
        result = op(one, two)
    return format_float(result)


CALCULATION_TOOL = ToolDeclaration(
    name="performCalculation",
    description="Perform a floating point calculation for the supplied values and operator",
    parameters={
        "valueOne": "The first floating point value as a string",
        "valueTwo": "The second floating point value as a string",
        "operator": "the operator for the calculation. can be one of +, -, *, /, %",
    },
    required=["valueOne", "valueTwo", "operator"],
)


class CalculatorTool(Tool):
    """Local tool wrapping :func:`perform_calculation`."""

    declaration = CALCULATION_TOOL

    def invoke(self, args: Mapping[str, str]) -> str:
        value_one, value_two, operator = require_args(self.name, args, self.declaration.required)
        result = perform_calculation(value_one, value_two, operator)
        logger.info("Calculation result: %s", result)
        return result
