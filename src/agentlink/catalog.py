"""
The agents shipped with agentlink.

* **float** - performs high precision floating point calculations with a local calculator tool.
* **math** - answers general math questions and delegates floating point work to the float agent
  over HTTP.
"""

import logging
from typing import (
    Callable,
    Dict,
)

from agentlink.agent.agent import (
    Agent,
    init_agent,
)
from agentlink.config import (
    Settings,
    settings as default_settings,
)
from agentlink.tools.calculator import CalculatorTool
from agentlink.tools.remote import RemoteAgentTool

logger = logging.getLogger(__name__)

FLOAT_AGENT_ENV_PREFIX = "FLOAT_AGENT_"

FLOAT_SYSTEM_INSTRUCTION = """\
Your task is to perform high precision floating point calculations.
Reply ONLY with the calculated result.
"""

MATH_SYSTEM_INSTRUCTION = """\
Your task is to perform math calculations.
For floating point requests use agent tools to help with your results.
Reply ONLY with the calculated result.
"""


def call_float_agent_tool() -> RemoteAgentTool:
    """Proxy tool that forwards a request to the float agent service."""
    return RemoteAgentTool(
        name="callFloatAgent",
        description=(
            "Make a request to the floating point agent. "
            "The agent will perform the calculation and return the result."
        ),
        env_prefix=FLOAT_AGENT_ENV_PREFIX,
    )


def build_float_agent(settings: Settings | None = None) -> Agent:
    """High precision floating point agent."""
    return init_agent("float", FLOAT_SYSTEM_INSTRUCTION, [CalculatorTool()], settings=settings)


def build_math_agent(settings: Settings | None = None) -> Agent:
    """General math agent that calls the float agent for floating point work."""
    return init_agent("math", MATH_SYSTEM_INSTRUCTION, [call_float_agent_tool()], settings=settings)


AGENT_BUILDERS: Dict[str, Callable[[Settings], Agent]] = {
    "float": build_float_agent,
    "math": build_math_agent,
}


def build_agent(name: str, settings: Settings | None = None) -> Agent:
    """
    Build the agent called *name*.

    Raises
    ------
    ValueError
        If *name* is not a known agent.
    """
    builder = AGENT_BUILDERS.get(name)
    if builder is None:
        raise ValueError(f"Unknown agent '{name}'. Choose one of: {sorted(AGENT_BUILDERS)}")
    return builder(settings or default_settings)
