"""Dispatches tool calls through an agent's :class:`ToolRegistry` and wraps errors."""

import logging

from agentlink.core.errors import (
    AgentError,
    ToolExecutionError,
    UnhandledToolError,
)
from agentlink.core.schema import ToolCallReply
from agentlink.tools import ToolRegistry

logger = logging.getLogger(__name__)


def execute_tool(registry: ToolRegistry, call: ToolCallReply) -> str:
    """
    Look up ``call.name`` in *registry* and invoke it with ``call.args``.

    Parameters
    ----------
    registry:
        The agent's dispatch table.
    call:
        The tool request decoded from the model reply.

    Returns
    -------
    str
        Whatever the tool returns.

    Raises
    ------
    UnhandledToolError
        If the tool is not registered.  This is a protocol violation, not a tool failure.
    ToolExecutionError
        If the tool invocation raises.
    """
    tool = registry.get(call.name)
    if tool is None:
        logger.error("Unhandled tool name: %s", call.name)
        raise UnhandledToolError(call.name)

    try:
        logger.debug("Executing tool '%s' with args=%s", call.name, call.args)
        return tool.invoke(call.args)
    except AgentError:
        logger.exception("Tool '%s' failed", call.name)
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled error in tool '%s'", call.name)
        raise ToolExecutionError(f"Tool '{call.name}' raised an error: {exc}") from exc
