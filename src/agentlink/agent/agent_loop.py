"""Tool dispatch loop: drives a session through tool calls to a final text answer."""

from __future__ import annotations

import logging
from enum import Enum

from agentlink.agent.gateway import BaseGateway
from agentlink.agent.session import ChatSession
from agentlink.agent.tool_executor import execute_tool
from agentlink.config import settings
from agentlink.core.errors import CycleLimitExceededError
from agentlink.core.schema import (
    Outbound,
    TextReply,
    ToolResult,
    UserMessage,
)
from agentlink.tools import ToolRegistry

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """States of the tool loop."""

    AWAITING_MODEL = "awaiting_model"
    TOOL_REQUESTED = "tool_requested"
    ANSWERED = "answered"
    EXHAUSTED = "exhausted"


# ---------------------------------------------------------------------------
# Tool Loop
# ---------------------------------------------------------------------------
def run_tool_loop(
    gateway: BaseGateway,
    session: ChatSession,
    registry: ToolRegistry,
    message: str,
    max_cycles: int | None = None,
) -> str:
    """
    Send *message* and keep answering tool requests until the model replies with text.

    Each cycle sends one turn (the user message, then each tool result) and records the exchange
    in *session*.  Cycles are strictly sequential and tools run synchronously.

    Returns:
        The model's final text answer.

    Raises:
        UnhandledToolError: the model asked for a tool not in *registry*.
        ToolExecutionError: a tool failed.
        CycleLimitExceededError: no text answer within *max_cycles* turns.
        TransportError: the provider could not be reached.
    """
    if max_cycles is None:
        max_cycles = settings.MAX_TOOL_CYCLES

    outbound: Outbound = UserMessage(text=message)
    for cycle in range(1, max_cycles + 1):
        logger.debug("Cycle %d/%d: %s", cycle, max_cycles, LoopState.AWAITING_MODEL.value)
        reply = gateway.send_turn(session, outbound)
        session.record(outbound, reply)

        if isinstance(reply, TextReply):
            logger.debug("Cycle %d/%d: %s", cycle, max_cycles, LoopState.ANSWERED.value)
            return reply.content

        logger.info("Model requested tool '%s' with args=%s", reply.name, reply.args)
        logger.debug("Cycle %d/%d: %s", cycle, max_cycles, LoopState.TOOL_REQUESTED.value)
        result = execute_tool(registry, reply)
        logger.info("Tool '%s' returned: %s", reply.name, result)
        outbound = ToolResult(name=reply.name, result=result, call_id=reply.call_id)

    logger.warning("%s after %d cycles", LoopState.EXHAUSTED.value, max_cycles)
    raise CycleLimitExceededError(max_cycles)
