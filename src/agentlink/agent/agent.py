"""Agent: a model gateway bundled with its tools and one conversation session."""

from __future__ import annotations

import logging
import threading
from typing import (
    Iterable,
    Optional,
)

from agentlink.agent.agent_loop import run_tool_loop
from agentlink.agent.gateway import (
    BaseGateway,
    load_gateway,
)
from agentlink.agent.session import ChatSession
from agentlink.config import (
    Settings,
    settings as default_settings,
)
from agentlink.core.errors import NoSessionError
from agentlink.tools import (
    Tool,
    ToolRegistry,
)

logger = logging.getLogger(__name__)


class Agent:
    """
    A named model-backed agent.

    The agent exclusively owns its gateway connection and at most one :class:`ChatSession`.
    ``submit_request`` calls are serialized, so a session is never driven by two loops at once.
    """

    def __init__(
        self,
        name: str,
        gateway: BaseGateway,
        registry: ToolRegistry,
        max_cycles: int | None = None,
    ):
        self.name = name
        self.gateway = gateway
        self.registry = registry
        self.max_cycles = max_cycles
        self._session: Optional[ChatSession] = None
        self._lock = threading.Lock()

    @property
    def system_instruction(self) -> Optional[str]:
        return self.gateway.system_instruction

    @property
    def session(self) -> Optional[ChatSession]:
        return self._session

    def start_session(self) -> None:
        """Start a new conversation, discarding any previous history."""
        with self._lock:
            self._session = self.gateway.start_chat()
        logger.info("Agent '%s' started a new session", self.name)

    def submit_request(self, text: str) -> str:
        """
        Run the tool loop for *text* on the current session and return the final answer.

        Raises
        ------
        NoSessionError
            If :meth:`start_session` was never called.
        """
        with self._lock:
            if self._session is None:
                raise NoSessionError(f"Agent '{self.name}' has no active session")
            logger.info("Agent '%s' received request: %s", self.name, text)
            answer = run_tool_loop(
                self.gateway, self._session, self.registry, text, max_cycles=self.max_cycles
            )
        logger.info("Agent '%s' answered: %s", self.name, answer)
        return answer

    def close(self) -> None:
        """Release the gateway connection."""
        self._session = None
        self.gateway.close()

    def __enter__(self) -> "Agent":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def init_agent(
    name: str,
    system_instruction: Optional[str],
    tools: Iterable[Tool],
    settings: Settings | None = None,
    gateway: BaseGateway | None = None,
    max_cycles: int | None = None,
) -> Agent:
    """
    Build an agent and connect its gateway.

    Parameters
    ----------
    name:
        Used in logs and the health endpoint.
    system_instruction:
        Fixed instruction sent with every turn.
    tools:
        The agent's tools; they are both advertised to the model and used for dispatch.
    settings:
        Settings to build the gateway from (default: process settings).
    gateway:
        A ready gateway, bypassing :func:`load_gateway`.  It already carries its own system
        instruction and tool declarations, so *system_instruction* is ignored.
    max_cycles:
        Tool loop budget (default ``settings.MAX_TOOL_CYCLES``).

    Raises
    ------
    ConfigurationError
        If the gateway's provider credentials are missing.
    """
    settings = settings or default_settings
    registry = ToolRegistry(tools)
    if gateway is None:
        gateway = load_gateway(settings, system_instruction, registry.declarations())
    if max_cycles is None:
        max_cycles = settings.MAX_TOOL_CYCLES
    logger.info(
        "Initialized agent '%s' with tools %s", name, [tool.name for tool in registry]
    )
    return Agent(name, gateway, registry, max_cycles=max_cycles)
