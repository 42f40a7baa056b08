"""
Remote Invocation Proxy: a tool that forwards its request to another agent service.

The remote agent runs its own tool loop and its final answer becomes this tool's result.  The
endpoint is read from the environment on every call, e.g. ``FLOAT_AGENT_HOSTNAME`` and
``FLOAT_AGENT_PORT`` for ``env_prefix="FLOAT_AGENT_"``.
"""

import logging
from typing import (
    Mapping,
    Optional,
)

import httpx
from pydantic import ValidationError

from agentlink.api.models import (
    AgentRequest,
    AgentResponse,
)
from agentlink.config import (
    resolve_endpoint,
    settings,
)
from agentlink.core.errors import RemoteAgentError
from agentlink.core.schema import ToolDeclaration
from agentlink.tools import (
    Tool,
    require_args,
)

logger = logging.getLogger(__name__)

AGENT_PATH = "/agent"


class RemoteAgentTool(Tool):
    """Tool whose ``invoke`` POSTs the model's message to a remote ``/agent`` endpoint."""

    def __init__(
        self,
        name: str,
        description: str,
        env_prefix: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Parameters
        ----------
        name, description:
            How the tool is advertised to the model.
        env_prefix:
            Prefix of the ``HOSTNAME`` / ``PORT`` environment variables of the remote agent.
        timeout:
            Seconds to wait for the remote agent (default ``settings.REMOTE_AGENT_TIMEOUT``).
        transport:
            Optional httpx transport, used to route calls in-process.
        """
        self.declaration = ToolDeclaration(
            name=name,
            description=description,
            parameters={"message": "The natural language request message for the agent"},
            required=["message"],
        )
        self.env_prefix = env_prefix
        self.timeout = timeout
        self._transport = transport

    def endpoint_url(self) -> str:
        """Resolve the remote ``/agent`` URL from current configuration."""
        return resolve_endpoint(self.env_prefix).base_url + AGENT_PATH

    def invoke(self, args: Mapping[str, str]) -> str:
        (message,) = require_args(self.name, args, ["message"])
        url = self.endpoint_url()
        logger.info("Calling remote agent '%s' at %s: %s", self.name, url, message)

        timeout = self.timeout if self.timeout is not None else settings.REMOTE_AGENT_TIMEOUT
        request = AgentRequest(input=message)
        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as client:
                resp = client.post(
                    url,
                    content=request.model_dump_json(),
                    headers={"Content-Type": "application/json"},
                )
                resp.raise_for_status()
                response = AgentResponse.model_validate_json(resp.content)
        except httpx.HTTPError as exc:
            logger.error("Remote agent '%s' request failed: %s", self.name, exc)
            raise RemoteAgentError(f"Remote agent '{self.name}' request failed: {exc}") from exc
        except ValidationError as exc:
            logger.error("Remote agent '%s' returned an invalid reply: %s", self.name, exc)
            raise RemoteAgentError(f"Remote agent '{self.name}' returned an invalid reply") from exc

        logger.info("Remote agent '%s' result: %s", self.name, response.content)
        return response.content
