"""
Pydantic models for the agent wire protocol.

One agent service calls another by POSTing an :class:`AgentRequest` to ``/agent`` and receives an
:class:`AgentResponse`.  There are no session or identity fields.
"""

from pydantic import (
    BaseModel,
    Field,
)


# ---------------------------------------------------------------------------
# Pydantic request / response schema
# ---------------------------------------------------------------------------
class AgentRequest(BaseModel):
    """Incoming request for an agent."""

    input: str = Field(..., description="Natural-language request for the agent")


class AgentResponse(BaseModel):
    """The agent's final answer."""

    content: str
