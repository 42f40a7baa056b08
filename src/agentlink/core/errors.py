"""
Error taxonomy shared by the tool loop, the tools and the service layer.

Every failure that can abort a request derives from :class:`AgentError` so the HTTP layer can catch
one type while the logs still carry the concrete class.
"""


class AgentError(RuntimeError):
    """Base class for every failure raised while serving an agent request."""


class ConfigurationError(AgentError):
    """A required credential or endpoint setting is missing."""


class ProtocolError(AgentError):
    """The model broke the turn-taking contract."""


class UnhandledToolError(ProtocolError):
    """The model requested a tool name that the agent never registered."""

    def __init__(self, name: str):
        super().__init__(f"Unhandled tool name: {name}")
        self.name = name


class UnrecognizedReplyError(ProtocolError):
    """The model reply is neither plain text nor a tool call."""


class ToolExecutionError(AgentError):
    """Raised when a requested tool cannot run or fails."""


class MissingArgumentError(ToolExecutionError):
    """A required tool argument was not supplied by the model."""

    def __init__(self, tool: str, argument: str):
        super().__init__(f"Tool '{tool}' is missing required argument '{argument}'")
        self.tool = tool
        self.argument = argument


class TransportError(AgentError):
    """Network failure reaching the model provider or a remote agent."""


class RemoteAgentError(ToolExecutionError, TransportError):
    """A remote agent call failed in transport or returned an undecodable reply."""


class CycleLimitExceededError(AgentError):
    """The tool loop used up its cycle budget without a final answer."""

    def __init__(self, max_cycles: int):
        super().__init__(f"No final answer after {max_cycles} cycles")
        self.max_cycles = max_cycles


class NoSessionError(AgentError):
    """A request was submitted before a session was started."""
