"""
Tool contract and per-agent tool registry.

A tool is anything with a :class:`ToolDeclaration` and an ``invoke`` method that turns a mapping of
string arguments into a string result.  Local computations and calls to remote agents implement the
same interface so they can be registered side by side.

Plain functions can be turned into tools with a decorator:
    @function_tool("echo")
    def echo(text: str) -> str:
        \"\"\"Echo the input text back to the caller.\"\"\"
        return text
"""

import inspect
import logging
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
)

from agentlink.core.errors import MissingArgumentError
from agentlink.core.schema import ToolDeclaration

logger = logging.getLogger(__name__)


class Tool(ABC):
    """A capability the model may request by name."""

    declaration: ToolDeclaration

    @property
    def name(self) -> str:
        """Name the model uses to request this tool."""
        return self.declaration.name

    @abstractmethod
    def invoke(self, args: Mapping[str, str]) -> str:
        """
        Run the tool with *args* and return a model-readable string.

        Implementations validate their own arguments and raise
        :class:`~agentlink.core.errors.ToolExecutionError` (or a subclass) on failure.
        """


def require_args(tool: str, args: Mapping[str, str], names: Iterable[str]) -> List[str]:
    """
    Return the values of *names* from *args*, in order.

    Raises
    ------
    MissingArgumentError
        For the first name absent from *args*.
    """
    values = []
    for arg in names:
        if arg not in args:
            raise MissingArgumentError(tool, arg)
        values.append(args[arg])
    return values


class FunctionTool(Tool):
    """Adapter exposing a plain function with string parameters as a :class:`Tool`."""

    def __init__(self, fn: Callable[..., str], name: Optional[str] = None):
        self._fn = fn
        self.declaration = _declare(fn, name or fn.__name__)

    def invoke(self, args: Mapping[str, str]) -> str:
        require_args(self.name, args, self.declaration.required)
        kwargs = {k: v for k, v in args.items() if k in self.declaration.parameters}
        return str(self._fn(**kwargs))


def _declare(fn: Callable[..., str], name: str) -> ToolDeclaration:
    """Build a declaration from the function signature and docstring."""
    doc = inspect.getdoc(fn) or ""
    params: Dict[str, str] = {}
    required: List[str] = []
    for param_name, param in inspect.signature(fn).parameters.items():
        params[param_name] = param_name.replace("_", " ")
        if param.default is inspect.Parameter.empty:
            required.append(param_name)
    return ToolDeclaration(
        name=name, description=doc.split("\n\n")[0], parameters=params, required=required
    )


def function_tool(name: Optional[str] = None) -> Callable[[Callable[..., str]], FunctionTool]:
    """
    Decorator turning a function into a :class:`FunctionTool`.

    Parameters without a default become required arguments; the first docstring paragraph becomes
    the tool description.
    """

    def wrapper(fn: Callable[..., str]) -> FunctionTool:
        return FunctionTool(fn, name)

    return wrapper


class ToolRegistry:
    """
    Dispatch table of one agent: tool name -> :class:`Tool`.

    The declarations advertised to the model are produced from the same table, so every name the
    model is told about can be dispatched.
    """

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: Dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> Tool:
        """
        Add *tool* to the registry.

        Raises
        ------
        ValueError
            If a tool with the same name is already registered.
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered.")
        logger.debug("Registering tool '%s'", tool.name)
        self._tools[tool.name] = tool
        return tool

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def declarations(self) -> List[ToolDeclaration]:
        """Declarations of every registered tool, in registration order."""
        return [tool.declaration for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
