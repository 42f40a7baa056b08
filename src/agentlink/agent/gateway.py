"""
Model gateway interface for agentlink.

This module is the only place that *directly* calls an LLM.  Everything else (tool loop, tools,
service endpoint) stays model-agnostic and only sees the two reply variants defined in
:mod:`agentlink.core.schema`: a terminal :class:`TextReply` or a :class:`ToolCallReply`.

We support three back-ends out of the box:

1. **Anthropic** Messages API with native tool use.
2. **OpenAI** Chat Completions with function tools.
3. **Google Gemini** via ``google-genai`` function declarations.

Additional providers can be added by subclassing :class:`BaseGateway` and registering via
:func:`register_gateway`.
"""

import json
import logging
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
)

from agentlink.agent.session import ChatSession
from agentlink.config import Settings
from agentlink.core.errors import (
    ConfigurationError,
    TransportError,
    UnrecognizedReplyError,
)
from agentlink.core.schema import (
    Outbound,
    Reply,
    TextReply,
    ToolCallReply,
    ToolDeclaration,
    ToolResult,
    Turn,
    UserMessage,
)

logger = logging.getLogger(__name__)

ABORTED_TOOL_RESULT = "error: the tool call was aborted before it produced a result"


# ---------------------------------------------------------------------------
# Registry helpers
# ---------------------------------------------------------------------------
_GATEWAY_REGISTRY: dict[str, Type["BaseGateway"]] = {}


def register_gateway(name: str) -> Callable:
    """Decorator to register a gateway class under *name*."""

    def wrapper(cls: Type["BaseGateway"]) -> Type["BaseGateway"]:
        _GATEWAY_REGISTRY[name] = cls
        return cls

    return wrapper


def load_gateway(
    settings: Settings,
    system_instruction: Optional[str] = None,
    tools: Iterable[ToolDeclaration] = (),
    name: Optional[str] = None,
) -> "BaseGateway":
    """
    Factory that returns a connected gateway.

    The provider is *name* if given, else ``settings.GATEWAY``.

    Raises
    ------
    ConfigurationError
        If the provider is unknown or its API key is not configured.
    """
    target = (name or settings.GATEWAY).lower()
    cls = _GATEWAY_REGISTRY.get(target)
    if cls is None:
        raise ConfigurationError(f"Gateway '{target}' is not registered.")
    return cls(settings, system_instruction=system_instruction, tools=tools)


def _stringify_args(raw: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Tool arguments are strings; anything else the model sends is JSON-encoded."""
    return {k: v if isinstance(v, str) else json.dumps(v) for k, v in (raw or {}).items()}


def _pair_tool_calls(turns: Sequence[Turn]) -> List[Turn]:
    """Insert a placeholder result after every tool request that never got one."""
    paired: List[Turn] = []
    for i, turn in enumerate(turns):
        paired.append(turn)
        if isinstance(turn, ToolCallReply):
            nxt = turns[i + 1] if i + 1 < len(turns) else None
            if not isinstance(nxt, ToolResult):
                paired.append(
                    ToolResult(name=turn.name, result=ABORTED_TOOL_RESULT, call_id=turn.call_id)
                )
    return paired


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------
class BaseGateway(ABC):
    """
    Connection to a model provider, configured with one system instruction and tool set.

    A gateway is stateless across sessions: the conversation lives in :class:`ChatSession` and is
    replayed to the provider on each turn.
    """

    def __init__(
        self,
        settings: Settings,
        system_instruction: Optional[str] = None,
        tools: Iterable[ToolDeclaration] = (),
    ):
        self.settings = settings
        self.system_instruction = system_instruction
        self.tools: Tuple[ToolDeclaration, ...] = tuple(tools)

    def start_chat(self) -> ChatSession:
        """Open a new, empty conversation."""
        return ChatSession()

    def send_turn(self, session: ChatSession, content: Outbound) -> Reply:
        """
        Send *content* after the turns already in *session* and return the decoded reply.

        The session is not modified; the caller records the exchange.
        """
        turns = _pair_tool_calls([*session.history, content])
        reply = self._complete(turns)
        logger.debug("%s reply: %s", type(self).__name__, reply)
        return reply

    @abstractmethod
    def _complete(self, turns: Sequence[Turn]) -> Reply:
        """Send the whole conversation to the provider and decode the first content unit."""

    def close(self) -> None:
        """Release the provider connection."""


# ---------------------------------------------------------------------------
# Concrete gateways
# ---------------------------------------------------------------------------
@register_gateway("anthropic")
class AnthropicGateway(BaseGateway):
    """
    Anthropic Claude gateway using native tool use.

    Unlike the other gateways, :meth:`decode` does not always take the literal first content block:
    a ``tool_use`` block anywhere in the reply wins over narration text placed before it.
    """

    def __init__(
        self,
        settings: Settings,
        system_instruction: Optional[str] = None,
        tools: Iterable[ToolDeclaration] = (),
    ):
        super().__init__(settings, system_instruction, tools)
        if not settings.ANTHROPIC_API_KEY:
            raise ConfigurationError("ANTHROPIC_API_KEY is not set")

        import anthropic  # pylint: disable=import-outside-toplevel

        self._client = anthropic.Anthropic(api_key=settings.ANTHROPIC_API_KEY)

    @staticmethod
    def render(turns: Sequence[Turn]) -> List[Dict[str, Any]]:
        """Convert turns into Anthropic messages, merging consecutive turns of the same role."""
        messages: List[Dict[str, Any]] = []
        for turn in turns:
            if isinstance(turn, UserMessage):
                role, block = "user", {"type": "text", "text": turn.text}
            elif isinstance(turn, ToolResult):
                role = "user"
                block = {"type": "tool_result", "tool_use_id": turn.call_id, "content": turn.result}
            elif isinstance(turn, TextReply):
                role, block = "assistant", {"type": "text", "text": turn.content}
            else:
                role = "assistant"
                block = {
                    "type": "tool_use",
                    "id": turn.call_id,
                    "name": turn.name,
                    "input": turn.args,
                }

            if messages and messages[-1]["role"] == role:
                messages[-1]["content"].append(block)
            else:
                messages.append({"role": role, "content": [block]})
        return messages

    @staticmethod
    def decode(blocks: Sequence[Any]) -> Reply:
        """
        Decode the first content unit.

        Claude often narrates a tool call in a text block placed before the ``tool_use`` block; the
        tool request is taken as the first unit whenever one is present.
        """
        units = [b for b in blocks if getattr(b, "type", None) == "tool_use"] or list(blocks)
        if not units:
            raise UnrecognizedReplyError("Anthropic returned no content")
        first = units[0]
        if first.type == "tool_use":
            return ToolCallReply(
                name=first.name, args=_stringify_args(first.input), call_id=first.id
            )
        if first.type == "text":
            return TextReply(content=first.text)
        raise UnrecognizedReplyError(f"Unrecognized Anthropic content block: {first.type}")

    def _complete(self, turns: Sequence[Turn]) -> Reply:
        import anthropic  # pylint: disable=import-outside-toplevel

        kwargs: Dict[str, Any] = {
            "model": self.settings.ANTHROPIC_MODEL,
            "max_tokens": self.settings.MAX_OUTPUT_TOKENS,
            "messages": self.render(turns),
        }
        if self.system_instruction:
            kwargs["system"] = self.system_instruction
        if self.tools:
            kwargs["tools"] = [
                {"name": t.name, "description": t.description, "input_schema": t.json_schema()}
                for t in self.tools
            ]

        try:
            response = self._client.messages.create(**kwargs)
        except anthropic.APIError as exc:
            logger.error("Anthropic request error: %s", exc)
            raise TransportError(f"Error calling Anthropic: {exc}") from exc
        return self.decode(response.content)

    def close(self) -> None:
        self._client.close()


@register_gateway("openai")
class OpenAIGateway(BaseGateway):
    """OpenAI chat completions gateway using function tools."""

    def __init__(
        self,
        settings: Settings,
        system_instruction: Optional[str] = None,
        tools: Iterable[ToolDeclaration] = (),
    ):
        super().__init__(settings, system_instruction, tools)
        if not settings.OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY is not set")

        import openai  # pylint: disable=import-outside-toplevel

        self._client = openai.OpenAI(api_key=settings.OPENAI_API_KEY)

    @staticmethod
    def render(
        turns: Sequence[Turn], system_instruction: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Convert turns into chat completion messages."""
        messages: List[Dict[str, Any]] = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        for turn in turns:
            if isinstance(turn, UserMessage):
                messages.append({"role": "user", "content": turn.text})
            elif isinstance(turn, ToolResult):
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": turn.call_id,
                        "content": json.dumps(turn.payload()),
                    }
                )
            elif isinstance(turn, TextReply):
                messages.append({"role": "assistant", "content": turn.content})
            else:
                messages.append(
                    {
                        "role": "assistant",
                        "content": None,
                        "tool_calls": [
                            {
                                "id": turn.call_id,
                                "type": "function",
                                "function": {"name": turn.name, "arguments": json.dumps(turn.args)},
                            }
                        ],
                    }
                )
        return messages

    @staticmethod
    def decode(message: Any) -> Reply:
        """Decode the first tool call, or else the text, of a chat completion message."""
        if message.tool_calls:
            call = message.tool_calls[0]
            try:
                args = json.loads(call.function.arguments or "{}")
            except json.JSONDecodeError as exc:
                raise UnrecognizedReplyError(
                    f"Tool arguments are not valid JSON: {call.function.arguments!r}"
                ) from exc
            if not isinstance(args, dict):
                raise UnrecognizedReplyError(f"Tool arguments are not an object: {args!r}")
            return ToolCallReply(
                name=call.function.name, args=_stringify_args(args), call_id=call.id
            )
        if message.content is not None:
            return TextReply(content=message.content)
        raise UnrecognizedReplyError("OpenAI returned neither text nor a tool call")

    def _complete(self, turns: Sequence[Turn]) -> Reply:
        import openai  # pylint: disable=import-outside-toplevel

        kwargs: Dict[str, Any] = {
            "model": self.settings.OPENAI_MODEL,
            "max_tokens": self.settings.MAX_OUTPUT_TOKENS,
            "messages": self.render(turns, self.system_instruction),
        }
        if self.tools:
            kwargs["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": t.name,
                        "description": t.description,
                        "parameters": t.json_schema(),
                    },
                }
                for t in self.tools
            ]
            kwargs["parallel_tool_calls"] = False

        try:
            resp = self._client.chat.completions.create(**kwargs)
        except openai.APIError as exc:
            logger.error("OpenAI request error: %s", exc)
            raise TransportError(f"Error calling OpenAI: {exc}") from exc

        if not resp.choices:
            raise UnrecognizedReplyError("OpenAI returned no choices")
        return self.decode(resp.choices[0].message)

    def close(self) -> None:
        self._client.close()


@register_gateway("gemini")
class GeminiGateway(BaseGateway):
    """Google Gemini gateway using function declarations."""

    def __init__(
        self,
        settings: Settings,
        system_instruction: Optional[str] = None,
        tools: Iterable[ToolDeclaration] = (),
    ):
        super().__init__(settings, system_instruction, tools)
        if not settings.GOOGLE_API_KEY:
            raise ConfigurationError("GOOGLE_API_KEY is not set")

        from google import genai  # pylint: disable=import-outside-toplevel

        self._client = genai.Client(api_key=settings.GOOGLE_API_KEY)

    @staticmethod
    def render(turns: Sequence[Turn]) -> List[Dict[str, Any]]:
        """Convert turns into Gemini ``contents``."""
        contents: List[Dict[str, Any]] = []
        for turn in turns:
            if isinstance(turn, UserMessage):
                contents.append({"role": "user", "parts": [{"text": turn.text}]})
            elif isinstance(turn, ToolResult):
                part = {"function_response": {"name": turn.name, "response": turn.payload()}}
                contents.append({"role": "user", "parts": [part]})
            elif isinstance(turn, TextReply):
                contents.append({"role": "model", "parts": [{"text": turn.content}]})
            else:
                part = {"function_call": {"name": turn.name, "args": turn.args}}
                contents.append({"role": "model", "parts": [part]})
        return contents

    @staticmethod
    def _function_declaration(tool: ToolDeclaration) -> Dict[str, Any]:
        return {
            "name": tool.name,
            "description": tool.description,
            "parameters": {
                "type": "OBJECT",
                "properties": {
                    arg: {"type": "STRING", "description": desc}
                    for arg, desc in tool.parameters.items()
                },
                "required": list(tool.required),
            },
        }

    @staticmethod
    def decode(response: Any) -> Reply:
        """Decode the first part of the first candidate."""
        candidates = response.candidates or []
        parts = candidates[0].content.parts if candidates and candidates[0].content else None
        if not parts:
            raise UnrecognizedReplyError("Gemini returned no content")
        first = parts[0]
        if first.function_call is not None:
            call = first.function_call
            return ToolCallReply(name=call.name, args=_stringify_args(call.args), call_id=call.id)
        if first.text is not None:
            return TextReply(content=first.text)
        raise UnrecognizedReplyError("Gemini returned neither text nor a function call")

    def _complete(self, turns: Sequence[Turn]) -> Reply:
        import httpx  # pylint: disable=import-outside-toplevel
        from google.genai import (  # pylint: disable=import-outside-toplevel
            errors,
            types,
        )

        config = types.GenerateContentConfig(
            system_instruction=self.system_instruction,
            max_output_tokens=self.settings.MAX_OUTPUT_TOKENS,
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
        )
        if self.tools:
            config.tools = [
                types.Tool(
                    function_declarations=[self._function_declaration(t) for t in self.tools]
                )
            ]

        try:
            response = self._client.models.generate_content(
                model=self.settings.GEMINI_MODEL, contents=self.render(turns), config=config
            )
        except (errors.APIError, httpx.HTTPError) as exc:
            logger.error("Gemini request error: %s", exc)
            raise TransportError(f"Error calling Gemini: {exc}") from exc
        return self.decode(response)

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            close()
