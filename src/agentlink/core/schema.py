"""
Schema definitions for model <-> agent <-> tool messages.

These data models serve as the contract between the model gateway, the tool loop, and individual
tools.  We keep them separate from runtime logic so they can be imported anywhere without
side-effects.
"""

from typing import (
    Annotated,
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Union,
)

from pydantic import (
    BaseModel,
    Field,
    model_validator,
)


class ToolDeclaration(BaseModel):
    """A tool as advertised to the model.  Every argument is a string."""

    name: str = Field(..., description="Tool name, unique within one agent")
    description: str = Field("", description="Guides the model's decision to call the tool")
    parameters: Dict[str, str] = Field(
        default_factory=dict, description="Argument name -> natural-language description"
    )
    required: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _required_are_declared(self) -> "ToolDeclaration":
        unknown = [arg for arg in self.required if arg not in self.parameters]
        if unknown:
            raise ValueError(f"Required arguments not declared as parameters: {unknown}")
        return self

    def json_schema(self) -> Dict[str, Any]:
        """Return the argument schema as a JSON-schema object."""
        return {
            "type": "object",
            "properties": {
                arg: {"type": "string", "description": desc}
                for arg, desc in self.parameters.items()
            },
            "required": list(self.required),
        }


class ToolCallReply(BaseModel):
    """The model asks the agent to run one tool."""

    kind: Literal["tool_call"] = "tool_call"
    name: str = Field(..., description="Requested tool name")
    args: Dict[str, str] = Field(default_factory=dict, description="Stringified tool arguments")
    call_id: Optional[str] = Field(None, description="Provider id used to pair the result")


class TextReply(BaseModel):
    """The model's terminal, user-facing answer."""

    kind: Literal["text"] = "text"
    content: str


Reply = Annotated[Union[TextReply, ToolCallReply], Field(discriminator="kind")]
"""A decoded model reply: exactly one of the two variants."""


class UserMessage(BaseModel):
    """Text sent to the model on behalf of the caller."""

    kind: Literal["user"] = "user"
    text: str


class ToolResult(BaseModel):
    """A tool's output fed back to the model as ``{"result": result}``."""

    kind: Literal["tool_result"] = "tool_result"
    name: str
    result: str
    call_id: Optional[str] = None

    def payload(self) -> Dict[str, str]:
        """Body of the function response sent to the model."""
        return {"result": self.result}


Outbound = Union[UserMessage, ToolResult]
"""Anything the loop may send to the model."""

Turn = Annotated[
    Union[UserMessage, ToolResult, TextReply, ToolCallReply], Field(discriminator="kind")
]
"""One entry in a conversation history."""
