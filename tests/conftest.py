"""
Shared test fixtures.

``ScriptedGateway`` stands in for a model provider: a *responder* callable receives the turns that
would be sent to the provider and returns the decoded reply.
"""

from typing import (
    Callable,
    Iterable,
    List,
    Optional,
    Sequence,
)

import pytest

from agentlink.agent.gateway import BaseGateway
from agentlink.config import Settings
from agentlink.core.schema import (
    Reply,
    TextReply,
    ToolDeclaration,
    Turn,
    UserMessage,
)

Responder = Callable[[Sequence[Turn]], Reply]


class ScriptedGateway(BaseGateway):
    """In-memory gateway that records every conversation it is sent."""

    def __init__(
        self,
        responder: Responder,
        system_instruction: Optional[str] = None,
        tools: Iterable[ToolDeclaration] = (),
    ):
        super().__init__(Settings(), system_instruction, tools)
        self.responder = responder
        self.sent: List[List[Turn]] = []
        self.closed = False

    def _complete(self, turns: Sequence[Turn]) -> Reply:
        self.sent.append(list(turns))
        return self.responder(turns)

    def close(self) -> None:
        self.closed = True


def scripted(*replies: Reply) -> Responder:
    """Responder that returns *replies* in order."""
    pending = list(replies)

    def responder(turns: Sequence[Turn]) -> Reply:
        return pending.pop(0)

    return responder


def echo_responder(turns: Sequence[Turn]) -> Reply:
    """Answer every user message with ``echo: <text>``."""
    last = turns[-1]
    assert isinstance(last, UserMessage)
    return TextReply(content=f"echo: {last.text}")


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run every test outside the project root so a developer's .env is never read."""
    monkeypatch.chdir(tmp_path)
