"""
End-to-end: the math agent calls the float agent service, which runs the calculator.

Both agents use scripted gateways; the float agent is served in-process through FastAPI's
``TestClient`` and the math agent's proxy reaches it through an httpx mock transport.
"""

from typing import Sequence

import httpx
import pytest
from fastapi.testclient import TestClient

from agentlink.agent.agent import init_agent
from agentlink.api.app import create_app
from agentlink.core.schema import (
    Reply,
    TextReply,
    ToolCallReply,
    ToolResult,
    Turn,
    UserMessage,
)
from agentlink.tools.calculator import (
    CalculatorTool,
    perform_calculation,
)
from agentlink.tools.remote import RemoteAgentTool

from conftest import ScriptedGateway

MESSAGE = "what is 2.5 * pi to 10 decimal places"
CALC_ARGS = {"valueOne": "2.5", "valueTwo": "3.1415926536", "operator": "*"}


def float_model(turns: Sequence[Turn]) -> Reply:
    last = turns[-1]
    if isinstance(last, UserMessage):
        return ToolCallReply(name="performCalculation", args=CALC_ARGS, call_id="f1")
    assert isinstance(last, ToolResult)
    return TextReply(content=last.result)


def math_model(turns: Sequence[Turn]) -> Reply:
    last = turns[-1]
    if isinstance(last, UserMessage):
        return ToolCallReply(name="callFloatAgent", args={"message": MESSAGE}, call_id="m1")
    assert isinstance(last, ToolResult)
    return TextReply(content=f"The answer is {last.result}")


def test_math_agent_uses_float_agent(monkeypatch: pytest.MonkeyPatch) -> None:
    """The float agent's numeric string reaches the math agent's answer unchanged."""

    monkeypatch.setenv("FLOAT_AGENT_HOSTNAME", "float-agent")
    monkeypatch.setenv("FLOAT_AGENT_PORT", "8081")

    float_gateway = ScriptedGateway(float_model)
    float_agent = init_agent("float", None, [CalculatorTool()], gateway=float_gateway)
    float_agent.start_session()
    float_service = TestClient(create_app(float_agent))

    def forward(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "float-agent"
        assert request.url.port == 8081
        reply = float_service.post(
            request.url.path,
            content=request.content,
            headers={"Content-Type": request.headers["content-type"]},
        )
        return httpx.Response(
            reply.status_code,
            content=reply.content,
            headers={"Content-Type": reply.headers.get("content-type", "")},
        )

    proxy = RemoteAgentTool(
        name="callFloatAgent",
        description="Make a request to the floating point agent.",
        env_prefix="FLOAT_AGENT_",
        transport=httpx.MockTransport(forward),
    )
    math_gateway = ScriptedGateway(math_model)
    with init_agent("math", None, [proxy], gateway=math_gateway) as math_agent:
        math_agent.start_session()
        answer = math_agent.submit_request("what is pi to 10 decimal places multiplied by 2.5")

    expected = perform_calculation("2.5", "3.1415926536", "*")
    assert answer == f"The answer is {expected}"

    # the float agent ran its own loop on the forwarded message
    assert float_gateway.sent[0] == [UserMessage(text=MESSAGE)]
    assert float_gateway.sent[1][-1] == ToolResult(
        name="performCalculation", result=expected, call_id="f1"
    )
    # and the math agent received the float agent's content as the tool result
    assert math_gateway.sent[1][-1] == ToolResult(
        name="callFloatAgent", result=expected, call_id="m1"
    )
