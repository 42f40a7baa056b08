"""Tests for the remote agent proxy tool."""

import json
from typing import List

import httpx
import pytest

from agentlink.core.errors import (
    ConfigurationError,
    MissingArgumentError,
    RemoteAgentError,
    ToolExecutionError,
    TransportError,
)
from agentlink.tools.remote import RemoteAgentTool


@pytest.fixture
def endpoint_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    monkeypatch.setenv("FLOAT_AGENT_HOSTNAME", "floathost")
    monkeypatch.setenv("FLOAT_AGENT_PORT", "9999")
    return monkeypatch


def _tool(handler) -> RemoteAgentTool:
    return RemoteAgentTool(
        name="callFloatAgent",
        description="Ask the float agent",
        env_prefix="FLOAT_AGENT_",
        transport=httpx.MockTransport(handler),
    )


def test_invoke_posts_wire_request(endpoint_env: pytest.MonkeyPatch) -> None:
    """The message is sent as {"input": ...} and the reply content is returned."""

    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"content": "7.853981634"})

    assert _tool(handler).invoke({"message": "2.5 * pi"}) == "7.853981634"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "http://floathost:9999/agent"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"input": "2.5 * pi"}


def test_endpoint_is_resolved_per_call(endpoint_env: pytest.MonkeyPatch) -> None:
    """A configuration change is picked up by the next call."""

    urls: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        urls.append(str(request.url))
        return httpx.Response(200, json={"content": "ok"})

    tool = _tool(handler)
    tool.invoke({"message": "first"})
    endpoint_env.setenv("FLOAT_AGENT_PORT", "7777")
    tool.invoke({"message": "second"})
    assert urls == ["http://floathost:9999/agent", "http://floathost:7777/agent"]


def test_missing_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FLOAT_AGENT_HOSTNAME", raising=False)
    monkeypatch.delenv("FLOAT_AGENT_PORT", raising=False)

    with pytest.raises(ConfigurationError, match="FLOAT_AGENT_HOSTNAME"):
        _tool(lambda request: httpx.Response(200)).invoke({"message": "hi"})


def test_missing_message(endpoint_env: pytest.MonkeyPatch) -> None:
    with pytest.raises(MissingArgumentError):
        _tool(lambda request: httpx.Response(200)).invoke({})


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(400),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json={"answer": "5"}),
    ],
)
def test_bad_reply_is_tool_failure(
    endpoint_env: pytest.MonkeyPatch, response: httpx.Response
) -> None:
    """HTTP errors and undecodable replies fail the tool without retrying."""

    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return response

    with pytest.raises(RemoteAgentError) as info:
        _tool(handler).invoke({"message": "hi"})
    assert isinstance(info.value, ToolExecutionError)
    assert len(calls) == 1


def test_unreachable_agent(endpoint_env: pytest.MonkeyPatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError, match="connection refused"):
        _tool(handler).invoke({"message": "hi"})
