"""Tests for the CLI client helpers."""

from typing import List

import httpx
import pytest

from agentlink.client import cli
from agentlink.core.errors import TransportError

URL = "http://localhost:8000/agent"


@pytest.fixture
def route(monkeypatch: pytest.MonkeyPatch):
    """Route every httpx.Client created by the client module through a mock handler."""

    real_client = httpx.Client
    monkeypatch.setattr(cli.time, "sleep", lambda seconds: None)

    def install(handler) -> None:
        monkeypatch.setattr(
            cli.httpx,
            "Client",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )

    return install


def test_call_agent(route) -> None:
    route(lambda request: httpx.Response(200, json={"content": "2"}))
    assert cli.call_agent(URL, "1+1") == "2"


def test_call_agent_rejected(route) -> None:
    route(lambda request: httpx.Response(400))
    with pytest.raises(TransportError, match="HTTP 400"):
        cli.call_agent(URL, "1+1")


def test_call_agent_connection_refused_is_not_retried(route) -> None:
    """A refused connection is reported after a single attempt."""

    attempts: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("refused", request=request)

    route(handler)
    with pytest.raises(TransportError, match="Failed to connect"):
        cli.call_agent(URL, "1+1")
    assert len(attempts) == 1


def test_wait_for_service(route) -> None:
    calls: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if len(calls) < 3:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json={"status": "ok"})

    route(handler)
    cli.wait_for_service("http://localhost:8000")
    assert calls == ["/health", "/health", "/health"]
