"""CLI client for a running agent service."""

from __future__ import annotations

import logging
import time

import httpx
from pydantic import ValidationError

from agentlink.api.models import (
    AgentRequest,
    AgentResponse,
)
from agentlink.console import (
    Style,
    echo,
    read_line,
)
from agentlink.core.errors import TransportError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------
def _backoff(attempt: int) -> float:
    return 0.5 * (2**attempt)  # exponential backoff: 0.5s, 1s, 2s, 4s...


def wait_for_service(base_url: str, max_retries: int = 8, timeout: float = 5.0) -> None:
    """
    Poll ``<base_url>/health`` until the service answers.

    Raises
    ------
    TransportError
        If the service is still unreachable after *max_retries* attempts.
    """
    for attempt in range(max_retries):
        try:
            with httpx.Client(timeout=timeout) as client:
                client.get(f"{base_url}/health").raise_for_status()
                return
        except httpx.HTTPError as e:
            if attempt == max_retries - 1:
                raise TransportError(f"Agent service at {base_url} is not reachable: {e}") from e
            delay = _backoff(attempt)
            logger.info(
                "Service not ready yet, retrying in %.1f seconds (attempt %d/%d)...",
                delay,
                attempt + 1,
                max_retries,
            )
            time.sleep(delay)


def call_agent(url: str, text: str, timeout: float = 120.0) -> str:
    """
    POST *text* to the agent endpoint *url* and return the agent's answer.

    The request is sent once; any failure is raised as :class:`TransportError`.
    """
    body = AgentRequest(input=text).model_dump_json()
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.post(url, content=body, headers={"Content-Type": "application/json"})
            response.raise_for_status()
            return AgentResponse.model_validate_json(response.content).content
    except httpx.ConnectError as e:
        raise TransportError(f"Failed to connect to {url}") from e
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        raise TransportError(f"Agent rejected the request (HTTP {status})") from e
    except httpx.HTTPError as e:
        raise TransportError(f"Error connecting to agent: {e}") from e
    except ValidationError as e:
        raise TransportError("Agent returned an invalid reply") from e


# ---------------------------------------------------------------------------
# CLI Client
# ---------------------------------------------------------------------------
def run_cli(url: str) -> None:
    """Run an interactive shell that sends each line to the agent at *url*."""
    echo(f"\n🔮 agentlink shell for {url}", Style.STATUS)
    echo("Type 'exit' or 'quit' (or Ctrl+C) to exit", Style.STATUS)
    while True:
        user_msg, ok = read_line("\n🧑 You: ")
        if not ok:
            break  # Exit if user input couldn't be retrieved (e.g., Ctrl+C)
        if user_msg.lower() in {"exit", "quit"}:
            break
        if not user_msg:
            continue

        try:
            echo(call_agent(url, user_msg), Style.ANSWER)
        except TransportError as exc:
            echo(f"⚠️ {exc}", Style.ERROR)
