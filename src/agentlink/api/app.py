"""
Agent service endpoint.

Exposes one agent, and its single long-lived session, over HTTP:
- **GET /health** - liveness check.
- **POST /agent**  - run the agent on {"input": "..."} and reply {"content": "..."}.

The wire contract is deliberately coarse: every rejected or failed request is answered with an empty
``400 Bad Request``.  The concrete failure is only logged.
"""

import logging

from fastapi import (
    FastAPI,
    Request,
    Response,
)
from fastapi.concurrency import run_in_threadpool
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from agentlink.agent.agent import Agent
from agentlink.api.models import (
    AgentRequest,
    AgentResponse,
)
from agentlink.config import settings
from agentlink.console import (
    Style,
    echo,
)
from agentlink.core.errors import AgentError

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"]


def _bad_request() -> Response:
    return Response(status_code=400)


def _is_json(request: Request) -> bool:
    media_type = request.headers.get("content-type", "").split(";", 1)[0]
    return media_type.strip().lower() == JSON_MEDIA_TYPE


def create_app(agent: Agent) -> FastAPI:
    """Build the FastAPI application serving *agent*."""
    app = FastAPI(
        title=f"agentlink {agent.name} agent",
        version="0.1.0",
        description=f"Agent service for the '{agent.name}' agent",
    )
    app.state.agent = agent

    # Verbs outside ALL_METHODS never reach the route; the router answers them with a 405.
    @app.exception_handler(405)
    async def method_not_allowed(request: Request, exc: Exception) -> Response:
        if request.url.path == "/agent":
            logger.warning("Rejected %s request to /agent", request.method)
            return _bad_request()
        return await http_exception_handler(request, exc)

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    @app.get("/health", summary="Health check")
    async def health() -> dict[str, str]:
        """Return a simple liveness payload."""
        return {"status": "ok", "agent": agent.name}

    # All methods are routed here so that anything but POST gets a 400 rather than a 405.
    @app.api_route("/agent", methods=ALL_METHODS, summary="Submit a request to the agent")
    async def agent_endpoint(request: Request) -> Response:
        """Run the agent's tool loop on the request input."""
        if request.method != "POST":
            logger.warning("Rejected %s request to /agent", request.method)
            return _bad_request()
        if not _is_json(request):
            logger.warning(
                "Rejected request with content type %r", request.headers.get("content-type")
            )
            return _bad_request()

        try:
            req = AgentRequest.model_validate_json(await request.body())
        except ValidationError as exc:
            logger.warning("Rejected malformed request body: %s", exc)
            return _bad_request()

        try:
            content = await run_in_threadpool(agent.submit_request, req.input)
        except AgentError as exc:
            logger.error("Agent '%s' failed [%s]: %s", agent.name, type(exc).__name__, exc)
            return _bad_request()
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Agent '%s' failed unexpectedly", agent.name)
            return _bad_request()

        return JSONResponse(AgentResponse(content=content).model_dump(), status_code=200)

    return app


# ---------------------------------------------------------------------------
# Public helper to launch an agent service (imported by main.py)
# ---------------------------------------------------------------------------
def run_agent_service(
    agent: Agent,
    host: str = "0.0.0.0",
    port: int = 8000,
    log_level: str | None = None,
) -> None:
    """Start a uvicorn server hosting *agent*.

    The agent gets a fresh session that lives as long as the server.

    Parameters
    ----------
    agent:
        The agent to expose.
    host, port:
        Bind address for the HTTP server.
    log_level:
        Logging level to use (default from settings if not provided).
    """

    # Lazy import - keeps uvicorn an optional dependency at pkg‑import time
    import uvicorn  # pylint: disable=import-outside-toplevel

    if log_level is None:  # Use the default from settings if not provided
        log_level = settings.LOG_LEVEL

    agent.start_session()
    app = create_app(agent)

    logger.info(
        "Starting '%s' agent service at %s:%d (log_level=%s)", agent.name, host, port, log_level
    )
    echo(f"🔮 '{agent.name}' agent is running at http://{host}:{port}/agent.", Style.STATUS)
    uvicorn.run(app, host=host, port=port, log_level=log_level)
