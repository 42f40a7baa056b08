"""
agentlink entry point.

This file handles startup concerns (arg-parsing, env setup, logging) and launches the requested
mode:

* ``serve``  - run one agent as an HTTP service.
* ``demo``   - run the float agent service in the background and ask the math agent a question
  that it answers by calling the float agent.
* ``client`` - interactive shell against a running agent service.
"""

import argparse
import logging
import sys
import threading

from agentlink.api.app import run_agent_service
from agentlink.catalog import (
    AGENT_BUILDERS,
    FLOAT_AGENT_ENV_PREFIX,
    build_agent,
    build_math_agent,
)
from agentlink.client.cli import (
    run_cli,
    wait_for_service,
)
from agentlink.config import (
    resolve_endpoint,
    settings,
)
from agentlink.console import (
    Style,
    echo,
)
from agentlink.core.errors import (
    AgentError,
    ConfigurationError,
)

logger = logging.getLogger(__name__)

SECRET_SETTINGS = {"ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GOOGLE_API_KEY"}
DEMO_MESSAGE = "what is pi to 10 decimal places multiplied by 2.5"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _serve(agent_name: str, host: str | None, port: int | None) -> None:
    if agent_name == "math":
        resolve_endpoint(FLOAT_AGENT_ENV_PREFIX)  # fail at startup, not on the first request
    if port is None and agent_name == "float":
        port = resolve_endpoint(FLOAT_AGENT_ENV_PREFIX).PORT
    agent = build_agent(agent_name)
    try:
        run_agent_service(agent, host=host or settings.API_HOST, port=port or settings.API_PORT)
    finally:
        agent.close()


def _demo(message: str) -> None:
    endpoint = resolve_endpoint(FLOAT_AGENT_ENV_PREFIX)
    float_agent = build_agent("float")

    # The float agent serves from a daemon thread for the lifetime of the process
    service_thread = threading.Thread(
        target=run_agent_service,
        kwargs={
            "agent": float_agent,
            "host": endpoint.HOSTNAME,
            "port": endpoint.PORT,
            "log_level": "warning",
        },
        daemon=True,
    )
    service_thread.start()
    wait_for_service(endpoint.base_url)

    with build_math_agent() as math_agent:
        math_agent.start_session()
        result = math_agent.submit_request(message)
    echo(f"result: {result}", Style.ANSWER)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for agentlink.

    Configuration errors are fatal: they are logged and the process exits with status 1.
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(description="Run agentlink agents")
    parser.add_argument(
        "--mode",
        choices=["serve", "demo", "client"],
        type=str.lower,
        default="serve",
        help="Serve an agent, run the math/float demo, or open a client shell (default: serve)",
    )
    parser.add_argument(
        "--agent",
        choices=sorted(AGENT_BUILDERS),
        default="float",
        help="Agent to serve in serve mode (default: %(default)s)",
    )
    parser.add_argument("--host", default=None, help="Bind address in serve mode")
    parser.add_argument("--port", type=int, default=None, help="Port in serve mode")
    parser.add_argument("--message", default=DEMO_MESSAGE, help="Request sent in demo mode")
    parser.add_argument(
        "--url",
        default=f"http://localhost:{settings.API_PORT}/agent",
        help="Agent endpoint for client mode (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        type=str.lower,
        default=settings.LOG_LEVEL,
        help="Logging level (default from env: %(default)s)",
    )
    args = parser.parse_args(argv)

    # Override log level setting with command-line argument
    settings.LOG_LEVEL = args.log_level

    _init_logging(settings.LOG_LEVEL)

    logger.info("Starting agentlink [%s mode]", args.mode)
    logger.debug("Settings: %s", settings.model_dump(exclude=SECRET_SETTINGS))

    try:
        if args.mode == "serve":
            _serve(args.agent, args.host, args.port)
        elif args.mode == "demo":
            _demo(args.message)
        else:
            run_cli(args.url)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        sys.exit(1)
    except AgentError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
