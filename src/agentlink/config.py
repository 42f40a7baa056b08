"""Configuration settings for the application."""

from pydantic import ValidationError
from pydantic_settings import BaseSettings

from agentlink.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Pydantic settings class for the application."""

    # Define the settings with default values and types
    # These will be loaded from environment variables or a .env file if not provided
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    LOG_LEVEL: str = "info"  # Options: debug, info, warning, error, critical

    # Model gateway configuration
    GATEWAY: str = "anthropic"  # Options: anthropic, openai, gemini
    ANTHROPIC_API_KEY: str | None = None
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-latest"
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    GOOGLE_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    MAX_OUTPUT_TOKENS: int = 1024

    # Tool loop
    MAX_TOOL_CYCLES: int = 25
    REMOTE_AGENT_TIMEOUT: float = 120.0

    class Config:
        """Configuration for Pydantic settings."""

        # Load environment variables from a .env file
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


class RemoteEndpoint(BaseSettings):
    """
    Address of a remote agent service.

    Instantiate with ``_env_prefix`` so that each remote agent reads its own pair of variables,
    e.g. ``RemoteEndpoint(_env_prefix="FLOAT_AGENT_")`` reads ``FLOAT_AGENT_HOSTNAME`` and
    ``FLOAT_AGENT_PORT``.
    """

    HOSTNAME: str
    PORT: int

    class Config:
        """Configuration for Pydantic settings."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def base_url(self) -> str:
        """Root URL of the remote service."""
        return f"http://{self.HOSTNAME}:{self.PORT}"


def resolve_endpoint(env_prefix: str) -> RemoteEndpoint:
    """
    Read a remote agent endpoint from the environment.

    The lookup happens on every call so late changes to the environment are picked up.

    Raises
    ------
    ConfigurationError
        If the hostname or port variable is missing or invalid.
    """
    try:
        return RemoteEndpoint(_env_prefix=env_prefix)  # type: ignore[call-arg]
    except ValidationError as exc:
        missing = ", ".join(f"{env_prefix}{err['loc'][0]}" for err in exc.errors() if err["loc"])
        raise ConfigurationError(f"Remote agent endpoint not configured: {missing}") from exc


settings = Settings()
