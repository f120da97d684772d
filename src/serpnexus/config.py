"""
Process-wide configuration for SerpNexus.

Settings are read once at startup (``Settings.from_env``) and then passed
explicitly to the client, the registry and the task engine. Nothing mutates
them afterwards.
"""
import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr

DEFAULT_BASE_URL = "https://api.dataforseo.com/v3"


def _env_number(kind: type, name: str, default: str):
    """Parse a numeric environment variable, naming it when the value is bad."""
    raw = os.getenv(name, default)
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f"{name} must be a valid {kind.__name__}, got {raw!r}") from None


class RetryPolicy(BaseModel):
    """Backoff for idempotent GET requests that fail at the transport level."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=0.25, ge=0)
    max_delay: float = Field(default=4.0, ge=0)


class ClientConfig(BaseModel):
    """Where the upstream API lives and how to authenticate against it."""

    model_config = ConfigDict(frozen=True)

    login: str
    password: SecretStr
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=60.0, gt=0)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)


class PollPolicy(BaseModel):
    """Timing for the readiness loop of task tools."""

    model_config = ConfigDict(frozen=True)

    interval: float = Field(default=5.0, ge=0, description="Delay before the second readiness check")
    backoff: float = Field(default=1.5, ge=1.0, description="Multiplier applied to the delay after each check")
    max_interval: float = Field(default=30.0, ge=0)
    timeout: float = Field(default=600.0, gt=0, description="Overall bound on waiting for readiness")
    max_consecutive_failures: int = Field(default=3, ge=0)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    client: ClientConfig
    poll: PollPolicy = Field(default_factory=PollPolicy)
    host: str = "0.0.0.0"
    port: int = 8000
    transport: str = "sse"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment (and a .env file, if present).

        Raises:
            ValueError: If DATAFORSEO_USERNAME or DATAFORSEO_PASSWORD is not configured,
                or a numeric variable does not parse
        """
        load_dotenv()

        login = os.getenv("DATAFORSEO_USERNAME")
        password = os.getenv("DATAFORSEO_PASSWORD")
        if not login or not password:
            raise ValueError("DATAFORSEO_USERNAME and DATAFORSEO_PASSWORD must be configured")

        retry = RetryPolicy(
            max_attempts=_env_number(int, "DATAFORSEO_GET_ATTEMPTS", "3"),
            base_delay=_env_number(float, "DATAFORSEO_RETRY_BASE_DELAY", "0.25"),
            max_delay=_env_number(float, "DATAFORSEO_RETRY_MAX_DELAY", "4.0"),
        )
        client = ClientConfig(
            login=login,
            password=password,
            base_url=os.getenv("DATAFORSEO_BASE_URL", DEFAULT_BASE_URL),
            timeout=_env_number(float, "DATAFORSEO_TIMEOUT", "60"),
            retry=retry,
        )
        poll = PollPolicy(
            interval=_env_number(float, "SERP_POLL_INTERVAL", "5.0"),
            backoff=_env_number(float, "SERP_POLL_BACKOFF", "1.5"),
            max_interval=_env_number(float, "SERP_POLL_MAX_INTERVAL", "30.0"),
            timeout=_env_number(float, "SERP_TASK_TIMEOUT", "600"),
            max_consecutive_failures=_env_number(int, "SERP_POLL_MAX_FAILURES", "3"),
        )
        return cls(
            client=client,
            poll=poll,
            host=os.getenv("SERPNEXUS_HOST", "0.0.0.0"),
            port=_env_number(int, "SERPNEXUS_PORT", "8000"),
            transport=os.getenv("SERPNEXUS_TRANSPORT", "sse"),
            log_level=os.getenv("SERPNEXUS_LOG_LEVEL", "INFO"),
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO, which would include full URLs
    logging.getLogger("httpx").setLevel(logging.WARNING)
