"""
Async client for the DataForSEO REST API.

The client only moves envelopes. It raises TransportError when no usable
envelope came back, and otherwise returns the ResponseEnvelope as-is: callers
decide when to call ``raise_for_status()``.
"""
import logging
from typing import Any, Optional

import httpx

from ..config import ClientConfig
from ..errors import TransportError
from .models import ResponseEnvelope
from .retry import with_retry

logger = logging.getLogger(__name__)


class DataForSeoClient:
    """Authenticated POST/GET against a fixed base URL.

    One instance (and its connection pool) is shared by all tool invocations.

    Usage:
        async with DataForSeoClient(settings.client) as client:
            envelope = await client.post("/serp/google/organic/live", {"keyword": "mcp"})
            envelope.raise_for_status()
    """

    def __init__(self, config: ClientConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            auth=httpx.BasicAuth(config.login, config.password.get_secret_value()),
            timeout=config.timeout,
            headers={"Content-Type": "application/json", "User-Agent": "serpnexus/0.1.0"},
            transport=transport,
        )

    async def __aenter__(self) -> "DataForSeoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def post(self, path: str, body: Any) -> ResponseEnvelope:
        """POST a task payload. Never retried: a resend could create a duplicate task."""
        payload = body if isinstance(body, list) else [body]
        return await self._send("POST", path, json=payload)

    async def get(self, path: str, retry: bool = True) -> ResponseEnvelope:
        """GET a resource, retrying transport failures with backoff.

        Pass ``retry=False`` where the caller owns the failure policy
        (readiness polling) or a second attempt is not safe (task_get).
        """
        if not retry:
            return await self._send("GET", path)
        return await with_retry(
            lambda: self._send("GET", path),
            retry_on=(TransportError,),
            policy=self.config.retry,
            label=f"GET {path}",
        )

    async def _send(self, method: str, path: str, json: Any = None) -> ResponseEnvelope:
        logger.debug("%s %s", method, path)
        try:
            response = await self._http.request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise TransportError(f"{method} {path} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(
                f"{method} {path} returned a malformed body (HTTP {response.status_code})"
            ) from e

        if not isinstance(payload, dict) or not isinstance(payload.get("status_code"), int):
            raise TransportError(
                f"{method} {path} returned no status envelope (HTTP {response.status_code})"
            )

        envelope = ResponseEnvelope.from_payload(payload)
        logger.debug("%s %s -> %d %s", method, path, envelope.status_code, envelope.status_message)
        return envelope
