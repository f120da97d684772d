import os
import sys
from typing import Any, Optional

import pytest


def _ensure_src_on_path() -> None:
    src = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
    if src not in sys.path:
        sys.path.insert(0, src)


_ensure_src_on_path()

from serpnexus.api.models import ResponseEnvelope  # noqa: E402
from serpnexus.config import PollPolicy  # noqa: E402
from serpnexus.tools import build_registry  # noqa: E402


def envelope(tasks: Optional[list] = None, status_code: int = 20000, status_message: str = "Ok.") -> ResponseEnvelope:
    return ResponseEnvelope.from_payload({
        "version": "0.1.20240801",
        "status_code": status_code,
        "status_message": status_message,
        "time": "0.1 sec.",
        "cost": 0.0006,
        "tasks_count": len(tasks or []),
        "tasks_error": 0,
        "tasks": tasks,
    })


class FakeClient:
    """Stands in for DataForSeoClient and records every call.

    Responses are scripted per (method, path). Each call consumes the next
    scripted item; the last one repeats. Exceptions are raised, callables are
    called with no arguments.
    """

    def __init__(self):
        self.calls: list[tuple[str, str, Any]] = []
        self._routes: dict[tuple[str, str], list[Any]] = {}

    def on(self, method: str, path: str, *responses: Any) -> "FakeClient":
        self._routes[(method, path)] = list(responses)
        return self

    def paths(self, method: Optional[str] = None) -> list[str]:
        return [path for m, path, _ in self.calls if method is None or m == method]

    async def _dispatch(self, method: str, path: str) -> ResponseEnvelope:
        queue = self._routes.get((method, path))
        if not queue:
            raise AssertionError(f"unexpected {method} {path}")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item()
        return item

    async def post(self, path: str, body: Any) -> ResponseEnvelope:
        self.calls.append(("POST", path, body))
        return await self._dispatch("POST", path)

    async def get(self, path: str, retry: bool = True) -> ResponseEnvelope:
        self.calls.append(("GET", path, None))
        return await self._dispatch("GET", path)


@pytest.fixture
def fast_poll():
    """Poll policy with near-zero intervals so tests run in milliseconds."""
    return PollPolicy(interval=0.001, backoff=1.0, max_interval=0.001, timeout=2.0, max_consecutive_failures=2)


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def registry(fake_client, fast_poll):
    return build_registry(fake_client, fast_poll)
