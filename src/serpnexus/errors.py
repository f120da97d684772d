"""
Error taxonomy for SerpNexus.

Every error carries a ``category`` which is the only thing the protocol
surface reports about where a failure came from:

- validation: input rejected before any network call
- upstream:   the API could not be reached, or it reported a failure
- timeout:    a task result was not ready within the configured bound
"""
from typing import Any, Optional


class SerpNexusError(Exception):
    """Base class for all errors raised by the client, registry and engine."""

    category = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "kind": self.kind, "message": self.message}


class ValidationError(SerpNexusError):
    """Input does not match the tool's schema."""

    category = "validation"

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.errors:
            payload["details"] = self.errors
        return payload


class TransportError(SerpNexusError):
    """Connection failure, timeout or unreadable response body."""

    category = "upstream"


class ApplicationError(SerpNexusError):
    """Well-formed response whose status code is not the success sentinel."""

    category = "upstream"

    def __init__(self, status_code: int, status_message: str):
        super().__init__(f"{status_code}: {status_message}")
        self.status_code = status_code
        self.status_message = status_message

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["status_code"] = self.status_code
        return payload


class TaskTimeoutError(SerpNexusError):
    """Readiness was never observed before the timeout elapsed."""

    category = "timeout"

    def __init__(self, task_id: str, timeout: float):
        super().__init__(f"Task {task_id} was not ready after {timeout:g}s")
        self.task_id = task_id
        self.timeout = timeout


class TaskFailedError(SerpNexusError):
    """The API accepted the request but reported the task itself as failed."""

    category = "upstream"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        return payload
