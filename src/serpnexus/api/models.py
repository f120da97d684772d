"""
Pydantic models for DataForSEO responses.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from ..errors import ApplicationError

# The only envelope status code the API uses for success
SUCCESS_STATUS = 20000
# Task-level code returned by task_post for an accepted task
TASK_CREATED_STATUS = 20100


class ResponseEnvelope(BaseModel):
    """Normalized response: the API's self-reported outcome plus its payload.

    ``data`` is the upstream ``tasks`` array kept verbatim; every other
    top-level key (version, time, cost, ...) lands in ``raw_meta``.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int
    status_message: str = ""
    data: Optional[JsonValue] = None
    raw_meta: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ResponseEnvelope":
        meta = {
            key: value
            for key, value in payload.items()
            if key not in ("status_code", "status_message", "tasks")
        }
        return cls(
            status_code=payload["status_code"],
            status_message=payload.get("status_message") or "",
            data=payload.get("tasks"),
            raw_meta=meta,
        )

    @property
    def is_success(self) -> bool:
        return self.status_code == SUCCESS_STATUS

    def raise_for_status(self) -> "ResponseEnvelope":
        """Raise ApplicationError unless the API reported success."""
        if not self.is_success:
            raise ApplicationError(self.status_code, self.status_message)
        return self

    @property
    def tasks(self) -> list[dict[str, Any]]:
        if not isinstance(self.data, list):
            return []
        return [task for task in self.data if isinstance(task, dict)]

    def to_result(self) -> dict[str, Any]:
        """Shape used as the payload of a successful tool call."""
        return {
            "status_code": self.status_code,
            "status_message": self.status_message,
            "data": self.data,
            "meta": self.raw_meta,
        }


class ReadyTask(BaseModel):
    """Entry of the tasks_ready result list. Only ``id`` is relied upon."""

    model_config = ConfigDict(extra="allow")

    id: str
    tag: Optional[str] = None


class SerpResult(BaseModel):
    """Partial schema of a SERP result body.

    The upstream result schema is not contractually fixed, so unknown keys are
    allowed and ``items`` is left as raw JSON.
    """

    model_config = ConfigDict(extra="allow")

    keyword: Optional[str] = None
    type: Optional[str] = None
    se_domain: Optional[str] = None
    location_code: Optional[int] = None
    language_code: Optional[str] = None
    check_url: Optional[str] = None
    datetime: Optional[str] = None
    items_count: Optional[int] = None
    items: Optional[list[JsonValue]] = None
