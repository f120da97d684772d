"""
Tool schema definitions for SerpNexus.

ToolSchema: JSON-serializable format for MCP responses.
ToolDefinition: Internal storage that includes the handler(s).
ToolResult: Uniform envelope returned by every tool invocation.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, Field, JsonValue

# handler(params, client) for live tools
LiveHandler = Callable[[dict[str, Any], Any], Awaitable[Any]]
# submit(params, client) -> task id
SubmitHandler = Callable[[dict[str, Any], Any], Awaitable[str]]
# check_ready(client) -> ids of tasks with a result available
ReadyHandler = Callable[[Any], Awaitable[set[str]]]
# fetch(task_id, client) -> result
FetchHandler = Callable[[str, Any], Awaitable[Any]]


class ToolKind(str, Enum):
    LIVE = "live"
    TASK = "task"


class ToolSchema(BaseModel):
    """
    MCP-compliant tool format.
    Sent to agents via tools/list response.
    """
    name: str = Field(..., description="Unique tool identifier")
    description: str = Field(..., description="What the tool does")
    inputSchema: dict[str, Any] = Field(..., description="JSON Schema for parameters")


@dataclass(frozen=True)
class TaskHandlers:
    submit: SubmitHandler
    check_ready: ReadyHandler
    fetch: FetchHandler


@dataclass(frozen=True)
class ToolDefinition:
    """
    Internal tool storage. Immutable once registered.
    Exactly one of ``handler`` (live) or ``task`` (task) is set.
    """
    name: str
    description: str
    input_model: type[BaseModel]
    kind: ToolKind
    handler: Optional[LiveHandler] = None
    task: Optional[TaskHandlers] = None

    @property
    def inputSchema(self) -> dict[str, Any]:
        schema = self.input_model.model_json_schema()
        schema.pop("title", None)
        return schema

    def to_schema(self) -> ToolSchema:
        """Convert to MCP-compliant format (drops handlers)."""
        return ToolSchema(
            name=self.name,
            description=self.description,
            inputSchema=self.inputSchema
        )


class ToolFailure(BaseModel):
    """Structured failure. Only the category says where it came from."""
    category: str = Field(description="validation, upstream, timeout, not_found or internal")
    kind: str = Field(description="Error type name")
    message: str
    status_code: Optional[int] = None
    details: Optional[list[dict[str, Any]]] = None


class ToolResult(BaseModel):
    ok: bool
    data: Optional[JsonValue] = None
    error: Optional[ToolFailure] = None

    @classmethod
    def success(cls, data: Any) -> "ToolResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: ToolFailure) -> "ToolResult":
        return cls(ok=False, error=error)
