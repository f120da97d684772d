"""
Tool registry for SerpNexus.
NOTE:
1.MCP uses JSON Schema for tool input definitions. Here every tool declares its
  inputs as a pydantic model, which gives us the JSON Schema for tools/list and
  the validator for tools/call from the same source.
2.invoke() never raises for a failing tool. Whatever goes wrong (bad input,
  upstream down, task timeout) comes back as a ToolResult with ok=False.
"""
import logging
from typing import Any, Optional

import pydantic
from pydantic import BaseModel

from ..api.models import ResponseEnvelope
from ..errors import SerpNexusError, ValidationError
from .schemas import (
    FetchHandler,
    LiveHandler,
    ReadyHandler,
    SubmitHandler,
    TaskHandlers,
    ToolDefinition,
    ToolFailure,
    ToolKind,
    ToolResult,
)
from .tasks import ProgressCallback, TaskOrchestrator

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Holds every registered tool and runs invocations against one client."""

    def __init__(self, client: Any, orchestrator: TaskOrchestrator):
        self.client = client
        self.orchestrator = orchestrator
        self._tools: dict[str, ToolDefinition] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def get_all_tools(self) -> list[ToolDefinition]:
        """Return all registered tools."""
        return list(self._tools.values())

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool by name."""
        return self._tools.get(name)

    def register(
        self,
        name: str,
        schema: type[BaseModel],
        handler: LiveHandler,
        description: str = "",
    ) -> ToolDefinition:
        """Register a live tool: one handler call produces the result."""
        return self._add(ToolDefinition(
            name=name,
            description=description or (schema.__doc__ or "").strip(),
            input_model=schema,
            kind=ToolKind.LIVE,
            handler=handler,
        ))

    def register_task(
        self,
        name: str,
        schema: type[BaseModel],
        submit: SubmitHandler,
        check_ready: ReadyHandler,
        fetch: FetchHandler,
        description: str = "",
    ) -> ToolDefinition:
        """Register a task tool: submit, poll for readiness, then fetch."""
        return self._add(ToolDefinition(
            name=name,
            description=description or (schema.__doc__ or "").strip(),
            input_model=schema,
            kind=ToolKind.TASK,
            task=TaskHandlers(submit=submit, check_ready=check_ready, fetch=fetch),
        ))

    def _add(self, tool: ToolDefinition) -> ToolDefinition:
        if tool.name in self._tools:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        self._tools[tool.name] = tool
        logger.debug("Registered %s tool %s", tool.kind.value, tool.name)
        return tool

    def validate(self, tool: ToolDefinition, arguments: Optional[dict[str, Any]]) -> dict[str, Any]:
        """Validate raw arguments and return the normalized parameter set.

        Raises:
            ValidationError: If any field violates the tool's schema
        """
        try:
            model = tool.input_model.model_validate(arguments or {})
        except pydantic.ValidationError as e:
            errors = [
                {"loc": [str(part) for part in err["loc"]], "msg": err["msg"], "type": err["type"]}
                for err in e.errors()
            ]
            summary = "; ".join(f"{'.'.join(err['loc']) or '<input>'}: {err['msg']}" for err in errors)
            raise ValidationError(f"Invalid arguments for {tool.name}: {summary}", errors) from e
        return model.model_dump(mode="json", exclude_none=True)

    async def invoke(
        self,
        name: str,
        arguments: Optional[dict[str, Any]] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ToolResult:
        """Run a tool and wrap its outcome in a ToolResult."""
        tool = self.get_tool(name)
        if tool is None:
            return ToolResult.failure(ToolFailure(
                category="not_found",
                kind="ToolNotFound",
                message=f"Tool '{name}' not found",
            ))

        try:
            params = self.validate(tool, arguments)
            if tool.kind is ToolKind.TASK:
                result = await self.orchestrator.run(tool.task, params, self.client, progress=progress)
            else:
                result = await tool.handler(params, self.client)
            return ToolResult.success(_shape(result))
        except SerpNexusError as e:
            logger.info("Tool %s failed (%s): %s", name, e.category, e)
            return ToolResult.failure(ToolFailure(**e.to_dict()))
        except Exception as e:
            logger.exception("Tool %s raised an unexpected error", name)
            return ToolResult.failure(ToolFailure(
                category="internal",
                kind=type(e).__name__,
                message=str(e),
            ))


def _shape(result: Any) -> Any:
    if isinstance(result, ResponseEnvelope):
        return result.raise_for_status().to_result()
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    return result
