"""
SerpNexus MCP Server - SSE (or stdio) Transport.

Every registry tool is exposed through FastMCP with the parameters of its
pydantic input model, so agents see the same schema tools/list reports on the
JSON-RPC route.
"""
import asyncio
import inspect
import json
import logging
from typing import Annotated, Any, Sequence

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from serpnexus.api import DataForSeoClient
from serpnexus.config import Settings, configure_logging
from serpnexus.errors import ValidationError
from serpnexus.tools import build_registry
from serpnexus.tools.base import ToolRegistry
from serpnexus.tools.schemas import ToolDefinition, ToolFailure

logger = logging.getLogger(__name__)


def _failure_text(failure: ToolFailure) -> str:
    return json.dumps(failure.model_dump(exclude_none=True), ensure_ascii=False)


def _tool_signature(tool: ToolDefinition) -> tuple[inspect.Signature, dict[str, Any]]:
    parameters = [inspect.Parameter("ctx", inspect.Parameter.KEYWORD_ONLY, annotation=Context)]
    annotations: dict[str, Any] = {"ctx": Context}
    for name, field in tool.input_model.model_fields.items():
        annotation = Annotated[field.annotation, field]
        default = inspect.Parameter.empty if field.is_required() else field.default
        parameters.append(inspect.Parameter(name, inspect.Parameter.KEYWORD_ONLY, annotation=annotation, default=default))
        annotations[name] = annotation
    return inspect.Signature(parameters), annotations


def _tool_function(registry: ToolRegistry, tool: ToolDefinition):
    """Build an async function FastMCP can introspect, forwarding to the registry."""

    async def run(ctx: Context, **arguments: Any) -> Any:
        async def progress(value: float, total: float | None, message: str | None) -> None:
            await ctx.report_progress(progress=value, total=total, message=message)

        arguments = {key: value for key, value in arguments.items() if value is not None}
        result = await registry.invoke(tool.name, arguments, progress=progress)
        if not result.ok:
            raise ToolError(_failure_text(result.error))
        return result.data

    signature, annotations = _tool_signature(tool)
    run.__name__ = tool.name
    run.__doc__ = tool.description
    run.__signature__ = signature
    run.__annotations__ = annotations
    return run


class SerpNexusServer(FastMCP):
    """FastMCP server whose tool arguments are checked by the registry first.

    FastMCP's own argument check would otherwise reject bad input with a
    plain pydantic message and drop unknown fields. Validating through the
    registry gives the same structured failure as the JSON-RPC route.
    """

    def __init__(self, registry: ToolRegistry, **settings: Any):
        super().__init__(**settings)
        self.registry = registry
        for tool in registry.get_all_tools():
            self.add_tool(_tool_function(registry, tool), name=tool.name, description=tool.description)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Sequence[Any]:
        if name in self.registry:
            try:
                self.registry.validate(self.registry.get_tool(name), arguments)
            except ValidationError as e:
                raise ToolError(_failure_text(ToolFailure(**e.to_dict()))) from e
        return await super().call_tool(name, arguments)


def create_server(settings: Settings, client: DataForSeoClient) -> SerpNexusServer:
    """Build the server around a client the caller owns.

    The FastMCP lifespan runs once per session on SSE, so the client's
    lifetime is tied to the process instead (see ``serve``).
    """
    registry = build_registry(client, settings.poll)
    return SerpNexusServer(registry, name="serpnexus", host=settings.host, port=settings.port)


async def serve(settings: Settings) -> None:
    async with DataForSeoClient(settings.client) as client:
        server = create_server(settings, client)
        logger.info("🚀 SerpNexus serving %d tools over %s", len(server.registry), settings.transport)
        if settings.transport == "stdio":
            await server.run_stdio_async()
        elif settings.transport == "streamable-http":
            await server.run_streamable_http_async()
        else:
            await server.run_sse_async()


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
