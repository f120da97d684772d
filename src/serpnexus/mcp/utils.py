"""
MCP utilities - handler functions for processing requests.
"""
import json
import logging

import pydantic

from ..tools.base import ToolRegistry
from .models import (
    ERROR_INTERNAL_ERROR,
    ERROR_INVALID_PARAMS,
    MCPRequest,
    ToolCallParams,
    rpc_error,
    rpc_result,
)

logger = logging.getLogger(__name__)


def handle_tools_list(request: MCPRequest, registry: ToolRegistry) -> dict:
    """
    Handle tools/list request.
    Returns all registered tools in MCP format.
    """
    try:
        tools_json = [tool.to_schema().model_dump() for tool in registry.get_all_tools()]
    except Exception as e:
        logger.exception("tools/list failed")
        return rpc_error(request.id, ERROR_INTERNAL_ERROR, str(e))
    return rpc_result(request.id, {"tools": tools_json})


async def handle_tools_call(request: MCPRequest, registry: ToolRegistry) -> dict:
    """
    Handle tools/call request.
    Executes a tool and returns the result. Tool failures are results with
    isError=True, not JSON-RPC errors.
    """
    try:
        params = ToolCallParams.model_validate(request.params or {})
    except pydantic.ValidationError as e:
        return rpc_error(request.id, ERROR_INVALID_PARAMS, f"Invalid tools/call params: {e.error_count()} errors")

    result = await registry.invoke(params.name, params.arguments)
    payload = result.data if result.ok else {"error": result.error.model_dump(exclude_none=True)}

    return rpc_result(request.id, {
        "content": [
            {
                "type": "text",
                "text": json.dumps(payload, ensure_ascii=False)
            }
        ],
        "isError": not result.ok
    })
