"""
MCP server - FastAPI routes for JSON-RPC requests.
"""
from fastapi import APIRouter, Request

from .models import ERROR_METHOD_NOT_FOUND, MCPRequest, rpc_error
from .utils import handle_tools_call, handle_tools_list

router = APIRouter()


@router.post("/mcp")
async def mcp_endpoint(request: MCPRequest, http_request: Request):
    """
    Main MCP endpoint.
    Routes requests based on method field.
    """
    registry = http_request.app.state.registry

    # Route: tools/list
    if request.method == "tools/list":
        return handle_tools_list(request, registry)

    # Route: tools/call
    elif request.method == "tools/call":
        return await handle_tools_call(request, registry)

    # Error: unknown method
    else:
        return rpc_error(request.id, ERROR_METHOD_NOT_FOUND, f"Method '{request.method}' not found")
