"""
MCP protocol models - JSON-RPC 2.0 format.
"""
from typing import Any, Optional, Union
from pydantic import BaseModel, Field


# ============ BASE MODELS ============

class MCPRequest(BaseModel):
    """Base request - all MCP requests have these fields."""
    jsonrpc: str = Field(default="2.0")
    id: Union[int, str] = Field(...)
    method: str = Field(...)
    params: Optional[dict[str, Any]] = Field(default=None)


# ============ TOOLS/CALL ============

class ToolCallParams(BaseModel):
    """params of a tools/call request."""
    name: str = Field(...)
    arguments: dict[str, Any] = Field(default_factory=dict)


# ============ ERROR HANDLING ============

class MCPError(BaseModel):
    """Error structure."""
    code: int = Field(...)
    message: str = Field(...)
    data: Optional[dict[str, Any]] = Field(default=None)


# Error codes
ERROR_INVALID_PARAMS = -32602
ERROR_METHOD_NOT_FOUND = -32601
ERROR_INTERNAL_ERROR = -32603


def rpc_result(request_id: Union[int, str], result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def rpc_error(request_id: Union[int, str], code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": MCPError(code=code, message=message).model_dump(exclude_none=True),
    }
