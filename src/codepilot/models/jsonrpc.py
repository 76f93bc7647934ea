# JSON-RPC 2.0 envelopes
# Wire models for MCP requests and responses carried over HTTP/SSE

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class JSONRPCRequest(BaseModel):
    """Outgoing JSON-RPC request."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: int
    method: str
    params: dict[str, Any] = Field(default_factory=dict)


class JSONRPCResponse(BaseModel):
    """Incoming JSON-RPC response envelope.

    Both ``result`` and ``error`` are optional on the wire; callers go through
    :meth:`result_object` and :meth:`tools` instead of probing the raw value.
    """

    model_config = ConfigDict(extra="ignore")

    # Never read; any value the server sends is accepted
    jsonrpc: Any = None
    id: Any = None
    result: Any = None
    error: Any = None

    @classmethod
    def parse(cls, payload: str) -> "JSONRPCResponse | None":
        """Parse one envelope, returning None for anything that is not a JSON object."""
        try:
            return cls.model_validate_json(payload)
        except ValidationError:
            return None

    def result_object(self) -> dict[str, Any] | None:
        if isinstance(self.result, dict):
            return self.result
        return None

    def tools(self) -> list[Any] | None:
        result = self.result_object()
        if result is None:
            return None
        tools = result.get("tools")
        if isinstance(tools, list):
            return tools
        return None
