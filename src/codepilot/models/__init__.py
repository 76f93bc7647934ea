# Domain models
# Tool descriptors, JSON-RPC envelopes and routing state

from .jsonrpc import JSONRPCRequest, JSONRPCResponse
from .routing import (
    ConnectionState,
    ConnectionStatus,
    Provider,
    ProviderState,
    RouterState,
    RoutingDecision,
)
from .tool import ScoredCandidate, ToolDescriptor, ToolSelection, ToolSuggestion

__all__ = [
    "ConnectionState",
    "ConnectionStatus",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "Provider",
    "ProviderState",
    "RouterState",
    "RoutingDecision",
    "ScoredCandidate",
    "ToolDescriptor",
    "ToolSelection",
    "ToolSuggestion",
]
