"""Routing and provider connection state models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .tool import ToolDescriptor


class Provider(str, Enum):
    """Backend tool providers a query can be routed to."""
    LINEAR = "linear"
    GITHUB = "github"
    SUPABASE = "supabase"


class RouterState(str, Enum):
    """Lifecycle of one routing attempt."""
    CLASSIFYING = "classifying"
    ROUTED = "routed"
    GENERAL = "general"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class RoutingDecision:
    """Where a query goes, plus the raw text the classifier produced.

    For ``GENERAL`` and ``DEGRADED`` decisions ``text`` is the final answer;
    for ``ROUTED`` it is the classifier's reply including the directive.
    """
    state: RouterState
    text: str
    provider: Optional[Provider] = None


class ConnectionState(str, Enum):
    NOT_TESTED = "not_tested"
    PENDING = "pending"
    CONNECTED = "connected"
    FAILED = "failed"


_ALLOWED_TRANSITIONS = {
    ConnectionState.NOT_TESTED: {ConnectionState.PENDING},
    ConnectionState.PENDING: {ConnectionState.CONNECTED, ConnectionState.FAILED},
    ConnectionState.CONNECTED: set(),
    ConnectionState.FAILED: set(),
}


@dataclass(frozen=True)
class ConnectionStatus:
    """Connectivity of one provider within one session.

    NotTested -> Pending -> Connected | Failed(reason). Both end states are
    terminal; a provider recovers only by being re-initialized, which starts
    from a fresh ``NotTested`` status.
    """
    state: ConnectionState = ConnectionState.NOT_TESTED
    reason: Optional[str] = None

    def transition(self, state: ConnectionState, reason: Optional[str] = None) -> ConnectionStatus:
        if state not in _ALLOWED_TRANSITIONS[self.state]:
            raise ValueError(f"Invalid connection status transition: {self.state.value} -> {state.value}")
        if state is ConnectionState.FAILED and not reason:
            raise ValueError("A failed connection status requires a reason")
        return ConnectionStatus(state=state, reason=reason if state is ConnectionState.FAILED else None)

    def pending(self) -> ConnectionStatus:
        return self.transition(ConnectionState.PENDING)

    def connected(self) -> ConnectionStatus:
        return self.transition(ConnectionState.CONNECTED)

    def failed(self, reason: str) -> ConnectionStatus:
        return self.transition(ConnectionState.FAILED, reason)

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def describe(self) -> str:
        if self.state is ConnectionState.FAILED:
            return f"failed: {self.reason}"
        return self.state.value.replace("_", " ")


@dataclass(frozen=True)
class ProviderState:
    """Snapshot of one provider's status and discovered tools."""
    provider: Provider
    status: ConnectionStatus = field(default_factory=ConnectionStatus)
    tools: Tuple[ToolDescriptor, ...] = ()

    @property
    def tool_names(self) -> list[str]:
        return [tool.name for tool in self.tools]
