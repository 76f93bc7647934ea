"""Execution coordinator: routes queries and drives provider agents end to end"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..config import Settings
from ..models.routing import ConnectionStatus, Provider, ProviderState, RouterState, RoutingDecision
from .agent import AgentReply, ExecutionStatus, ProviderAgent
from .error_handler import ErrorHandler, MCPError
from .llm_client import CompletionService
from .mcp_client import McpHttpClient
from .providers import PROFILES, ProviderProfile, get_profile
from .router import QueryRouter

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ProviderProfile], McpHttpClient]


class OutcomeKind(str, Enum):
    GENERAL = "general"
    DEGRADED = "degraded"
    EXECUTED = "executed"
    TOOL_FAILED = "tool_failed"
    NO_MATCH = "no_match"
    UNAVAILABLE = "unavailable"


_KIND_BY_STATUS = {
    ExecutionStatus.SUCCESS: OutcomeKind.EXECUTED,
    ExecutionStatus.FAILED: OutcomeKind.TOOL_FAILED,
    ExecutionStatus.NO_MATCH: OutcomeKind.NO_MATCH,
}


@dataclass
class QueryOutcome:
    """What a query produced; ``text`` is always safe to show the user."""
    query: str
    text: str
    kind: OutcomeKind
    decision: RoutingDecision
    reply: Optional[AgentReply] = None

    @property
    def provider(self) -> Optional[Provider]:
        return self.decision.provider


@dataclass
class ConnectionReport:
    provider: Provider
    message: str
    state: ProviderState


class ExecutionCoordinator:
    """Glues routing decisions to provider agents.

    Queries are processed one at a time. Per-provider snapshots are replaced,
    never mutated, whenever a provider is (re)initialized.
    """

    def __init__(
        self,
        settings: Settings,
        llm: CompletionService,
        router: Optional[QueryRouter] = None,
        client_factory: Optional[ClientFactory] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.settings = settings
        self.llm = llm
        self.router = router or QueryRouter(
            llm, timeout=settings.llm_timeout_seconds, model=settings.openai_model
        )
        self.error_handler = error_handler or ErrorHandler()
        self._client_factory = client_factory or self._default_client
        self._clients: Dict[Provider, McpHttpClient] = {}
        self._states: Dict[Provider, ProviderState] = {
            profile.provider: ProviderState(profile.provider) for profile in PROFILES
        }

    def _default_client(self, profile: ProviderProfile) -> McpHttpClient:
        return McpHttpClient(
            self.settings.get_mcp_url(profile.key),
            name=profile.display_name,
            timeout=self.settings.mcp_request_timeout,
        )

    def client_for(self, provider: Provider) -> McpHttpClient:
        if provider not in self._clients:
            self._clients[provider] = self._client_factory(get_profile(provider))
        return self._clients[provider]

    def provider_states(self) -> List[ProviderState]:
        return [self._states[profile.provider] for profile in PROFILES]

    def provider_state(self, provider: Provider) -> ProviderState:
        return self._states[provider]

    async def build_agent(self, provider: Provider) -> ProviderAgent:
        """(Re)initialize a provider: fresh discovery, fresh catalog, fresh snapshot.

        Raises:
            MCPError: discovery failed; the snapshot is left as Failed
        """
        profile = get_profile(provider)
        status = ConnectionStatus().pending()
        self._states[provider] = ProviderState(provider, status)
        try:
            agent = await ProviderAgent.create(
                profile,
                self.client_for(provider),
                self.llm,
                llm_timeout=self.settings.llm_timeout_seconds,
                model=self.settings.openai_model,
                error_handler=self.error_handler,
            )
        except MCPError as e:
            self.error_handler.handle_error(profile.key, e, "build_agent")
            self._states[provider] = ProviderState(provider, status.failed(str(e)))
            raise

        self._states[provider] = ProviderState(provider, status.connected(), agent.catalog.tools)
        return agent

    async def process_query(self, query: str) -> QueryOutcome:
        decision = await self.router.classify(query)

        if decision.state is RouterState.GENERAL:
            return QueryOutcome(query=query, text=decision.text, kind=OutcomeKind.GENERAL, decision=decision)
        if decision.state is not RouterState.ROUTED or decision.provider is None:
            return QueryOutcome(query=query, text=decision.text, kind=OutcomeKind.DEGRADED, decision=decision)

        profile = get_profile(decision.provider)
        try:
            agent = await self.build_agent(decision.provider)
        except MCPError as e:
            return QueryOutcome(
                query=query,
                text=f"{profile.display_name} agent unavailable: {e}",
                kind=OutcomeKind.UNAVAILABLE,
                decision=decision,
            )

        reply = await agent.process_query(query)
        if reply.execution is None:
            kind = OutcomeKind.DEGRADED
        else:
            kind = _KIND_BY_STATUS[reply.execution.status]
        logger.info(f"Query handled by {profile.display_name}: {kind.value}")
        return QueryOutcome(query=query, text=reply.text, kind=kind, decision=decision, reply=reply)

    async def test_connection(self, provider: Provider) -> ConnectionReport:
        """Connectivity self-test: one discovery call, reported as text and as a snapshot."""
        profile = get_profile(provider)
        try:
            agent = await self.build_agent(provider)
        except MCPError as e:
            message = f"{profile.display_name} MCP connection failed: {e}"
        else:
            message = f"{profile.display_name} MCP connection successful! Found {len(agent.catalog)} tools"
        logger.info(message)
        return ConnectionReport(provider=provider, message=message, state=self._states[provider])

    async def initialize_providers(self) -> List[ConnectionReport]:
        """Test every provider in turn; used at session start."""
        return [await self.test_connection(profile.provider) for profile in PROFILES]

    def error_stats(self, provider: Provider) -> Dict[str, Any]:
        return self.error_handler.get_provider_error_stats(provider.value)

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.aclose()
        self._clients.clear()
