"""Routes a natural-language query to a provider using an LLM classification."""

import logging
from typing import Optional, Sequence

from ..models.routing import RouterState, RoutingDecision
from .error_handler import LLMFailure, LLMTimeout
from .llm_client import CompletionService, LLMRequest, request_completion
from .providers import PROFILES, ProviderProfile

logger = logging.getLogger(__name__)

DEFAULT_LLM_TIMEOUT = 60.0
ROUTER_MAX_TOKENS = 4096

TIMEOUT_MESSAGE = "I took too long to process your request. Please try again with a simpler query."
FAILURE_MESSAGE = "I encountered an error processing your request. Please try again or rephrase your question."
EMPTY_REPLY_MESSAGE = "I couldn't understand your request. Please try rephrasing your question."


def build_routing_prompt(profiles: Sequence[ProviderProfile] = PROFILES) -> str:
    """System prompt asking the model to prefix provider requests with a directive."""
    lines = [
        "You are a routing orchestrator that decides which service to use for user requests.",
        "",
        "When users ask about:",
    ]
    for profile in profiles:
        lines.append(f"- {profile.display_name}: {profile.routing_topics} -> respond with '{profile.directive}'")
    lines.append("- General questions or greetings -> respond normally")
    lines.append("")
    example = profiles[0].directive if profiles else "USE_SERVICE_AGENT"
    lines.append(
        "For service-specific requests, start your response with the service directive "
        f"(e.g., '{example}: ') followed by the original query."
    )
    return "\n".join(lines)


class QueryRouter:
    """Classifies queries into a provider, a general answer, or a degraded apology.

    The LLM call is the only blocking step; it is bound by ``timeout`` seconds.
    """

    def __init__(
        self,
        llm: CompletionService,
        profiles: Sequence[ProviderProfile] = PROFILES,
        timeout: float = DEFAULT_LLM_TIMEOUT,
        model: Optional[str] = None,
    ):
        self.llm = llm
        self.profiles = tuple(profiles)
        self.timeout = timeout
        self.model = model
        self.system_prompt = build_routing_prompt(self.profiles)

    def find_directive(self, text: str) -> Optional[ProviderProfile]:
        """First profile (in table order) whose directive token appears in text."""
        for profile in self.profiles:
            if profile.directive in text:
                return profile
        return None

    async def classify(self, query: str) -> RoutingDecision:
        request = LLMRequest.chat(
            self.system_prompt,
            query,
            model=self.model,
            max_tokens=ROUTER_MAX_TOKENS,
        )
        try:
            reply = await request_completion(self.llm, request, self.timeout)
        except LLMTimeout:
            logger.warning(f"Routing timed out after {self.timeout:g}s")
            return RoutingDecision(state=RouterState.DEGRADED, text=TIMEOUT_MESSAGE)
        except LLMFailure as e:
            logger.error(f"Routing failed: {e}")
            return RoutingDecision(state=RouterState.DEGRADED, text=FAILURE_MESSAGE)

        if not reply.strip():
            logger.info("Routing returned an empty reply")
            return RoutingDecision(state=RouterState.DEGRADED, text=EMPTY_REPLY_MESSAGE)

        profile = self.find_directive(reply)
        if profile is None:
            logger.info("Query routed to general answer")
            return RoutingDecision(state=RouterState.GENERAL, text=reply)

        logger.info(f"Query routed to {profile.display_name}")
        return RoutingDecision(state=RouterState.ROUTED, text=reply, provider=profile.provider)
