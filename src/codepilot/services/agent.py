"""Provider agent: selects and executes one remote tool for a query"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models.tool import ToolDescriptor, ToolSuggestion
from .arguments import ArgumentSynthesizer
from .catalog import SUGGESTION_LIMIT, ToolCatalog
from .error_handler import ErrorHandler, LLMFailure, LLMTimeout, MCPError, NoMatchingTool
from .llm_client import CompletionService, LLMRequest, request_completion
from .mcp_client import McpHttpClient
from .providers import ProviderProfile
from .router import DEFAULT_LLM_TIMEOUT, FAILURE_MESSAGE, TIMEOUT_MESSAGE
from .scoring import RelevanceScorer

logger = logging.getLogger(__name__)

AGENT_TEMPERATURE = 0.1
AGENT_MAX_TOKENS = 2048


class ExecutionStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    NO_MATCH = "no_match"


@dataclass
class ExecutionResult:
    """Outcome of selecting and invoking a tool, already rendered as text."""
    status: ExecutionStatus
    text: str
    tool_name: Optional[str] = None
    arguments: Dict[str, Any] = field(default_factory=dict)
    result: Any = None
    error: Optional[str] = None
    suggestions: List[ToolSuggestion] = field(default_factory=list)


@dataclass
class AgentReply:
    """Final agent answer; ``execution`` is None when the LLM step degraded."""
    text: str
    analysis: Optional[str] = None
    execution: Optional[ExecutionResult] = None


def render_result(result: Any) -> str:
    try:
        return json.dumps(result, ensure_ascii=False, sort_keys=True)
    except (TypeError, ValueError):
        return repr(result)


class ProviderAgent:
    """One provider's catalog, client, scorer and synthesizer behind a single query call."""

    def __init__(
        self,
        profile: ProviderProfile,
        client: McpHttpClient,
        catalog: ToolCatalog,
        llm: CompletionService,
        llm_timeout: float = DEFAULT_LLM_TIMEOUT,
        model: Optional[str] = None,
        scorer: Optional[RelevanceScorer] = None,
        synthesizer: Optional[ArgumentSynthesizer] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.profile = profile
        self.client = client
        self.catalog = catalog
        self.llm = llm
        self.llm_timeout = llm_timeout
        self.model = model
        self.scorer = scorer or RelevanceScorer(profile.concepts)
        self.synthesizer = synthesizer or ArgumentSynthesizer(profile.argument_rules)
        self.error_handler = error_handler

    @classmethod
    async def create(
        cls,
        profile: ProviderProfile,
        client: McpHttpClient,
        llm: CompletionService,
        **kwargs: Any,
    ) -> "ProviderAgent":
        """Discover the provider's tools and build an agent around a fresh catalog."""
        tools = await client.discover_tools()
        catalog = ToolCatalog(profile.key, tools)
        logger.info(f"{profile.display_name} agent initialized with {len(catalog)} tools")
        return cls(profile, client, catalog, llm, **kwargs)

    @property
    def system_prompt(self) -> str:
        name = self.profile.display_name
        examples = "\n".join(f"- '{example}'" for example in self.profile.example_responses)
        return (
            f"You are a {name} agent. You can ONLY use these {name} MCP tools:\n\n"
            f"{self.catalog.describe()}\n\n"
            "CRITICAL: You are NOT allowed to use any other tools. You can ONLY mention and use "
            "the tools listed above.\n\n"
            "When a user asks you something:\n"
            "1. Look at the list of tools above\n"
            "2. Find the most appropriate tool for their request\n"
            "3. Mention the exact tool name you would use\n"
            "4. Explain why you chose that tool\n\n"
            f"Example responses:\n{examples}\n\n"
            "If no tool matches the request, say: 'I don't have a tool for that request. "
            "Available tools are: [list tools]'\n\n"
            "Remember: ONLY use tools from the list above. Never use any other tools."
        )

    def get_available_operations(self) -> List[str]:
        return self.catalog.names()

    async def process_query(self, query: str) -> AgentReply:
        """Ask the LLM which tool fits, then execute the best candidate."""
        request = LLMRequest.chat(
            self.system_prompt,
            query,
            model=self.model,
            temperature=AGENT_TEMPERATURE,
            max_tokens=AGENT_MAX_TOKENS,
        )
        try:
            analysis = await request_completion(self.llm, request, self.llm_timeout)
        except LLMTimeout:
            logger.warning(f"{self.profile.display_name} agent LLM call timed out")
            return AgentReply(text=TIMEOUT_MESSAGE)
        except LLMFailure as e:
            logger.error(f"{self.profile.display_name} agent LLM call failed: {e}")
            return AgentReply(text=FAILURE_MESSAGE)

        if not analysis.strip():
            return AgentReply(text=self.profile.empty_reply_message)

        execution = await self.execute_with_guidance(query, analysis)
        text = f"LLM Analysis: {analysis}\n\n{self.profile.display_name} Operation: {execution.text}"
        return AgentReply(text=text, analysis=analysis, execution=execution)

    async def execute_with_guidance(self, query: str, guidance: str) -> ExecutionResult:
        """Prefer a tool the guidance mentions; otherwise fall back to plain scoring."""
        mentioned = self.scorer.select_mentioned(query, guidance, self.catalog)
        if mentioned is None:
            logger.debug(f"No {self.profile.display_name} tool mentioned in guidance, scoring query")
            return await self.execute_best_match(query)

        logger.info(f"Guidance selected {mentioned.tool.name} (score {mentioned.score:.2f})")
        return await self.execute_tool(mentioned.tool, query)

    async def execute_best_match(self, query: str) -> ExecutionResult:
        selection = self.scorer.select(query, self.catalog)
        try:
            candidate = selection.require()
        except NoMatchingTool as e:
            logger.info(f"No relevant {self.profile.display_name} tool for query: {query!r}")
            listing = "\n".join(suggestion.render() for suggestion in e.suggestions)
            text = (
                f"No relevant {self.profile.display_name} tool found for your query: '{query}'\n\n"
                f"Available tools (showing top {SUGGESTION_LIMIT}):\n{listing}"
            )
            return ExecutionResult(status=ExecutionStatus.NO_MATCH, text=text, suggestions=e.suggestions)

        logger.info(f"Scoring selected {candidate.tool.name} (score {candidate.score:.2f})")
        return await self.execute_tool(candidate.tool, query)

    async def execute_tool(self, tool: ToolDescriptor, query: str) -> ExecutionResult:
        """Invoke a tool; failures are reported in the result rather than raised."""
        arguments = self.synthesizer.synthesize(tool.name, query)
        try:
            result = await self.client.invoke_tool(tool.name, arguments)
        except MCPError as e:
            if self.error_handler:
                self.error_handler.handle_error(self.profile.key, e, f"invoke_tool:{tool.name}")
            return ExecutionResult(
                status=ExecutionStatus.FAILED,
                text=f"Failed to execute {tool.name}: {e}",
                tool_name=tool.name,
                arguments=arguments,
                error=str(e),
            )

        return ExecutionResult(
            status=ExecutionStatus.SUCCESS,
            text=f"Successfully executed {tool.name}: {render_result(result)}",
            tool_name=tool.name,
            arguments=arguments,
            result=result,
        )

    async def test_connection(self) -> str:
        try:
            tools = await self.client.discover_tools()
        except MCPError as e:
            return f"{self.profile.display_name} MCP connection failed: {e}"
        return f"{self.profile.display_name} MCP connection successful! Found {len(tools)} tools"
