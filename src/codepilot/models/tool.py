# Tool domain models
# Descriptors discovered from providers and the scoring results built on them

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..services.error_handler import NoMatchingTool

UNKNOWN_TOOL_NAME = "unknown"
MISSING_DESCRIPTION = "No description"


class ToolDescriptor(BaseModel):
    """A remotely invocable operation as advertised by a provider's tools/list."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Tool name, unique within one catalog")
    description: str = Field(..., description="Tool description for LLM consumption")
    input_schema: Any = Field(
        default=None,
        alias="inputSchema",
        description="JSON Schema for tool inputs, passed through unvalidated",
    )

    @classmethod
    def from_wire(cls, raw: Any) -> "ToolDescriptor":
        """Build a descriptor from one element of a ``result.tools`` array.

        Providers are not trusted to send well-formed entries: a missing or
        non-string name becomes ``"unknown"`` and a missing or non-string
        description becomes ``"No description"``.
        """
        data = raw if isinstance(raw, dict) else {}
        name = data.get("name")
        description = data.get("description")
        return cls(
            name=name if isinstance(name, str) else UNKNOWN_TOOL_NAME,
            description=description if isinstance(description, str) else MISSING_DESCRIPTION,
            input_schema=data.get("inputSchema"),
        )


class ScoredCandidate(BaseModel):
    """A catalog entry paired with its relevance score for one query."""

    model_config = ConfigDict(frozen=True)

    tool: ToolDescriptor
    score: float = Field(..., ge=0.0, description="Accumulated relevance score")


class ToolSuggestion(BaseModel):
    """Short catalog listing shown when nothing matched a query."""

    name: str
    description: str

    def render(self) -> str:
        return f"- {self.name}: {self.description}"


class ToolSelection(BaseModel):
    """Outcome of ranking a catalog against a query."""

    query: str
    ranking: list[ScoredCandidate] = Field(default_factory=list)
    suggestions: list[ToolSuggestion] = Field(default_factory=list)

    @property
    def selected(self) -> ScoredCandidate | None:
        if self.ranking and self.ranking[0].score > 0:
            return self.ranking[0]
        return None

    @property
    def matched(self) -> bool:
        return self.selected is not None

    def require(self) -> ScoredCandidate:
        """Return the selected candidate or raise NoMatchingTool with suggestions."""
        selected = self.selected
        if selected is None:
            raise NoMatchingTool(self.query, self.suggestions)
        return selected
