# Tool relevance scoring
# Deterministic keyword scoring of a tool catalog against free text

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..models.tool import ScoredCandidate, ToolDescriptor, ToolSelection
from .catalog import SUGGESTION_LIMIT, ToolCatalog

KEYWORD_MATCH_FACTOR = 0.7
NAME_TOKEN_BOOST = 0.5
DESCRIPTION_TOKEN_BOOST = 0.2


@dataclass(frozen=True)
class ConceptRule:
    """A concept, the query keywords that trigger it, and its weight."""

    concept: str
    keywords: tuple[str, ...]
    weight: float


# Verbs shared by every provider; providers append their domain nouns
COMMON_CONCEPTS: tuple[ConceptRule, ...] = (
    ConceptRule("list", ("list", "show", "get", "fetch", "display"), 1.0),
    ConceptRule("create", ("create", "new", "add", "make"), 1.0),
    ConceptRule("update", ("update", "modify", "change", "edit"), 1.0),
    ConceptRule("delete", ("delete", "remove", "destroy"), 1.0),
)


class RelevanceScorer:
    """Ranks tools for a query using a fixed concept table.

    Scores only ever grow: every matching concept, keyword and query token
    adds to the total, so a tool matching more of them never ranks below an
    otherwise identical tool matching fewer.
    """

    def __init__(self, concepts: Iterable[ConceptRule] = COMMON_CONCEPTS) -> None:
        self.concepts: tuple[ConceptRule, ...] = tuple(concepts)

    def score(self, query: str, tool: ToolDescriptor) -> float:
        """Relevance of one tool to a query; 0.0 means no overlap at all."""
        query_lower = query.lower()
        name_lower = tool.name.lower()
        desc_lower = tool.description.lower()
        score = 0.0

        for rule in self.concepts:
            for keyword in rule.keywords:
                if keyword not in query_lower:
                    continue
                if rule.concept in name_lower or rule.concept in desc_lower:
                    score += rule.weight
                if keyword in name_lower or keyword in desc_lower:
                    score += rule.weight * KEYWORD_MATCH_FACTOR

        for word in query_lower.split():
            if word in name_lower:
                score += NAME_TOKEN_BOOST
            if word in desc_lower:
                score += DESCRIPTION_TOKEN_BOOST

        return score

    def rank(self, query: str, tools: Iterable[ToolDescriptor]) -> list[ScoredCandidate]:
        """All tools sorted by descending score; equal scores keep catalog order."""
        candidates = [ScoredCandidate(tool=tool, score=self.score(query, tool)) for tool in tools]
        # sorted() is stable, including with reverse=True
        return sorted(candidates, key=lambda c: c.score, reverse=True)

    def select(
        self,
        query: str,
        catalog: ToolCatalog,
        suggestion_limit: int = SUGGESTION_LIMIT,
    ) -> ToolSelection:
        ranking = self.rank(query, catalog)
        suggestions = [] if ranking and ranking[0].score > 0 else catalog.suggestions(suggestion_limit)
        return ToolSelection(query=query, ranking=ranking, suggestions=suggestions)

    def select_mentioned(
        self,
        query: str,
        guidance: str,
        catalog: ToolCatalog,
    ) -> Optional[ScoredCandidate]:
        """Best-scoring tool among those the guidance text mentions by name or description.

        Mentioned tools that score 0.0 against the query are ignored. Ties go
        to the earlier catalog entry.
        """
        best: Optional[ScoredCandidate] = None
        for tool in catalog.mentioned_in(guidance):
            score = self.score(query, tool)
            if score > (best.score if best is not None else 0.0):
                best = ScoredCandidate(tool=tool, score=score)
        return best


def with_domain_concepts(domain: Sequence[ConceptRule]) -> tuple[ConceptRule, ...]:
    """Common verb concepts followed by a provider's own concepts."""
    return COMMON_CONCEPTS + tuple(domain)
