"""Best-effort call arguments built from free text, without reading the tool schema."""

import copy
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Tuple

TITLE_MAX_CHARS = 50

Clock = Callable[[], datetime]
PayloadBuilder = Callable[[str, datetime], Dict[str, Any]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def derive_title(query: str) -> str:
    """Short title for create-style tools."""
    if "bug" in query:
        return "Bug Report"
    if "feature" in query:
        return "Feature Request"
    return query[:TITLE_MAX_CHARS]


def fixed(payload: Dict[str, Any]) -> PayloadBuilder:
    """Builder that always yields a copy of the same payload."""
    return lambda query, now: copy.deepcopy(payload)


def query_field(key: str) -> PayloadBuilder:
    """Builder that passes the raw query in a single field."""
    return lambda query, now: {key: query}


def titled(body_key: str) -> PayloadBuilder:
    """Builder for create-style tools: derived title plus the full query."""
    return lambda query, now: {"title": derive_title(query), body_key: query}


@dataclass(frozen=True)
class ArgumentRule:
    """Applies when the lowercased tool name contains every ``all_of`` substring
    and, if ``any_of`` is non-empty, at least one of those too."""

    build: PayloadBuilder
    all_of: Tuple[str, ...] = ()
    any_of: Tuple[str, ...] = ()

    def matches(self, tool_name_lower: str) -> bool:
        if not all(part in tool_name_lower for part in self.all_of):
            return False
        return not self.any_of or any(part in tool_name_lower for part in self.any_of)


class ArgumentSynthesizer:
    """First matching rule wins; a tool no rule matches gets ``{}``."""

    def __init__(self, rules: Iterable[ArgumentRule], clock: Clock = utc_now):
        self.rules = tuple(rules)
        self.clock = clock

    def synthesize(self, tool_name: str, query: str) -> Dict[str, Any]:
        name_lower = tool_name.lower()
        for rule in self.rules:
            if rule.matches(name_lower):
                return rule.build(query, self.clock())
        return {}
