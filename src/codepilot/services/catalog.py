"""Per-session snapshot of the tools one provider advertises"""

from typing import Any, Iterable, Iterator, List, Optional

from ..models.tool import ToolDescriptor, ToolSuggestion

SUGGESTION_LIMIT = 5
SUGGESTION_DESCRIPTION_WIDTH = 80


class ToolCatalog:
    """Ordered, read-only list of tool descriptors for one provider.

    Order is the server's discovery order and doubles as the tie-break for
    equal relevance scores. Duplicate names are kept; lookups by name return
    the first occurrence.
    """

    def __init__(self, provider: str, tools: Iterable[ToolDescriptor] = ()):
        self.provider = provider
        self._tools = tuple(tools)

    @classmethod
    def from_wire(cls, provider: str, raw_tools: Iterable[Any]) -> "ToolCatalog":
        return cls(provider, (ToolDescriptor.from_wire(raw) for raw in raw_tools))

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __getitem__(self, index: int) -> ToolDescriptor:
        return self._tools[index]

    def __repr__(self) -> str:
        return f"ToolCatalog(provider={self.provider!r}, tools={len(self._tools)})"

    @property
    def tools(self) -> tuple[ToolDescriptor, ...]:
        return self._tools

    def names(self) -> List[str]:
        return [tool.name for tool in self._tools]

    def get(self, name: str) -> Optional[ToolDescriptor]:
        for tool in self._tools:
            if tool.name == name:
                return tool
        return None

    def mentioned_in(self, text: str) -> List[ToolDescriptor]:
        """Tools whose name or description appears verbatim (case-insensitive) in text."""
        text_lower = text.lower()
        mentioned = []
        for tool in self._tools:
            name_lower = tool.name.lower()
            desc_lower = tool.description.lower()
            if (name_lower and name_lower in text_lower) or (desc_lower and desc_lower in text_lower):
                mentioned.append(tool)
        return mentioned

    def suggestions(
        self,
        limit: int = SUGGESTION_LIMIT,
        width: int = SUGGESTION_DESCRIPTION_WIDTH,
    ) -> List[ToolSuggestion]:
        return [
            ToolSuggestion(name=tool.name, description=tool.description[:width])
            for tool in self._tools[:limit]
        ]

    def describe(self) -> str:
        """One ``- name: description`` line per tool, for prompts."""
        return "\n".join(f"- {tool.name}: {tool.description}" for tool in self._tools)
