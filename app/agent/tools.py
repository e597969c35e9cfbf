"""
Agent tools: one manifesto search tool per retriever, in OpenAI function-calling format.

Tools: NPP_Manifesto_Search, Ranil_Wickremesinghe_Manifesto_Search,
Sajith_Premadasa_Manifesto_Search. The registry puts no limit on how often the
agent calls them; the agent loop enforces its own budget.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable

from app.core.config import NPP_COLLECTION, RANIL_COLLECTION, SAJITH_COLLECTION
from app.services.retrieval_service import search_collection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetrieverDescriptor:
    """Static description of one manifesto search tool."""

    name: str
    description: str
    source_collection: str


MANIFESTO_RETRIEVERS: tuple[RetrieverDescriptor, ...] = (
    RetrieverDescriptor(
        name="NPP_Manifesto_Search",
        description="Search for information from the National People's Power (NPP) manifesto.",
        source_collection=NPP_COLLECTION,
    ),
    RetrieverDescriptor(
        name="Ranil_Wickremesinghe_Manifesto_Search",
        description="Search for information from Ranil Wickremesinghe's manifesto.",
        source_collection=RANIL_COLLECTION,
    ),
    RetrieverDescriptor(
        name="Sajith_Premadasa_Manifesto_Search",
        description="Search for information from Sajith Premadasa's manifesto.",
        source_collection=SAJITH_COLLECTION,
    ),
)


def format_passages(passages: list[dict]) -> str:
    """Render passages as text blocks for the model."""
    if not passages:
        return "No matching passages found."
    blocks = []
    for p in passages:
        meta = p.get("metadata") or {}
        text = p.get("text") or ""
        blocks.append(f"[source={meta.get('source', '')} chunk_id={meta.get('chunk_id', '')}]\n{text}")
    return "\n\n---\n\n".join(blocks)


class ToolRegistry:
    """Named, described search callables over a fixed set of retrievers. Immutable after construction."""

    def __init__(
        self,
        descriptors: tuple[RetrieverDescriptor, ...] = MANIFESTO_RETRIEVERS,
        search: Callable[[str, str], list[dict]] | None = None,
    ) -> None:
        names = [d.name for d in descriptors]
        if len(set(names)) != len(names):
            raise ValueError(f"Tool names must be distinct: {names}")
        self._descriptors = {d.name: d for d in descriptors}
        self._search = search or search_collection
        self.definitions: list[dict[str, Any]] = [
            {
                "type": "function",
                "function": {
                    "name": d.name,
                    "description": d.description,
                    "parameters": {
                        "type": "object",
                        "properties": {
                            "query": {
                                "type": "string",
                                "description": "Query to look up in the manifesto",
                            }
                        },
                        "required": ["query"],
                    },
                },
            }
            for d in descriptors
        ]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._descriptors)

    @property
    def descriptors(self) -> tuple[RetrieverDescriptor, ...]:
        return tuple(self._descriptors.values())

    def get(self, name: str) -> RetrieverDescriptor | None:
        return self._descriptors.get(name)

    async def search(self, name: str, query: str) -> list[dict]:
        """
        Run the named tool's search in a worker thread and return raw passages.
        Raises KeyError for an unknown tool; RetrievalUnavailableError propagates.
        """
        descriptor = self._descriptors[name]
        return await asyncio.to_thread(self._search, descriptor.source_collection, query)

    async def call(self, name: str, arguments: dict[str, Any] | None) -> str:
        """
        Execute a tool by name with the given arguments. Returns a string result for the LLM.
        """
        args = arguments or {}
        logger.info("[tools] call name=%r arguments=%r", name, args)
        if name not in self._descriptors:
            return f"Unknown tool: {name}"
        query = str(args.get("query") or "").strip()
        if not query:
            return "Error: query is required."
        passages = await self.search(name, query)
        logger.info("[tools] call name=%r OUT passages=%d", name, len(passages))
        return format_passages(passages)


def build_tool_registry() -> ToolRegistry:
    """Fresh registry over the three manifesto retrievers."""
    return ToolRegistry(MANIFESTO_RETRIEVERS)
