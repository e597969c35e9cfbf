"""
Minimal MCP-style tool server: exposes the manifesto search tools through a
standardized HTTP interface so external agents can call the same retrieval
the built-in agent uses.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from app.agent.tools import build_tool_registry
from app.core.errors import RetrievalUnavailableError

logger = logging.getLogger(__name__)

mcp_router = APIRouter(tags=["mcp"])


class SearchManifestoRequest(BaseModel):
    """Request body for a manifesto search tool."""
    query: str = ""


@mcp_router.get(
    "/tools",
    summary="MCP tool discovery",
    description="List the manifesto search tools with their input schema.",
)
def mcp_list_tools() -> dict[str, list[dict[str, Any]]]:
    registry = build_tool_registry()
    return {
        "tools": [
            {
                "name": d.name,
                "description": d.description,
                "input_schema": {"query": "string"},
            }
            for d in registry.descriptors
        ]
    }


@mcp_router.post(
    "/tools/{name}",
    summary="MCP tool: manifesto search",
    description="Run one manifesto search tool. 404 for an unknown tool, 503 when the index is unreachable.",
)
async def mcp_call_tool(name: str, body: SearchManifestoRequest) -> dict[str, list[dict[str, Any]]]:
    """Search the named manifesto. Each result includes id, text, source and score."""
    logger.info("MCP tool called: %s", name)
    registry = build_tool_registry()
    if registry.get(name) is None:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")
    query = (body.query or "").strip()
    if not query:
        return {"results": []}
    try:
        passages = await registry.search(name, query)
    except RetrievalUnavailableError as e:
        logger.warning("MCP tool %s failed: %s", name, e.message)
        raise HTTPException(status_code=503, detail="Manifesto search is unavailable") from e
    results = [
        {
            "id": p.get("id"),
            "text": p.get("text", ""),
            "source": (p.get("metadata") or {}).get("source", ""),
            "score": p.get("score"),
        }
        for p in passages
    ]
    return {"results": results}
