"""
Agent service: run one conversation turn.

Responsibility: Validate the request, format the caller's history for the agent,
invoke the agent, normalize its answer and return it with the extended history.
Called by the API; no HTTP here. The service keeps no conversation state.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from app.agent.graph import ManifestoAgent
from app.agent.history import format_conversation_history
from app.agent.output_parser import parse_agent_output
from app.agent.tools import build_tool_registry
from app.core.errors import InvalidRequestError
from app.schemas.query import HumanTurn

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    """Normalized response plus chat_history extended by the human turn and that response."""

    response: dict[str, Any]
    chat_history: list[Any]


@lru_cache(maxsize=1)
def get_agent() -> ManifestoAgent:
    """Process-wide agent; safe to share because it carries no per-request state."""
    return ManifestoAgent(build_tool_registry())


def validate_request(user_input: Any, chat_history: Any) -> None:
    """Raise InvalidRequestError unless input is a non-blank string and chat_history a list."""
    if not isinstance(user_input, str) or not user_input.strip():
        raise InvalidRequestError("input must be a non-empty string")
    if not isinstance(chat_history, list):
        raise InvalidRequestError("chat_history must be a list")


async def run_turn(user_input: Any, chat_history: Any, agent: ManifestoAgent | None = None) -> TurnResult:
    """
    validate → format history → agent → parse output → append human turn and response.

    Agent and retrieval errors propagate; the caller's history is never modified.
    """
    validate_request(user_input, chat_history)
    logger.info("[agent_service:run_turn] IN  input=%r history_len=%d", user_input, len(chat_history))
    agent = agent or get_agent()

    formatted = format_conversation_history(chat_history)
    raw = await agent.invoke(formatted, user_input)
    logger.info("[agent_service:run_turn] raw_output=%r", raw[:500] if raw else raw)

    response = parse_agent_output(raw)
    updated = [*chat_history, HumanTurn(input=user_input).model_dump(), response]
    logger.info("[agent_service:run_turn] OUT response_type=%s history_len=%d", response.get("type"), len(updated))
    return TurnResult(response=response, chat_history=updated)
