"""
Chat history formatting: caller-stored turns → role/content messages for the agent.
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def _format_entry(entry: Any) -> dict[str, str] | None:
    if not isinstance(entry, dict):
        return None
    if entry.get("type") == "Comparison":
        items = json.dumps(entry.get("ComparisonArray"), indent=2, ensure_ascii=False, default=str)
        return {"role": "assistant", "content": f"Comparison: {items}"}
    if entry.get("type") == "normal":
        output = entry.get("output")
        return {"role": "assistant", "content": output} if isinstance(output, str) else None
    if entry.get("role") == "human":
        text = entry.get("input")
        return {"role": "human", "content": text} if isinstance(text, str) else None
    return None


def format_conversation_history(history: list[Any]) -> list[dict[str, str]]:
    """
    Map stored history to agent messages, one entry to at most one message.

    Comparison → assistant prose dump of its ComparisonArray; normal → assistant output;
    human turn → human input. Fallbacks and unrecognized entries are dropped.
    """
    messages = []
    for entry in history:
        msg = _format_entry(entry)
        if msg is not None:
            messages.append(msg)
    dropped = len(history) - len(messages)
    if dropped:
        logger.info("[history:format] dropped=%d of %d entries", dropped, len(history))
    return messages
