"""
Output parser: turn the agent's free text into one of the canonical response shapes.

normal / Comparison pass through unchanged once validated; everything else becomes a
fallback. This function never raises.
"""

import json
import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from app.schemas.query import ComparisonResponse, FallbackResponse, NormalResponse

logger = logging.getLogger(__name__)

PARSE_FAILURE_MESSAGE = "Failed to retrieve a valid response."
EMPTY_COMPARISON_MESSAGE = "The comparison did not retrieve enough details. Please try a different query."


def fallback(output: str) -> dict[str, Any]:
    return FallbackResponse(output=output).model_dump()


def _validates(model: type[BaseModel], parsed: dict) -> bool:
    try:
        model.model_validate(parsed)
    except ValidationError as e:
        logger.info("[output_parser] %s failed validation: %d errors", model.__name__, e.error_count())
        return False
    except RecursionError:
        logger.warning("[output_parser] %s validation hit the recursion limit", model.__name__)
        return False
    return True


def parse_agent_output(raw: Any) -> dict[str, Any]:
    """
    Map raw agent text to a response dict.

    - not JSON (including JSON nested too deeply to decode) → fallback with PARSE_FAILURE_MESSAGE
      (raw text is not echoed)
    - "Comparison" with a missing or empty ComparisonArray → fallback with EMPTY_COMPARISON_MESSAGE
    - valid "Comparison" / "normal" → the parsed object, unchanged
    - anything else (unknown type, wrong field types) → fallback echoing raw as-is
    """
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        logger.warning("[output_parser] parse failed: %s raw_sample=%r", type(e).__name__, str(raw)[:200])
        return fallback(PARSE_FAILURE_MESSAGE)

    kind = parsed.get("type") if isinstance(parsed, dict) else None

    if kind == "Comparison":
        items = parsed.get("ComparisonArray")
        if items is None or (isinstance(items, list) and not items):
            logger.info("[output_parser] comparison without items")
            return fallback(EMPTY_COMPARISON_MESSAGE)
        return parsed if _validates(ComparisonResponse, parsed) else fallback(raw)

    if kind == "normal":
        return parsed if _validates(NormalResponse, parsed) else fallback(raw)

    logger.info("[output_parser] unrecognized type=%r; echoing raw text", kind)
    return fallback(raw)
