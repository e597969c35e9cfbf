"""
Agent LLM: OpenAI chat completions with function calling (async).
"""

import json
import logging
from typing import Any

from openai import AsyncOpenAI

from app.core.config import (
    AGENT_MAX_TOKENS,
    AGENT_TEMPERATURE,
    LLM_API_TIMEOUT,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)
from app.core.errors import AgentInvocationFailedError

logger = logging.getLogger(__name__)

# History roles ("human" | "assistant") → OpenAI chat roles
_ROLE_MAP = {"human": "user", "assistant": "assistant"}


def to_openai_messages(system_prompt: str, history: list[dict[str, str]], user_input: str) -> list[dict[str, Any]]:
    """System message, then formatted history, then the new user input."""
    messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    for m in history:
        role = _ROLE_MAP.get(m.get("role", ""))
        if role:
            messages.append({"role": role, "content": m.get("content", "")})
    messages.append({"role": "user", "content": user_input})
    return messages


def _parse_tool_calls(raw_tool_calls: list[Any]) -> list[dict[str, Any]]:
    tool_calls = []
    for tc in raw_tool_calls:
        fn = getattr(tc, "function", None)
        if not fn:
            continue
        fargs = getattr(fn, "arguments", None) or "{}"
        try:
            args = json.loads(fargs) if isinstance(fargs, str) else fargs
        except json.JSONDecodeError:
            args = {}
        tool_calls.append({
            "id": getattr(tc, "id", None) or "",
            "name": getattr(fn, "name", None) or "",
            "arguments": args if isinstance(args, dict) else {},
        })
    return tool_calls


async def chat_with_tools(
    messages: list[dict[str, Any]],
    tools: list[dict[str, Any]],
    max_tokens: int = AGENT_MAX_TOKENS,
) -> tuple[str | None, list[dict[str, Any]] | None]:
    """
    Call OpenAI chat with tools. Used for each step of the agent loop.
    Returns (content, tool_calls). If tool_calls is non-empty, caller should execute
    them and call again with tool results; if content is set and no tool_calls, that's the final answer.
    Raises AgentInvocationFailedError when OPENAI_API_KEY is not set; openai errors propagate.
    """
    if not OPENAI_API_KEY:
        raise AgentInvocationFailedError("OPENAI_API_KEY is not set")
    logger.info("[llm:chat_with_tools] IN  messages=%d tools=%d", len(messages), len(tools))
    async with AsyncOpenAI(api_key=OPENAI_API_KEY, timeout=LLM_API_TIMEOUT) as client:
        response = await client.chat.completions.create(
            model=OPENAI_LLM_MODEL,
            messages=messages,
            tools=tools,
            temperature=AGENT_TEMPERATURE,
            max_tokens=max_tokens,
        )
    msg = response.choices[0].message if response.choices else None
    if not msg:
        return None, None
    content = (getattr(msg, "content", None) or "").strip() or None
    tool_calls = _parse_tool_calls(getattr(msg, "tool_calls", None) or [])
    if tool_calls:
        logger.info("[llm:chat_with_tools] OUT tool_calls=%s", [t["name"] for t in tool_calls])
    if content:
        logger.info("[llm:chat_with_tools] OUT content_len=%d", len(content))
    return content, tool_calls if tool_calls else None
