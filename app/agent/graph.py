"""
LangGraph agent: tool-calling loop over the manifesto search tools.

agent (model call) → tools (run every requested search) → agent → ... → END.
Only the final assistant text leaves this module; it is not trusted to be valid JSON.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, TypedDict

from langgraph.errors import GraphRecursionError
from langgraph.graph import END, StateGraph

from app.agent.llm import chat_with_tools, to_openai_messages
from app.agent.prompts import SYSTEM_PROMPT
from app.agent.tools import ToolRegistry, build_tool_registry
from app.core.config import AGENT_TIMEOUT, MAX_AGENTIC_ROUNDS
from app.core.errors import AgentInvocationFailedError, RetrievalUnavailableError

logger = logging.getLogger(__name__)

ChatFn = Callable[
    [list[dict[str, Any]], list[dict[str, Any]]],
    Awaitable[tuple[str | None, list[dict[str, Any]] | None]],
]


class AgentState(TypedDict):
    messages: list  # OpenAI chat messages, including tool calls and tool results
    pending_tool_calls: list  # tool calls requested by the last model step
    tools_used: list
    output: str


class ManifestoAgent:
    """
    Conversational agent bound to a system prompt and a tool registry.

    Holds no per-request state: every invoke() builds its own graph state, so one
    instance can serve concurrent turns.
    """

    def __init__(
        self,
        registry: ToolRegistry | None = None,
        chat: ChatFn | None = None,
        system_prompt: str = SYSTEM_PROMPT,
        max_rounds: int = MAX_AGENTIC_ROUNDS,
        timeout: float = AGENT_TIMEOUT,
    ) -> None:
        self.registry = registry or build_tool_registry()
        self.system_prompt = system_prompt
        self.max_rounds = max_rounds
        self.timeout = timeout
        # Each tool round is two super-steps (agent, tools), plus the final agent step.
        self.recursion_limit = 2 * max_rounds + 1
        self._chat = chat or chat_with_tools
        self._graph = self._build_graph()

    def _build_graph(self):
        graph = StateGraph(AgentState)
        graph.add_node("agent", self._agent_node)
        graph.add_node("tools", self._tools_node)
        graph.set_entry_point("agent")
        graph.add_conditional_edges("agent", self._route_after_agent)
        graph.add_edge("tools", "agent")
        return graph.compile()

    async def _agent_node(self, state: AgentState) -> dict:
        messages = list(state["messages"])
        content, tool_calls = await self._chat(messages, self.registry.definitions)
        if tool_calls:
            messages.append({
                "role": "assistant",
                "content": content or "",
                "tool_calls": [
                    {
                        "id": tc["id"],
                        "type": "function",
                        "function": {"name": tc["name"], "arguments": json.dumps(tc.get("arguments") or {})},
                    }
                    for tc in tool_calls
                ],
            })
            return {"messages": messages, "pending_tool_calls": tool_calls}
        messages.append({"role": "assistant", "content": content or ""})
        return {"messages": messages, "pending_tool_calls": [], "output": content or ""}

    async def _tools_node(self, state: AgentState) -> dict:
        calls = state["pending_tool_calls"]
        logger.info("[graph:tools] IN  tool_calls=%s", [tc.get("name") for tc in calls])
        results = await asyncio.gather(
            *(self.registry.call(tc.get("name", ""), tc.get("arguments")) for tc in calls)
        )
        messages = list(state["messages"])
        for tc, result in zip(calls, results):
            messages.append({"role": "tool", "tool_call_id": tc.get("id", ""), "content": result})
        return {
            "messages": messages,
            "pending_tool_calls": [],
            "tools_used": list(state["tools_used"]) + [tc.get("name", "") for tc in calls],
        }

    def _route_after_agent(self, state: AgentState) -> str:
        return "tools" if state.get("pending_tool_calls") else END

    async def invoke(self, chat_history: list[dict[str, str]], user_input: str) -> str:
        """
        Run the tool loop for one turn and return the model's final text ("" if none).

        chat_history: formatted {"role": "human"|"assistant", "content": str} messages.
        Raises AgentInvocationFailedError on model failure, step budget or timeout;
        RetrievalUnavailableError from a tool propagates unchanged.
        """
        logger.info("[graph:invoke] START input=%r history_len=%d", user_input, len(chat_history))
        initial: AgentState = {
            "messages": to_openai_messages(self.system_prompt, chat_history, user_input),
            "pending_tool_calls": [],
            "tools_used": [],
            "output": "",
        }
        try:
            final = await asyncio.wait_for(
                self._graph.ainvoke(initial, config={"recursion_limit": self.recursion_limit}),
                timeout=self.timeout,
            )
        except GraphRecursionError as e:
            logger.warning("[graph:invoke] step budget exceeded max_rounds=%d", self.max_rounds)
            raise AgentInvocationFailedError(
                f"Agent exceeded {self.max_rounds} tool-calling rounds"
            ) from e
        except asyncio.TimeoutError as e:
            logger.warning("[graph:invoke] timed out after %.1fs", self.timeout)
            raise AgentInvocationFailedError(f"Agent did not finish within {self.timeout:g}s") from e
        except (AgentInvocationFailedError, RetrievalUnavailableError):
            raise
        except Exception as e:
            logger.exception("[graph:invoke] agent loop failed")
            raise AgentInvocationFailedError(f"Agent invocation failed: {e}") from e
        output = final.get("output") or ""
        logger.info("[graph:invoke] END tools_used=%s output_len=%d", final.get("tools_used"), len(output))
        return output
