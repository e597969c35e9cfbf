"""
Tests for the turn orchestrator (run_turn) with a fake agent.
"""

import asyncio
import copy
from unittest.mock import patch

import pytest

from app.agent.output_parser import PARSE_FAILURE_MESSAGE
from app.core.errors import AgentInvocationFailedError, InvalidRequestError, RetrievalUnavailableError
from app.services.agent_service import run_turn


class FakeAgent:
    """Returns a fixed raw text (or raises) and records what it was called with."""

    def __init__(self, raw: str = '{"type":"normal","output":"Hello! Ask me about a manifesto."}', error: Exception | None = None) -> None:
        self.raw = raw
        self.error = error
        self.calls: list[tuple[list, str]] = []

    async def invoke(self, chat_history, user_input):
        self.calls.append((chat_history, user_input))
        if self.error:
            raise self.error
        return self.raw


class TestRunTurn:

    def test_first_turn_appends_two_entries(self) -> None:
        agent = FakeAgent()
        result = asyncio.run(run_turn("Hello", [], agent=agent))
        assert result.response == {"type": "normal", "output": "Hello! Ask me about a manifesto."}
        assert result.chat_history == [{"role": "human", "input": "Hello"}, result.response]

    def test_existing_entries_kept_verbatim_and_caller_list_untouched(self) -> None:
        history = [
            {"role": "human", "input": "Compare education"},
            {"type": "fallback", "output": "Failed to retrieve a valid response."},
            {"unexpected": "entry"},
        ]
        snapshot = copy.deepcopy(history)
        result = asyncio.run(run_turn("Try again", history, agent=FakeAgent()))
        assert history == snapshot
        assert len(result.chat_history) == len(history) + 2
        assert all(a is b for a, b in zip(result.chat_history, history))
        assert result.chat_history[-2] == {"role": "human", "input": "Try again"}

    def test_agent_receives_formatted_history(self) -> None:
        agent = FakeAgent()
        history = [
            {"role": "human", "input": "Hi"},
            {"type": "normal", "output": "Hello"},
            {"type": "fallback", "output": "Failed to retrieve a valid response."},
        ]
        asyncio.run(run_turn("What about tax?", history, agent=agent))
        assert agent.calls == [(
            [{"role": "human", "content": "Hi"}, {"role": "assistant", "content": "Hello"}],
            "What about tax?",
        )]

    def test_malformed_agent_output_still_succeeds(self) -> None:
        result = asyncio.run(run_turn("Hello", [], agent=FakeAgent(raw="Sure! Here is the answer...")))
        assert result.response == {"type": "fallback", "output": PARSE_FAILURE_MESSAGE}
        assert result.chat_history[-1] == result.response

    def test_uses_shared_agent_by_default(self) -> None:
        agent = FakeAgent()
        with patch("app.services.agent_service.get_agent", return_value=agent) as mock_get:
            asyncio.run(run_turn("Hello", []))
        mock_get.assert_called_once_with()
        assert len(agent.calls) == 1


class TestInvalidRequest:

    @pytest.mark.parametrize(
        "user_input, chat_history",
        [
            ("Hello", "not a list"),
            ("Hello", None),
            ("Hello", {"role": "human"}),
            ("", []),
            ("   ", []),
            (None, []),
            (42, []),
        ],
    )
    def test_rejected_before_agent_is_built_or_called(self, user_input, chat_history) -> None:
        agent = FakeAgent()
        with patch("app.services.agent_service.get_agent") as mock_get:
            with pytest.raises(InvalidRequestError):
                asyncio.run(run_turn(user_input, chat_history, agent=agent))
        mock_get.assert_not_called()
        assert agent.calls == []


class TestFailures:

    @pytest.mark.parametrize(
        "error",
        [AgentInvocationFailedError("model down"), RetrievalUnavailableError("index down")],
    )
    def test_errors_propagate(self, error) -> None:
        history = [{"role": "human", "input": "a"}]
        with pytest.raises(type(error)):
            asyncio.run(run_turn("Hello", history, agent=FakeAgent(error=error)))
        assert history == [{"role": "human", "input": "a"}]
