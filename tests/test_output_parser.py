"""
Unit tests for the agent output parser: parse_agent_output.
"""

import json
from unittest.mock import patch

from app.agent.output_parser import (
    EMPTY_COMPARISON_MESSAGE,
    PARSE_FAILURE_MESSAGE,
    parse_agent_output,
)
from app.schemas.query import (
    ComparisonResponse,
    NormalResponse,
)

COMPARISON = {
    "type": "Comparison",
    "title": "Comparison between NPP and Sajith Premadasa",
    "ComparisonArray": [
        {
            "name": "NPP",
            "pointArray": [{"pointTitle": "Education", "point": "Raise spending to 6% of GDP."}],
        },
        {"name": "Sajith Premadasa", "pointArray": []},
    ],
    "keyPoints": "Both prioritise education.",
}


class TestNormal:
    """normal answers pass through unchanged."""

    def test_normal_returned_unchanged(self) -> None:
        raw = '{"type":"normal","output":"The NPP manifesto proposes X."}'
        assert parse_agent_output(raw) == {"type": "normal", "output": "The NPP manifesto proposes X."}

    def test_extra_fields_preserved(self) -> None:
        raw = json.dumps({"type": "normal", "output": "Hi", "sources": ["NPP"]})
        assert parse_agent_output(raw) == {"type": "normal", "output": "Hi", "sources": ["NPP"]}

    def test_non_string_output_echoes_raw(self) -> None:
        raw = '{"type":"normal","output":42}'
        assert parse_agent_output(raw) == {"type": "fallback", "output": raw}

    def test_missing_output_echoes_raw(self) -> None:
        raw = '{"type":"normal"}'
        assert parse_agent_output(raw) == {"type": "fallback", "output": raw}


class TestComparison:
    """Comparison answers: identity when non-empty, semantic fallback when empty."""

    def test_valid_comparison_returned_unchanged(self) -> None:
        assert parse_agent_output(json.dumps(COMPARISON)) == COMPARISON

    def test_comparison_without_title_or_key_points_accepted(self) -> None:
        minimal = {"type": "Comparison", "ComparisonArray": [{"name": "NPP", "pointArray": []}]}
        assert parse_agent_output(json.dumps(minimal)) == minimal

    def test_empty_array_gives_semantic_fallback(self) -> None:
        result = parse_agent_output('{"type":"Comparison","ComparisonArray":[]}')
        assert result == {
            "type": "fallback",
            "output": "The comparison did not retrieve enough details. Please try a different query.",
        }

    def test_missing_array_gives_semantic_fallback(self) -> None:
        result = parse_agent_output('{"type":"Comparison","title":"x"}')
        assert result == {"type": "fallback", "output": EMPTY_COMPARISON_MESSAGE}

    def test_semantic_and_parse_messages_differ(self) -> None:
        assert EMPTY_COMPARISON_MESSAGE != PARSE_FAILURE_MESSAGE

    def test_array_of_wrong_type_echoes_raw(self) -> None:
        raw = '{"type":"Comparison","ComparisonArray":"NPP vs Ranil"}'
        assert parse_agent_output(raw) == {"type": "fallback", "output": raw}

    def test_malformed_subject_echoes_raw(self) -> None:
        raw = '{"type":"Comparison","ComparisonArray":[{"pointArray":[]}]}'
        assert parse_agent_output(raw) == {"type": "fallback", "output": raw}


class TestFallback:
    """Unparseable or unrecognized output."""

    def test_not_json_gives_parse_failure(self) -> None:
        assert parse_agent_output("not json at all") == {
            "type": "fallback",
            "output": "Failed to retrieve a valid response.",
        }

    def test_parse_failure_does_not_echo_raw(self) -> None:
        raw = "{type: 'normal', output: 'single quotes are not JSON'}"
        assert parse_agent_output(raw)["output"] == PARSE_FAILURE_MESSAGE

    def test_empty_and_none_give_parse_failure(self) -> None:
        assert parse_agent_output("")["output"] == PARSE_FAILURE_MESSAGE
        assert parse_agent_output(None)["output"] == PARSE_FAILURE_MESSAGE

    def test_unknown_type_echoes_raw_exactly(self) -> None:
        raw = '{"type": "summary",  "output": "text"}'
        assert parse_agent_output(raw) == {"type": "fallback", "output": raw}

    def test_missing_type_echoes_raw(self) -> None:
        raw = '{"output": "text"}'
        assert parse_agent_output(raw) == {"type": "fallback", "output": raw}

    def test_json_array_echoes_raw(self) -> None:
        raw = '["normal", "text"]'
        assert parse_agent_output(raw) == {"type": "fallback", "output": raw}

    def test_fallback_type_from_model_is_not_trusted(self) -> None:
        raw = '{"type": "fallback", "output": "x"}'
        assert parse_agent_output(raw) == {"type": "fallback", "output": raw}

    def test_deeply_nested_json_gives_parse_failure(self) -> None:
        raw = '{"type":"normal","output":"x","extra":' + "[" * 100000 + "]" * 100000 + "}"
        assert parse_agent_output(raw) == {"type": "fallback", "output": PARSE_FAILURE_MESSAGE}


class _TooDeepNormal(NormalResponse):
    @classmethod
    def model_validate(cls, *args, **kwargs):
        raise RecursionError("maximum recursion depth exceeded")


class _TooDeepComparison(ComparisonResponse):
    @classmethod
    def model_validate(cls, *args, **kwargs):
        raise RecursionError("maximum recursion depth exceeded")


class TestValidationRecursion:

    def test_normal_validation_recursion_echoes_raw(self) -> None:
        raw = '{"type": "normal", "output": "text"}'
        with patch("app.agent.output_parser.NormalResponse", _TooDeepNormal):
            assert parse_agent_output(raw) == {"type": "fallback", "output": raw}

    def test_comparison_validation_recursion_echoes_raw(self) -> None:
        raw = json.dumps(COMPARISON)
        with patch("app.agent.output_parser.ComparisonResponse", _TooDeepComparison):
            assert parse_agent_output(raw) == {"type": "fallback", "output": raw}
