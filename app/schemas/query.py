"""Schemas for the query endpoint and the canonical response shapes stored in chat history."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class HumanTurn(BaseModel):
    """A user message as stored in chat_history (note: 'input', not 'output')."""

    role: Literal["human"] = "human"
    input: str


class NormalResponse(BaseModel):
    """Plain textual answer."""

    model_config = ConfigDict(extra="allow")

    type: Literal["normal"]
    output: StrictStr


class ComparisonPoint(BaseModel):
    model_config = ConfigDict(extra="allow")

    pointTitle: StrictStr
    point: StrictStr


class ComparisonSubject(BaseModel):
    """One manifesto's side of a comparison. pointArray may be empty."""

    model_config = ConfigDict(extra="allow")

    name: StrictStr
    pointArray: list[ComparisonPoint] = Field(default_factory=list)


class ComparisonResponse(BaseModel):
    """Side-by-side comparison of two or more manifestos."""

    model_config = ConfigDict(extra="allow")

    type: Literal["Comparison"]
    title: StrictStr = ""
    ComparisonArray: list[ComparisonSubject] = Field(..., min_length=1)
    keyPoints: StrictStr = ""


class FallbackResponse(BaseModel):
    """Produced only by the output parser when the agent's text cannot be used as-is."""

    type: Literal["fallback"] = "fallback"
    output: str


class QueryRequest(BaseModel):
    """
    Request body for POST /query. chat_history is owned by the caller and sent in full on every turn.

    Fields are validated by the turn orchestrator (400 on bad input), not by pydantic.
    """

    input: Any = Field(None, description="User question for the agent.")
    chat_history: Any = Field(None, description="Previous turns as returned by the last /query call ([] on the first turn).")


class QueryResponse(BaseModel):
    """Response for POST /query."""

    response: dict[str, Any] = Field(..., description="Normalized answer: normal, Comparison or fallback.")
    chat_history: list[Any] = Field(..., description="chat_history extended with the human turn and the response.")
