"""
API route aggregator: register endpoints; no logic — only delegate to services.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from app.agent.tools import MANIFESTO_RETRIEVERS
from app.core.errors import InvalidRequestError
from app.schemas.query import QueryRequest, QueryResponse
from app.services.agent_service import run_turn

logger = logging.getLogger(__name__)
router = APIRouter()

INVALID_REQUEST_ERROR = "Input and chat history are required"
PROCESSING_ERROR = "An error occurred while processing the query"


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Manifesto agent backend running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


@router.get("/sources", tags=["system"], summary="List the searchable manifestos")
def get_sources() -> dict:
    """Return one entry per manifesto search tool the agent can use."""
    return {
        "sources": [
            {"name": d.name, "description": d.description, "collection": d.source_collection}
            for d in MANIFESTO_RETRIEVERS
        ]
    }


# --- Query ---

@router.post(
    "/query",
    response_model=QueryResponse,
    tags=["query"],
    summary="Ask the manifesto agent",
    description="Send input and the full chat_history; receive the normalized response and the extended chat_history. 400 on invalid input, 500 on agent or retrieval failure.",
    responses={400: {"description": INVALID_REQUEST_ERROR}, 500: {"description": PROCESSING_ERROR}},
)
async def post_query(payload: Any = Body(None)):
    body = QueryRequest.model_validate(payload) if isinstance(payload, dict) else QueryRequest()
    logger.info("[api:post_query] IN  input=%r", body.input)
    try:
        result = await run_turn(body.input, body.chat_history)
    except InvalidRequestError as e:
        logger.info("[api:post_query] rejected: %s", e.message)
        return JSONResponse(status_code=400, content={"error": INVALID_REQUEST_ERROR})
    except Exception:
        logger.exception("Error processing query")
        return JSONResponse(status_code=500, content={"error": PROCESSING_ERROR})
    logger.info("[api:post_query] OUT response_type=%s", result.response.get("type"))
    return QueryResponse(response=result.response, chat_history=result.chat_history)
