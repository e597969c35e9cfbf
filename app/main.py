# Run from project root: uvicorn app.main:app --reload

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import INVALID_REQUEST_ERROR, router
from app.core.config import CORS_ORIGINS
from app.mcp.server import mcp_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


app = FastAPI(title="Manifesto Agent Backend")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)
app.include_router(mcp_router, prefix="/mcp")


@app.exception_handler(RequestValidationError)
async def query_body_error_handler(request: Request, exc: RequestValidationError):
    # /query keeps its own error body even when the JSON itself is unreadable
    if request.url.path == "/query":
        logger.info("[main] /query body rejected: %d errors", len(exc.errors()))
        return JSONResponse(status_code=400, content={"error": INVALID_REQUEST_ERROR})
    return await request_validation_exception_handler(request, exc)
