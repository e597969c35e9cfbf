"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Milvus Cloud (from env)
MILVUS_URI: str = os.getenv("MILVUS_URI", "").strip()
MILVUS_TOKEN: str = os.getenv("MILVUS_TOKEN", "").strip()
VECTOR_FIELD: str = "vector"

# Hugging Face (query embeddings; must match the model the collections were indexed with)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_EMBED_MODEL: str = (
    os.getenv("HF_EMBED_MODEL", "sentence-transformers/all-MiniLM-L6-v2").strip()
    or "sentence-transformers/all-MiniLM-L6-v2"
)

# One collection per manifesto
NPP_COLLECTION: str = os.getenv("NPP_COLLECTION", "embeddingsNPP").strip() or "embeddingsNPP"
RANIL_COLLECTION: str = os.getenv("RANIL_COLLECTION", "embeddingsRanil").strip() or "embeddingsRanil"
SAJITH_COLLECTION: str = os.getenv("SAJITH_COLLECTION", "embeddingsSajith").strip() or "embeddingsSajith"

# Retrieval: MMR over a larger candidate pool (lambda 0 = max diversity, 1 = max relevance)
RETRIEVER_TOP_K: int = 4
MMR_FETCH_K: int = 50
MMR_LAMBDA: float = 0.2

# API timeouts (seconds)
EMBED_API_TIMEOUT: float = 30.0
LLM_API_TIMEOUT: float = 60.0

# OpenAI (agent LLM)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = os.getenv("OPENAI_LLM_MODEL", "gpt-4o").strip() or "gpt-4o"
AGENT_TEMPERATURE: float = 0.2
AGENT_MAX_TOKENS: int = 1500

# Agent budget: tool-calling rounds per turn and wall-clock limit for the whole loop
MAX_AGENTIC_ROUNDS: int = int(os.getenv("MAX_AGENTIC_ROUNDS", "8"))
AGENT_TIMEOUT: float = float(os.getenv("AGENT_TIMEOUT", "120"))

# Frontend origins allowed by CORS (comma-separated)
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3001").split(",") if o.strip()
]
