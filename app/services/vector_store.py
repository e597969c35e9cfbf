"""
Vector store client: Milvus Cloud connection and query embeddings (HF Inference API).

Responsibility: Embed query text with the same model the manifesto collections were
indexed with, and fetch nearest-neighbour candidates (with their stored vectors) from
a named collection. Collections are populated outside this service.
"""

import logging
from functools import lru_cache
from typing import Any

import httpx

from app.core.config import (
    EMBED_API_TIMEOUT,
    HF_API_KEY,
    HF_EMBED_MODEL,
    MILVUS_TOKEN,
    MILVUS_URI,
    VECTOR_FIELD,
)

logger = logging.getLogger(__name__)

HF_API_URL_ROUTER = (
    "https://router.huggingface.co/hf-inference/models/"
    f"{HF_EMBED_MODEL}/pipeline/feature-extraction"
)
HF_API_URL_STANDARD = f"https://api-inference.huggingface.co/models/{HF_EMBED_MODEL}"


def normalize(vec: list[float]) -> list[float]:
    """Scale to unit length so dot product equals cosine similarity."""
    norm = sum(x * x for x in vec) ** 0.5
    if norm == 0:
        norm = 1.0
    return [x / norm for x in vec]


def embed_texts(texts: list[str]) -> list[list[float]]:
    """
    Embed texts using the Hugging Face Inference API.

    Tries the router endpoint first and falls back to the standard inference URL on 403.
    Returns normalized vectors. Raises ValueError/RuntimeError on auth or API failure.
    """
    if not texts:
        return []
    if not HF_API_KEY:
        raise ValueError(
            "HF_API_KEY must be set in .env. Get a token from https://huggingface.co/settings/tokens"
        )

    headers = {
        "Authorization": f"Bearer {HF_API_KEY}",
        "Content-Type": "application/json",
    }
    payload = {"inputs": texts, "options": {"wait_for_model": True}}
    api_urls = [HF_API_URL_ROUTER, HF_API_URL_STANDARD]
    response = None
    last_error: str | None = None

    with httpx.Client(timeout=EMBED_API_TIMEOUT) as client:
        for api_url in api_urls:
            try:
                response = client.post(api_url, json=payload, headers=headers)
                if response.status_code == 403 and api_url == HF_API_URL_ROUTER:
                    last_error = response.text
                    continue
                break
            except httpx.HTTPError as e:
                last_error = str(e)
                if api_url == api_urls[-1]:
                    raise
                continue

    if response is None or response.status_code != 200:
        msg = response.text if response is not None else last_error
        if response is not None and response.status_code == 503:
            raise RuntimeError(f"HF model is loading. Retry later. {msg}")
        if response is not None and response.status_code == 401:
            raise ValueError(
                "Invalid HF API key. Check HF_API_KEY at https://huggingface.co/settings/tokens"
            )
        raise RuntimeError(f"HF API error: {msg}")

    result = response.json()
    if isinstance(result, list) and result and isinstance(result[0], list):
        vectors = result
    else:
        vectors = [
            item if isinstance(item, list) else [item]
            for item in (result if isinstance(result, list) else [result])
        ]
    logger.info("[vector_store:embed_texts] OUT vectors=%d dim=%d", len(vectors), len(vectors[0]) if vectors else 0)
    return [normalize(v) for v in vectors]


@lru_cache(maxsize=1)
def get_milvus_client() -> Any:
    """
    Connect to Milvus Cloud and return a client. Cached per process; MilvusClient
    is shared by concurrent requests.
    """
    if not MILVUS_URI or not MILVUS_TOKEN:
        raise ValueError("MILVUS_URI and MILVUS_TOKEN must be set in .env")

    from pymilvus import MilvusClient

    client = MilvusClient(uri=MILVUS_URI, token=MILVUS_TOKEN)
    logger.info("Milvus connection established")
    return client


def search_candidates(collection: str, query_vec: list[float], limit: int) -> list[dict]:
    """
    Nearest-neighbour search in one collection. Returns candidates with id, text, score,
    metadata and the stored (normalized) vector, best first.
    """
    client = get_milvus_client()
    if not client.has_collection(collection):
        raise ValueError(f"Collection {collection!r} does not exist")

    results = client.search(
        collection_name=collection,
        data=[query_vec],
        limit=limit,
        output_fields=["text", "source", "chunk_id", VECTOR_FIELD],
        search_params={"metric_type": "COSINE"},
    )

    # results: list of list of hits (one list per query vector)
    hits = results[0] if results else []
    candidates = []
    for h in hits:
        # Milvus returns dict with "distance", "id", and optionally "entity" (output_fields)
        entity = h.get("entity") or h
        candidates.append({
            "id": h.get("id", entity.get("id")),
            "text": entity.get("text", ""),
            "score": float(h.get("distance", h.get("score", 0.0))),
            "vector": normalize(list(entity.get(VECTOR_FIELD) or [])),
            "metadata": {
                "source": entity.get("source", ""),
                "chunk_id": entity.get("chunk_id", 0),
                "collection": collection,
            },
        })
    logger.info("[vector_store:search_candidates] collection=%s OUT candidates=%d first_scores=%s",
                collection, len(candidates), [round(c["score"], 4) for c in candidates[:5]])
    return candidates
