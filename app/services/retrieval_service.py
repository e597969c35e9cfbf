"""
Retrieval: per-manifesto semantic search with maximal marginal relevance (MMR).

Responsibility: Embed the query, pull a wide candidate pool from one Milvus collection,
and pick a relevant but non-redundant subset for the agent.
"""

import logging

from app.core.config import MMR_FETCH_K, MMR_LAMBDA, RETRIEVER_TOP_K
from app.core.errors import RetrievalUnavailableError
from app.services.vector_store import embed_texts, search_candidates

logger = logging.getLogger(__name__)


def _dot(a: list[float], b: list[float]) -> float:
    return sum(x * y for x, y in zip(a, b))


def maximal_marginal_relevance(
    query_vec: list[float],
    candidate_vecs: list[list[float]],
    lambda_mult: float = MMR_LAMBDA,
    k: int = RETRIEVER_TOP_K,
) -> list[int]:
    """
    Select up to k candidate indices, in selection order.

    The first pick is the candidate closest to the query. Each further pick maximizes
    lambda_mult * sim(query, d) - (1 - lambda_mult) * max(sim(d, s) for s already selected).
    Vectors are expected to be normalized (dot product == cosine similarity).
    """
    if not candidate_vecs or k <= 0:
        return []
    query_sims = [_dot(query_vec, v) for v in candidate_vecs]
    selected = [max(range(len(candidate_vecs)), key=lambda i: query_sims[i])]
    while len(selected) < min(k, len(candidate_vecs)):
        best_idx, best_score = -1, float("-inf")
        for i, vec in enumerate(candidate_vecs):
            if i in selected:
                continue
            redundancy = max(_dot(vec, candidate_vecs[j]) for j in selected)
            score = lambda_mult * query_sims[i] - (1 - lambda_mult) * redundancy
            if score > best_score:
                best_idx, best_score = i, score
        selected.append(best_idx)
    return selected


def search_collection(
    collection: str,
    query: str,
    k: int = RETRIEVER_TOP_K,
    fetch_k: int = MMR_FETCH_K,
    lambda_mult: float = MMR_LAMBDA,
) -> list[dict]:
    """
    Pipeline: embed query → fetch_k nearest candidates from Milvus → MMR down to k passages.

    Raises RetrievalUnavailableError when the embedding API or the collection cannot be
    reached. An empty list means the index answered but nothing matched.
    """
    logger.info("[retrieval:search_collection] IN  collection=%s query=%r k=%d fetch_k=%d lambda=%.2f",
                collection, query, k, fetch_k, lambda_mult)
    if not query or not query.strip():
        logger.info("[retrieval:search_collection] OUT empty query, returning []")
        return []

    try:
        query_vec = embed_texts([query.strip()])[0]
        candidates = search_candidates(collection, query_vec, fetch_k)
    except Exception as e:
        logger.warning("[retrieval:search_collection] collection=%s unavailable: %s", collection, e)
        raise RetrievalUnavailableError(f"Search in {collection!r} failed: {e}") from e

    indices = maximal_marginal_relevance(
        query_vec, [c["vector"] for c in candidates], lambda_mult=lambda_mult, k=k
    )
    passages = [
        {
            "id": candidates[i]["id"],
            "text": candidates[i]["text"],
            "score": candidates[i]["score"],
            "metadata": candidates[i]["metadata"],
        }
        for i in indices
    ]
    logger.info("[retrieval:search_collection] OUT collection=%s candidates=%d selected=%d chunk_ids=%s",
                collection, len(candidates), len(passages),
                [p["metadata"].get("chunk_id") for p in passages])
    return passages
