"""Retrieval service - fuse vector and keyword search, then rerank."""

import logging

from ..models.chunk import Chunk
from ..protocols.embedder import EmbedderProtocol
from ..protocols.reranker import RerankerProtocol
from ..protocols.vector_store import VectorStoreProtocol
from .query_planner import QueryPlanner

logger = logging.getLogger(__name__)


def merge_results(
    vector_chunks: list[Chunk], keyword_chunks: list[Chunk], limit: int
) -> list[Chunk]:
    """Vector results in order, then unseen keyword results until limit."""
    merged = list(vector_chunks)
    seen = {c.id for c in merged}
    for chunk in keyword_chunks:
        if len(merged) >= limit:
            break
        if chunk.id not in seen:
            merged.append(chunk)
            seen.add(chunk.id)
    return merged


class RetrievalService:
    """Multi-stage retrieval: expand, search twice, merge, rerank, truncate."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        vector_store: VectorStoreProtocol,
        planner: QueryPlanner,
        reranker: RerankerProtocol,
        vector_top_k: int = 20,
        keyword_top_k: int = 15,
        merge_limit: int = 30,
        final_top_k: int = 20,
    ):
        """Initialize retrieval service.

        Args:
            embedder: Embedding service.
            vector_store: Vector store.
            planner: Query expansion and keyword search.
            reranker: Reranking service.
            vector_top_k: Vector search results to keep.
            keyword_top_k: Keyword search results to keep.
            merge_limit: Cap on the merged candidate set.
            final_top_k: Results returned after reranking.
        """
        self._embedder = embedder
        self._vector_store = vector_store
        self._planner = planner
        self._reranker = reranker
        self._vector_top_k = vector_top_k
        self._keyword_top_k = keyword_top_k
        self._merge_limit = merge_limit
        self._final_top_k = final_top_k

    def retrieve(self, question: str) -> list[Chunk]:
        """Ranked chunks for question; an empty list means nothing matched.

        Args:
            question: Original user question.

        Returns:
            Up to final_top_k chunks, most relevant first.
        """
        expanded = self._planner.expand(question)
        query_vector = self._embedder.embed(expanded)
        vector_chunks = self._vector_store.search(query_vector, self._vector_top_k)

        keywords = self._planner.extract_keywords(question)
        keyword_chunks = self._planner.keyword_search(
            keywords, self._vector_store.all_chunks()
        )[: self._keyword_top_k]

        if not vector_chunks and not keyword_chunks:
            logger.info(f"Search: nothing found for '{question[:50]}'")
            return []

        merged = merge_results(vector_chunks, keyword_chunks, self._merge_limit)
        reranked = self._reranker.rerank(question, merged)
        results = reranked[: self._final_top_k]

        logger.info(
            f"Search: vector={len(vector_chunks)} keyword={len(keyword_chunks)} "
            f"merged={len(merged)} returned={len(results)} for '{question[:50]}'"
        )
        return results
