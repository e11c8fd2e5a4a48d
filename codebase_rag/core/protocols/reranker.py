"""Reranker protocol for dependency injection."""
from typing import Protocol, runtime_checkable

from ..models.chunk import Chunk


@runtime_checkable
class RerankerProtocol(Protocol):
    """Protocol for reranking service."""

    def rerank(self, question: str, chunks: list[Chunk]) -> list[Chunk]:
        """Rerank chunks by relevance.

        Args:
            question: User question.
            chunks: Candidates to rerank.

        Returns:
            Reranked chunks.
        """
        ...
