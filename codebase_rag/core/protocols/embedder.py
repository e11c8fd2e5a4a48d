"""Embedder protocol for dependency injection."""
from typing import Protocol, runtime_checkable

from ..models.retrieval import EmbeddingRequest, EmbeddingResult


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Protocol for embedding service."""

    model_name: str

    def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Text to embed.

        Returns:
            Embedding vector.
        """
        ...

    def embed_batch(self, requests: list[EmbeddingRequest]) -> list[EmbeddingResult]:
        """Embed many texts, batching requests under the provider's token ceiling.

        Args:
            requests: Texts keyed by chunk id.

        Returns:
            One result per request, in request order.
        """
        ...
