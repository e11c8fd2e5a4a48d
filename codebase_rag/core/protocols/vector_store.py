"""Vector store protocol for dependency injection."""
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..models.chunk import Chunk


@runtime_checkable
class VectorStoreProtocol(Protocol):
    """Protocol for vector storage."""

    def add(self, chunks: list[Chunk], vectors: list[list[float]]) -> None:
        """Associate each chunk with its aligned vector.

        Args:
            chunks: Chunks to store.
            vectors: Vectors aligned with chunks by position.
        """
        ...

    def reset(self) -> None:
        """Clear all state."""
        ...

    def search(self, query_vector: list[float], k: int = 5) -> list[Chunk]:
        """Exact nearest-neighbour search by cosine similarity.

        Args:
            query_vector: Query vector.
            k: Number of results to return.

        Returns:
            Up to k chunks, most similar first.
        """
        ...

    def all_chunks(self) -> list[Chunk]:
        """Get every stored chunk."""
        ...

    def count(self) -> int:
        """Get chunk count."""
        ...

    def save(self, path: Path) -> None:
        """Write the whole index as one document."""
        ...

    def load(self, path: Path) -> None:
        """Replace in-memory state with a saved document."""
        ...
