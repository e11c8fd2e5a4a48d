import json
import logging
import os
import tempfile
from pathlib import Path

import numpy as np

from codebase_rag.core.models.chunk import Chunk
from codebase_rag.exceptions import SnapshotFormatError, SnapshotNotFoundError

logger = logging.getLogger(__name__)


def cosine_similarity(a: list[float] | np.ndarray, b: list[float] | np.ndarray) -> float:
    """Cosine similarity; 0.0 when either vector has zero magnitude."""
    vec_a = np.asarray(a, dtype=float)
    vec_b = np.asarray(b, dtype=float)
    norm_product = np.linalg.norm(vec_a) * np.linalg.norm(vec_b)
    if norm_product == 0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / norm_product)


class InMemoryVectorStore:
    """Exact nearest-neighbour index persisted as one JSON snapshot."""

    def __init__(self, collection_name: str = "code-chunks"):
        """Initialize empty store.

        Args:
            collection_name: Name recorded in logs.
        """
        self._collection_name = collection_name
        self._chunks: dict[str, Chunk] = {}
        self._embeddings: dict[str, list[float]] = {}

    def reset(self) -> None:
        self._chunks = {}
        self._embeddings = {}

    def add(self, chunks: list[Chunk], vectors: list[list[float]]) -> None:
        """Associate chunks with aligned vectors; later ids overwrite earlier ones."""
        if len(chunks) != len(vectors):
            raise ValueError(
                f"Got {len(chunks)} chunks but {len(vectors)} vectors"
            )
        for chunk, vector in zip(chunks, vectors):
            self._chunks[chunk.id] = chunk
            self._embeddings[chunk.id] = [float(x) for x in vector]

    def search(self, query_vector: list[float], k: int = 5) -> list[Chunk]:
        """Rank every stored vector by cosine similarity.

        Ties keep insertion order. Ids among the top k without a chunk
        record are dropped.
        """
        similarities = [
            (chunk_id, cosine_similarity(query_vector, vector))
            for chunk_id, vector in self._embeddings.items()
        ]
        similarities.sort(key=lambda item: item[1], reverse=True)

        results = [
            self._chunks[chunk_id]
            for chunk_id, _ in similarities[:k]
            if chunk_id in self._chunks
        ]

        if logger.isEnabledFor(logging.DEBUG):
            top_scores = ", ".join(f"{s:.3f}" for _, s in similarities[:3])
            logger.debug(f"Vector search top-3 similarities: [{top_scores}]")

        return results

    def all_chunks(self) -> list[Chunk]:
        return list(self._chunks.values())

    def count(self) -> int:
        return len(self._chunks)

    def save(self, path: Path) -> None:
        """Write {chunks, embeddings} atomically (temp file, then rename)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "chunks": [c.to_dict() for c in self._chunks.values()],
            "embeddings": self._embeddings,
        }

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".snapshot-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Saved {len(self._chunks)} chunks to {path} ({self._collection_name})")

    def load(self, path: Path) -> None:
        """Replace all in-memory state with the snapshot at path."""
        path = Path(path)
        if not path.exists():
            raise SnapshotNotFoundError(f"RAG data not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if "chunks" not in data or "embeddings" not in data:
            raise SnapshotFormatError(f"Snapshot {path} lacks chunks or embeddings")

        chunks = {}
        for record in data["chunks"]:
            chunk = Chunk.from_dict(record)
            chunks[chunk.id] = chunk

        self._chunks = chunks
        self._embeddings = {str(k): list(v) for k, v in data["embeddings"].items()}
        logger.info(f"Loaded {len(self._chunks)} chunks from {path}")
