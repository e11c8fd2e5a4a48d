"""Ingest service - build the index snapshot from a source tree."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..models.build import BuildResult, RagMetadata
from ..models.chunk import Chunk
from ..models.retrieval import EmbeddingRequest
from ..protocols.embedder import EmbedderProtocol
from ..protocols.vector_store import VectorStoreProtocol
from .grouping_service import SemanticGrouper
from .hierarchy_service import HierarchyIndex
from .segmenter import Segmenter

logger = logging.getLogger(__name__)

SNAPSHOT_FILE = "vector-store.json"
METADATA_FILE = "metadata.json"


class IngestService:
    """Service for indexing a source tree into the vector store."""

    def __init__(
        self,
        segmenter: Segmenter,
        embedder: EmbedderProtocol,
        vector_store: VectorStoreProtocol,
        grouper: Optional[SemanticGrouper] = None,
    ):
        """Initialize ingest service.

        Args:
            segmenter: Source tree chunker.
            embedder: Embedding service.
            vector_store: Vector store.
            grouper: Optional semantic grouper; group chunks are skipped without it.
        """
        self._segmenter = segmenter
        self._embedder = embedder
        self._vector_store = vector_store
        self._grouper = grouper

    def run(self, source_dir: str | Path, output_dir: str | Path) -> BuildResult:
        """Chunk, embed and persist a source tree.

        Writes the snapshot, metadata.json, hierarchy.txt and hierarchy.json
        into output_dir.

        Args:
            source_dir: Root of the source tree.
            output_dir: Directory receiving the build artifacts.

        Returns:
            Build summary.

        Raises:
            SourceRootError: If source_dir is missing or unreadable.
        """
        source_path = Path(source_dir)
        output_path = Path(output_dir)

        chunks = self._segmenter.segment(source_path)
        if self._grouper is not None:
            chunks.extend(self._grouper.group(chunks))

        vectors = self._embed(chunks)

        self._vector_store.reset()
        self._vector_store.add(chunks, vectors)

        output_path.mkdir(parents=True, exist_ok=True)
        snapshot_path = output_path / SNAPSHOT_FILE
        self._vector_store.save(snapshot_path)

        metadata = RagMetadata(
            created_at=datetime.now(timezone.utc),
            chunk_count=len(chunks),
            source_dir=str(source_path.resolve()),
            model_name=self._embedder.model_name,
        )
        (output_path / METADATA_FILE).write_text(
            json.dumps(metadata.to_dict(), indent=2), encoding="utf-8"
        )

        HierarchyIndex(chunks).write(output_path)

        logger.info(
            f"Indexing complete: {len(chunks)} chunks, {len(vectors)} embeddings -> {snapshot_path}"
        )
        return BuildResult(
            chunk_count=len(chunks),
            embedding_count=len(vectors),
            output_path=str(snapshot_path),
        )

    def _embed(self, chunks: list[Chunk]) -> list[list[float]]:
        """Vectors aligned with chunks by position."""
        if not chunks:
            return []

        requests = [EmbeddingRequest(id=c.id, content=c.content) for c in chunks]
        results = self._embedder.embed_batch(requests)
        by_id = {r.id: r.vector for r in results}

        missing = [c.id for c in chunks if c.id not in by_id]
        if missing:
            raise ValueError(f"Embedder returned no vector for {len(missing)} chunks")

        logger.info(f"Embedded {len(by_id)}/{len(chunks)} chunks")
        return [by_id[c.id] for c in chunks]


def read_metadata(data_dir: str | Path) -> Optional[RagMetadata]:
    """Build metadata from data_dir, or None when absent."""
    path = Path(data_dir) / METADATA_FILE
    if not path.exists():
        return None
    return RagMetadata.from_dict(json.loads(path.read_text(encoding="utf-8")))
