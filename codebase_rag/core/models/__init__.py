"""Domain models."""
from .chunk import (
    Chunk,
    ChunkKind,
    ParentRef,
    SplitInfo,
    compute_chunk_id,
    estimate_tokens,
)
from .retrieval import EmbeddingRequest, EmbeddingResult, RankedCandidate
from .build import BuildResult, RagMetadata
from .evaluation import METRICS, Evaluation, FeedbackEntry, MetricScore

__all__ = [
    "Chunk",
    "ChunkKind",
    "ParentRef",
    "SplitInfo",
    "compute_chunk_id",
    "estimate_tokens",
    "EmbeddingRequest",
    "EmbeddingResult",
    "RankedCandidate",
    "BuildResult",
    "RagMetadata",
    "METRICS",
    "Evaluation",
    "FeedbackEntry",
    "MetricScore",
]
