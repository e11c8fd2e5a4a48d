"""Retrieval and embedding models."""
from dataclasses import dataclass

from .chunk import Chunk


@dataclass
class EmbeddingRequest:
    """Text to embed, keyed by chunk id."""
    id: str
    content: str


@dataclass
class EmbeddingResult:
    """Embedding vector keyed by chunk id."""
    id: str
    vector: list[float]


@dataclass
class RankedCandidate:
    """Chunk with the score assigned during one retrieval call."""
    chunk: Chunk
    score: float
