
import logging
import re

from ..models.chunk import Chunk
from ..models.retrieval import RankedCandidate

logger = logging.getLogger(__name__)


class KeywordMatchScorer:
    """Score chunks by literal keyword occurrences in content and metadata."""

    METADATA_WEIGHT = 2

    def __init__(self, metadata_weight: int = METADATA_WEIGHT):
        """Initialize scorer.

        Args:
            metadata_weight: Multiplier for matches in path, name and kind.
        """
        self._metadata_weight = metadata_weight

    @staticmethod
    def _patterns(keywords: list[str]) -> list[re.Pattern]:
        return [re.compile(re.escape(k), re.IGNORECASE) for k in keywords if k]

    @staticmethod
    def _metadata_text(chunk: Chunk) -> str:
        return f"{chunk.source_path} {chunk.name} {chunk.kind.value}"

    def score(self, keywords: list[str], chunk: Chunk) -> int:
        """Content occurrences plus weighted metadata occurrences."""
        patterns = self._patterns(keywords)
        return self._score(patterns, chunk)

    def _score(self, patterns: list[re.Pattern], chunk: Chunk) -> int:
        content_hits = sum(len(p.findall(chunk.content)) for p in patterns)
        metadata = self._metadata_text(chunk)
        metadata_hits = sum(len(p.findall(metadata)) for p in patterns)
        return content_hits + self._metadata_weight * metadata_hits

    def rank(self, keywords: list[str], chunks: list[Chunk]) -> list[RankedCandidate]:
        """Score every chunk, drop zeros, sort descending (stable)."""
        patterns = self._patterns(keywords)
        if not patterns:
            return []

        candidates = [
            RankedCandidate(chunk=chunk, score=self._score(patterns, chunk))
            for chunk in chunks
        ]
        candidates = [c for c in candidates if c.score > 0]
        candidates.sort(key=lambda c: c.score, reverse=True)

        logger.debug(f"Keyword match: {len(candidates)}/{len(chunks)} chunks scored")
        return candidates
