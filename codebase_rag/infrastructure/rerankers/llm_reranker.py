import logging

from codebase_rag.core.models.chunk import Chunk
from codebase_rag.core.protocols.llm import LLMProtocol
from codebase_rag.core.strategies.parsing import parse_rerank_scores

logger = logging.getLogger(__name__)

FALLBACK_SCORE = 5
MISSING_SCORE = 0

RERANK_SYSTEM_PROMPT = """You are an expert at judging how relevant code chunks are to a question.
Rate each chunk on a scale from 0 to 10:
- 10 means the chunk directly answers the question.
- Around 5 means the chunk is related to the topic but is not the answer.
- 0 means the chunk is unrelated.

Give every chunk a score and a short justification, one line per chunk, in this format:

Chunk 1: score (reason)
Chunk 2: score (reason)
..."""


class LLMReranker:
    """Reranker that asks the language model to score candidates in batches."""

    def __init__(self, llm: LLMProtocol, batch_size: int = 5, preview_chars: int = 500):
        """Initialize reranker.

        Args:
            llm: Language-model collaborator.
            batch_size: Chunks scored per request.
            preview_chars: Content characters shown per chunk.
        """
        self._llm = llm
        self._batch_size = batch_size
        self._preview_chars = preview_chars

    def _preview(self, chunk: Chunk, position: int) -> str:
        content = chunk.content
        if len(content) > self._preview_chars:
            content = content[: self._preview_chars] + "..."
        return (
            f"Chunk {position}:\n"
            f"File: {chunk.source_path}\n"
            f"Kind: {chunk.kind.value}\n"
            f"Name: {chunk.name}\n\n"
            f"{content}"
        )

    def score_batch(self, question: str, batch: list[Chunk]) -> list[int]:
        """Scores aligned with batch; uniform fallback when nothing parses."""
        context = "\n\n---\n\n".join(
            self._preview(chunk, i) for i, chunk in enumerate(batch, 1)
        )
        response = self._llm.complete(RERANK_SYSTEM_PROMPT, context, question)
        parsed = parse_rerank_scores(response, len(batch))

        if not parsed:
            logger.warning(
                f"[rerank] No scores parsed for batch of {len(batch)}, using {FALLBACK_SCORE}"
            )
            return [FALLBACK_SCORE] * len(batch)

        return [parsed.get(i, MISSING_SCORE) for i in range(len(batch))]

    def rerank(self, question: str, chunks: list[Chunk]) -> list[Chunk]:
        """Rerank chunks batch by batch; batches keep their original order.

        Args:
            question: User question.
            chunks: Candidates to rerank.

        Returns:
            Chunks sorted by score (descending, stable) within each batch.
        """
        if not chunks:
            return chunks

        reranked: list[Chunk] = []
        for start in range(0, len(chunks), self._batch_size):
            batch = chunks[start : start + self._batch_size]
            scores = self.score_batch(question, batch)
            order = sorted(range(len(batch)), key=lambda i: scores[i], reverse=True)
            reranked.extend(batch[i] for i in order)

            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"[rerank] batch {start // self._batch_size + 1} scores: {scores}")

        return reranked
