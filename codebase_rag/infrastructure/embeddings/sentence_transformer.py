import logging
from functools import cached_property

from sentence_transformers import SentenceTransformer

from codebase_rag.core.models.retrieval import EmbeddingRequest, EmbeddingResult
from codebase_rag.core.strategies.batching import plan_batches

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        max_request_tokens: int = 8191,
        batch_ratio: float = 0.8,
    ):
        self.model_name = model_name
        self._max_request_tokens = max_request_tokens
        self._batch_ratio = batch_ratio

    @cached_property
    def model(self) -> SentenceTransformer:
        logger.info(f"Loading embedding model: {self.model_name}")
        return SentenceTransformer(self.model_name)

    def embed(self, text: str) -> list[float]:
        return self.model.encode(text, convert_to_numpy=True).tolist()

    def embed_batch(self, requests: list[EmbeddingRequest]) -> list[EmbeddingResult]:
        results: list[EmbeddingResult] = []
        for batch in plan_batches(requests, self._max_request_tokens, self._batch_ratio):
            vectors = self.model.encode([r.content for r in batch], convert_to_numpy=True)
            results.extend(
                EmbeddingResult(id=r.id, vector=v.tolist()) for r, v in zip(batch, vectors)
            )
            logger.info(f"Embedded batch: {len(results)}/{len(requests)}")
        return results
