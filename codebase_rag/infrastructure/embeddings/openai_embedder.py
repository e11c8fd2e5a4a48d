import logging

from openai import OpenAI

from codebase_rag.core.models.retrieval import EmbeddingRequest, EmbeddingResult
from codebase_rag.core.strategies.batching import plan_batches

logger = logging.getLogger(__name__)


class OpenAIEmbedder:
    """Embedding client for the OpenAI embeddings API."""

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.openai.com/v1",
        model_name: str = "text-embedding-3-small",
        max_request_tokens: int = 8191,
        batch_ratio: float = 0.8,
    ):
        self._client = OpenAI(base_url=base_url, api_key=api_key or "not-needed")
        self.model_name = model_name
        self._max_request_tokens = max_request_tokens
        self._batch_ratio = batch_ratio

    def embed(self, text: str) -> list[float]:
        response = self._client.embeddings.create(model=self.model_name, input=text)
        return list(response.data[0].embedding)

    def embed_batch(self, requests: list[EmbeddingRequest]) -> list[EmbeddingResult]:
        batches = plan_batches(requests, self._max_request_tokens, self._batch_ratio)
        results: list[EmbeddingResult] = []

        for i, batch in enumerate(batches, 1):
            response = self._client.embeddings.create(
                model=self.model_name,
                input=[r.content for r in batch],
            )
            # The API may return items out of order; index is authoritative.
            items = sorted(response.data, key=lambda item: item.index)
            for request, item in zip(batch, items):
                results.append(EmbeddingResult(id=request.id, vector=list(item.embedding)))
            logger.info(f"Embedded batch {i}/{len(batches)} ({len(results)}/{len(requests)})")

        return results
