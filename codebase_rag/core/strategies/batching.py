"""Token-budgeted batching of embedding requests."""

from ..models.chunk import estimate_tokens
from ..models.retrieval import EmbeddingRequest


def plan_batches(
    requests: list[EmbeddingRequest],
    max_request_tokens: int,
    ratio: float = 0.8,
) -> list[list[EmbeddingRequest]]:
    """Group requests so each batch stays under ratio * max_request_tokens.

    A batch is flushed whenever the next request would push it over the
    budget; a single request larger than the budget is sent on its own.
    """
    budget = max_request_tokens * ratio
    batches: list[list[EmbeddingRequest]] = []
    current: list[EmbeddingRequest] = []
    current_tokens = 0

    for request in requests:
        tokens = estimate_tokens(request.content)
        if current and current_tokens + tokens > budget:
            batches.append(current)
            current = []
            current_tokens = 0
        current.append(request)
        current_tokens += tokens

    if current:
        batches.append(current)
    return batches
