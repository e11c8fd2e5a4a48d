import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

EVALUATION_LOG = "evaluation.jsonl"
FEEDBACK_LOG = "feedback.jsonl"
ANSWERS_LOG = "answers.jsonl"


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


container = Container()


def _create_embedder(settings: Settings):
    if settings.embedding_provider == "sentence-transformers":
        from .infrastructure.embeddings.sentence_transformer import (
            SentenceTransformerEmbedder,
        )

        return SentenceTransformerEmbedder(
            model_name=settings.embedding_model,
            max_request_tokens=settings.embedding_max_request_tokens,
            batch_ratio=settings.embedding_batch_ratio,
        )

    if settings.embedding_provider != "openai":
        raise ValueError(f"Unknown embedding provider: {settings.embedding_provider}")

    from .infrastructure.embeddings.openai_embedder import OpenAIEmbedder

    return OpenAIEmbedder(
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        model_name=settings.embedding_model,
        max_request_tokens=settings.embedding_max_request_tokens,
        batch_ratio=settings.embedding_batch_ratio,
    )


def configure_container(
    settings: Settings, data_dir: Optional[str | Path] = None
) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.
        data_dir: Directory holding evaluation and feedback logs
            (defaults to settings.data_dir).

    Returns:
        Configured container.
    """
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.llm import LLMProtocol
    from .core.protocols.reranker import RerankerProtocol
    from .core.protocols.vector_store import VectorStoreProtocol
    from .core.services.answer_service import AnswerService
    from .core.services.context_assembler import ContextAssembler
    from .core.services.evaluation_service import EvaluationService
    from .core.services.feedback_service import FeedbackService
    from .core.services.grouping_service import SemanticGrouper
    from .core.services.ingest_service import IngestService
    from .core.services.query_planner import QueryPlanner
    from .core.services.query_service import QueryService
    from .core.services.retrieval_service import RetrievalService
    from .core.services.segmenter import Segmenter
    from .infrastructure.llm.openai_client import OpenAIChatClient
    from .infrastructure.rerankers.llm_reranker import LLMReranker
    from .infrastructure.vector_stores.memory_store import InMemoryVectorStore

    container.reset()
    logs_dir = Path(data_dir or settings.data_dir)

    container.register(
        EmbedderProtocol,
        lambda: _create_embedder(settings),
        singleton=True,
    )

    container.register(
        VectorStoreProtocol,
        lambda: InMemoryVectorStore(),
        singleton=True,
    )

    container.register(
        LLMProtocol,
        lambda: OpenAIChatClient(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        ),
        singleton=True,
    )

    container.register(
        RerankerProtocol,
        lambda: LLMReranker(
            llm=container.resolve(LLMProtocol),
            batch_size=settings.rerank_batch_size,
            preview_chars=settings.rerank_preview_chars,
        ),
        singleton=True,
    )

    container.register(
        Segmenter,
        lambda: Segmenter(max_chunk_tokens=settings.max_chunk_tokens),
        singleton=True,
    )

    container.register(
        SemanticGrouper,
        lambda: SemanticGrouper(
            llm=container.resolve(LLMProtocol),
            min_functions=settings.min_group_functions,
        ),
        singleton=True,
    )

    container.register(
        IngestService,
        lambda: IngestService(
            segmenter=container.resolve(Segmenter),
            embedder=container.resolve(EmbedderProtocol),
            vector_store=container.resolve(VectorStoreProtocol),
            grouper=container.resolve(SemanticGrouper) if settings.semantic_groups else None,
        ),
        singleton=True,
    )

    container.register(
        RetrievalService,
        lambda: RetrievalService(
            embedder=container.resolve(EmbedderProtocol),
            vector_store=container.resolve(VectorStoreProtocol),
            planner=QueryPlanner(container.resolve(LLMProtocol)),
            reranker=container.resolve(RerankerProtocol),
            vector_top_k=settings.vector_top_k,
            keyword_top_k=settings.keyword_top_k,
            merge_limit=settings.merge_limit,
            final_top_k=settings.final_top_k,
        ),
        singleton=True,
    )

    container.register(
        EvaluationService,
        lambda: EvaluationService(
            llm=container.resolve(LLMProtocol),
            log_path=logs_dir / EVALUATION_LOG,
        ),
        singleton=True,
    )

    container.register(
        FeedbackService,
        lambda: FeedbackService(
            log_path=logs_dir / FEEDBACK_LOG,
            answers_path=logs_dir / ANSWERS_LOG,
        ),
        singleton=True,
    )

    container.register(
        QueryService,
        lambda: QueryService(
            vector_store=container.resolve(VectorStoreProtocol),
            retrieval=container.resolve(RetrievalService),
            assembler=ContextAssembler(
                budget=settings.context_budget,
                overview_ratio=settings.overview_ratio,
            ),
            answer=AnswerService(container.resolve(LLMProtocol)),
            evaluation=container.resolve(EvaluationService),
            feedback=container.resolve(FeedbackService),
            debug=settings.debug,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container
