"""Tests for query planning and retrieval fusion."""

from codebase_rag.core.services.query_planner import (
    EXPAND_SYSTEM_PROMPT,
    KEYWORDS_SYSTEM_PROMPT,
    QueryPlanner,
)
from codebase_rag.core.services.retrieval_service import RetrievalService, merge_results
from codebase_rag.infrastructure.rerankers.llm_reranker import (
    RERANK_SYSTEM_PROMPT,
    LLMReranker,
)
from codebase_rag.infrastructure.vector_stores.memory_store import InMemoryVectorStore

from conftest import FakeEmbedder, FakeLLM, make_chunk


class RecordingEmbedder(FakeEmbedder):
    def __init__(self):
        super().__init__()
        self.texts: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.texts.append(text)
        return super().embed(text)


class ConstantEmbedder(FakeEmbedder):
    def embed(self, text: str) -> list[float]:
        return [1.0, 0.0]


def _index(chunks, embedder):
    store = InMemoryVectorStore()
    store.add(chunks, [embedder.embed(c.content) for c in chunks])
    return store


class TestQueryPlanner:
    """Test expansion and keyword extraction with local fallbacks."""

    def test_expand(self):
        llm = FakeLLM({EXPAND_SYSTEM_PROMPT: "Where is greeting?\ngreet hello format"})
        assert QueryPlanner(llm).expand("Where is greeting?") == (
            "Where is greeting? greet hello format"
        )

    def test_expand_fallback(self):
        assert QueryPlanner(FakeLLM()).expand("Where is greeting?") == "Where is greeting?"

    def test_extract_keywords_supplemented(self):
        llm = FakeLLM({KEYWORDS_SYSTEM_PROMPT: "greet"})
        keywords = QueryPlanner(llm).extract_keywords("Who calls format_greeting?")
        assert keywords == ["greet", "Who", "calls", "format_greeting"]

    def test_keyword_search(self):
        hit = make_chunk(name="greet", content="return greet()\n")
        miss = make_chunk(name="other", content="pass\n")
        assert QueryPlanner(FakeLLM()).keyword_search(["greet"], [miss, hit]) == [hit]


class TestMergeResults:
    """Test vector-first deduplicating merge."""

    def test_vector_first_then_unseen_keywords(self):
        a, b, c, d = (make_chunk(name=n, content=f"# {n}\n") for n in "abcd")
        assert merge_results([a, b], [b, c, d], limit=3) == [a, b, c]

    def test_vector_results_are_never_cut(self):
        a, b, c, d = (make_chunk(name=n, content=f"# {n}\n") for n in "abcd")
        assert merge_results([a, b, c], [d], limit=2) == [a, b, c]


class TestRetrievalService:
    """Test the multi-stage retrieval pipeline."""

    def _service(self, llm, embedder, store, **kwargs):
        return RetrievalService(
            embedder=embedder,
            vector_store=store,
            planner=QueryPlanner(llm),
            reranker=LLMReranker(llm),
            **kwargs,
        )

    def test_empty_index_short_circuits(self):
        """Test that nothing found returns no chunks without reranking."""
        llm = FakeLLM()
        service = self._service(llm, FakeEmbedder(), InMemoryVectorStore())

        assert service.retrieve("How does greeting work?") == []
        assert llm.calls_for(RERANK_SYSTEM_PROMPT) == []

    def test_expanded_question_embedded_original_used_for_keywords(self):
        llm = FakeLLM(
            {
                EXPAND_SYSTEM_PROMPT: "How does greeting work?\ngreet format_greeting",
                KEYWORDS_SYSTEM_PROMPT: "greet\nformat_greeting\nhello",
            }
        )
        embedder = RecordingEmbedder()
        chunk = make_chunk(name="greet", content="def greet():\n    return format_greeting()\n")
        store = _index([chunk], embedder)
        embedder.texts.clear()

        results = self._service(llm, embedder, store).retrieve("How does greeting work?")

        assert results == [chunk]
        assert embedder.texts == ["How does greeting work? greet format_greeting"]
        assert llm.calls_for(KEYWORDS_SYSTEM_PROMPT)[0][2] == "How does greeting work?"

    def test_keyword_results_fill_after_vector_results(self):
        """Test that unseen keyword hits are appended after vector hits up to the limit."""
        chunks = [
            make_chunk(name=f"f{i}", content=f"def f{i}():\n    return greet_{i}\n")
            for i in range(4)
        ]
        store = InMemoryVectorStore()
        store.add(chunks, [[1.0, 0.0], [0.0, 1.0], [0.0, 1.0], [0.0, 1.0]])
        llm = FakeLLM({KEYWORDS_SYSTEM_PROMPT: "f3\nf2\nzzz"})

        results = self._service(
            llm, ConstantEmbedder(), store, vector_top_k=1, keyword_top_k=2, merge_limit=3
        ).retrieve("unrelated words")

        assert results == [chunks[0], chunks[2], chunks[3]]

    def test_final_top_k(self):
        embedder = FakeEmbedder()
        chunks = [make_chunk(name=f"greet{i}", content=f"greet {i}\n") for i in range(5)]
        store = _index(chunks, embedder)
        llm = FakeLLM({KEYWORDS_SYSTEM_PROMPT: "greet\nhello\nworld"})

        results = self._service(llm, embedder, store, final_top_k=2).retrieve("greet")
        assert len(results) == 2
