"""Tests for batched language-model reranking."""

from codebase_rag.infrastructure.rerankers.llm_reranker import (
    RERANK_SYSTEM_PROMPT,
    LLMReranker,
)

from conftest import FakeLLM, make_chunk


def _chunks(count: int):
    return [make_chunk(name=f"c{i}", content=f"def c{i}():\n    pass\n") for i in range(1, count + 1)]


class TestLLMReranker:
    """Test score parsing, fallbacks and batch ordering."""

    def test_sorts_by_parsed_score(self):
        llm = FakeLLM({RERANK_SYSTEM_PROMPT: "Chunk 1: 2 (weak)\nChunk 2: 9 (exact)\nChunk 3: 5"})
        result = LLMReranker(llm).rerank("question", _chunks(3))
        assert [c.name for c in result] == ["c2", "c3", "c1"]

    def test_unparseable_batch_keeps_order(self):
        """Test that a batch with no parsable score falls back to a uniform score."""
        llm = FakeLLM({RERANK_SYSTEM_PROMPT: "All of these look relevant."})
        reranker = LLMReranker(llm)
        chunks = _chunks(3)

        assert reranker.score_batch("question", chunks) == [5, 5, 5]
        assert reranker.rerank("question", chunks) == chunks

    def test_partial_scores_rank_missing_last(self):
        llm = FakeLLM({RERANK_SYSTEM_PROMPT: "Chunk 2: 7"})
        result = LLMReranker(llm).rerank("question", _chunks(3))
        assert [c.name for c in result] == ["c2", "c1", "c3"]

    def test_batches_keep_original_order(self):
        """Test that chunks are only reordered within their own batch."""
        llm = FakeLLM({RERANK_SYSTEM_PROMPT: "Chunk 1: 2\nChunk 2: 9\nChunk 3: 5"})
        result = LLMReranker(llm, batch_size=5).rerank("question", _chunks(6))

        assert [c.name for c in result] == ["c2", "c3", "c1", "c4", "c5", "c6"]
        assert len(llm.calls) == 2

    def test_preview_truncates_content(self):
        llm = FakeLLM()
        chunk = make_chunk(name="long", content="x" * 600)
        LLMReranker(llm, preview_chars=500).rerank("question", [chunk])

        _, context, question = llm.calls[0]
        assert "x" * 500 + "..." in context
        assert "x" * 501 not in context
        assert "Name: long" in context
        assert question == "question"

    def test_empty_input_skips_model(self):
        llm = FakeLLM()
        assert LLMReranker(llm).rerank("question", []) == []
        assert llm.calls == []
