"""Tests for dependency wiring."""

from pathlib import Path

import numpy as np
import pytest

from codebase_rag.config.settings import Settings
from codebase_rag.container import Container, configure_container
from codebase_rag.core.models import EmbeddingRequest
from codebase_rag.core.protocols import EmbedderProtocol, LLMProtocol, VectorStoreProtocol
from codebase_rag.core.services.ingest_service import IngestService
from codebase_rag.core.services.query_service import QueryService
from codebase_rag.infrastructure.embeddings import sentence_transformer
from codebase_rag.infrastructure.embeddings.openai_embedder import OpenAIEmbedder
from codebase_rag.infrastructure.embeddings.sentence_transformer import (
    SentenceTransformerEmbedder,
)


class TestContainer:
    """Test the registry itself."""

    def test_singleton_and_factory(self):
        container = Container()
        container.register(list, list, singleton=True)
        container.register(dict, dict)

        assert container.resolve(list) is container.resolve(list)
        assert container.resolve(dict) is not container.resolve(dict)

    def test_reset_drops_singletons(self):
        container = Container()
        container.register(list, list, singleton=True)
        first = container.resolve(list)
        container.reset()
        assert container.resolve(list) is not first

    def test_unregistered(self):
        with pytest.raises(KeyError):
            Container().resolve(set)


class TestConfigureContainer:
    """Test wiring settings into services."""

    def test_services_resolve(self, temp_dir: Path):
        settings = Settings(embedding_provider="openai", context_budget=500)
        container = configure_container(settings, temp_dir)

        assert isinstance(container.resolve(EmbedderProtocol), OpenAIEmbedder)
        assert isinstance(container.resolve(LLMProtocol), LLMProtocol)
        assert isinstance(container.resolve(QueryService), QueryService)
        assert isinstance(container.resolve(IngestService), IngestService)
        assert container.resolve(VectorStoreProtocol) is container.resolve(VectorStoreProtocol)

    def test_sentence_transformer_provider(self, temp_dir: Path):
        settings = Settings(
            embedding_provider="sentence-transformers",
            embedding_model="sentence-transformers/all-MiniLM-L6-v2",
        )
        embedder = configure_container(settings, temp_dir).resolve(EmbedderProtocol)

        assert isinstance(embedder, SentenceTransformerEmbedder)
        assert "model" not in embedder.__dict__

    def test_unknown_provider(self, temp_dir: Path):
        container = configure_container(Settings(embedding_provider="nope"), temp_dir)
        with pytest.raises(ValueError):
            container.resolve(EmbedderProtocol)


class _FakeSentenceModel:
    """Stands in for a SentenceTransformer; records every encode call."""

    loads = 0

    def __init__(self, model_name: str):
        _FakeSentenceModel.loads += 1
        self.encoded: list = []

    def encode(self, texts, convert_to_numpy: bool = True):
        self.encoded.append(texts)
        if isinstance(texts, str):
            return np.array([float(len(texts)), 1.0])
        return np.array([[float(len(t)), 1.0] for t in texts])


class TestSentenceTransformerEmbedder:
    """Test lazy model loading and batched encoding."""

    @pytest.fixture(autouse=True)
    def fake_model(self, monkeypatch):
        monkeypatch.setattr(sentence_transformer, "SentenceTransformer", _FakeSentenceModel)
        _FakeSentenceModel.loads = 0

    def test_model_loaded_once_on_first_use(self):
        embedder = SentenceTransformerEmbedder("local-model")
        assert _FakeSentenceModel.loads == 0

        assert embedder.embed("abc") == [3.0, 1.0]
        embedder.embed("abcd")
        assert _FakeSentenceModel.loads == 1

    def test_embed_batch_respects_request_ceiling(self):
        embedder = SentenceTransformerEmbedder("local-model", max_request_tokens=10)
        requests = [EmbeddingRequest(id=str(i), content="x" * 12) for i in range(3)]

        results = embedder.embed_batch(requests)

        assert [r.id for r in results] == ["0", "1", "2"]
        assert all(r.vector == [12.0, 1.0] for r in results)
        assert [len(batch) for batch in embedder.model.encoded] == [2, 1]
