"""Tests for the in-memory vector store and its snapshot."""

import json
import math
from pathlib import Path

import pytest

from codebase_rag.exceptions import SnapshotFormatError, SnapshotNotFoundError
from codebase_rag.infrastructure.vector_stores.memory_store import (
    InMemoryVectorStore,
    cosine_similarity,
)

from conftest import make_chunk


@pytest.fixture
def populated_store():
    store = InMemoryVectorStore()
    chunks = [make_chunk(name=name, content=f"def {name}():\n    pass\n") for name in "vwx"]
    store.add(chunks, [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    return store, chunks


class TestCosineSimilarity:
    """Test similarity edge cases."""

    def test_identical_vectors(self):
        assert math.isclose(cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]), 1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_zero_vector(self):
        """Test that a zero vector scores 0.0 instead of dividing by zero."""
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
        assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


class TestSearch:
    """Test exact nearest-neighbour search."""

    def test_top_one(self, populated_store):
        store, chunks = populated_store
        assert store.search([1.0, 0.0, 0.0], k=1) == [chunks[0]]

    def test_sorted_by_similarity(self, populated_store):
        store, chunks = populated_store
        results = store.search([0.1, 0.2, 0.9], k=3)
        assert [c.name for c in results] == ["x", "w", "v"]

    def test_ties_keep_insertion_order(self):
        store = InMemoryVectorStore()
        chunks = [make_chunk(name=n, content=f"# {n}\n") for n in ("a", "b", "c")]
        store.add(chunks, [[1.0, 0.0]] * 3)
        assert [c.name for c in store.search([1.0, 0.0], k=3)] == ["a", "b", "c"]

    def test_drops_ids_without_chunk(self, populated_store):
        """Test that vectors with no chunk record are silently skipped."""
        store, chunks = populated_store
        store._embeddings["orphan"] = [1.0, 0.0, 0.0]
        results = store.search([1.0, 0.0, 0.0], k=2)
        assert results == [chunks[0]]

    def test_empty_store(self):
        assert InMemoryVectorStore().search([1.0, 0.0], k=5) == []


class TestAdd:
    """Test bulk association."""

    def test_overwrites_on_collision(self, populated_store):
        store, chunks = populated_store
        store.add([chunks[0]], [[0.0, 1.0, 0.0]])
        assert store.count() == 3
        assert store.search([0.0, 1.0, 0.0], k=2) == [chunks[0], chunks[1]]

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            InMemoryVectorStore().add([make_chunk()], [])

    def test_reset(self, populated_store):
        store, _ = populated_store
        store.reset()
        assert store.count() == 0
        assert store.all_chunks() == []


class TestPersistence:
    """Test whole-document save and load."""

    def test_save_and_load(self, populated_store, temp_dir: Path):
        store, chunks = populated_store
        path = temp_dir / "data" / "vector-store.json"
        store.save(path)

        document = json.loads(path.read_text())
        assert set(document) == {"chunks", "embeddings"}

        restored = InMemoryVectorStore()
        restored.load(path)
        assert restored.all_chunks() == chunks
        assert restored.search([0.0, 0.0, 1.0], k=1) == [chunks[2]]

    def test_load_replaces_state(self, populated_store, temp_dir: Path):
        store, _ = populated_store
        path = temp_dir / "vector-store.json"
        InMemoryVectorStore().save(path)

        store.load(path)
        assert store.count() == 0

    def test_load_missing_snapshot(self, temp_dir: Path):
        with pytest.raises(SnapshotNotFoundError):
            InMemoryVectorStore().load(temp_dir / "missing.json")

    def test_load_malformed_snapshot(self, temp_dir: Path):
        path = temp_dir / "bad.json"
        path.write_text(json.dumps({"chunks": []}))
        with pytest.raises(SnapshotFormatError):
            InMemoryVectorStore().load(path)
