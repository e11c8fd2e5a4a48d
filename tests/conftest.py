"""Shared test fixtures for codebase_rag testing."""

import hashlib
import re
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add parent directory to path so we can import codebase_rag
sys.path.insert(0, str(Path(__file__).parent.parent))

from codebase_rag.core.models import Chunk, ChunkKind, EmbeddingRequest, EmbeddingResult


SAMPLE_MODULE = '''class Greeter(Base):
    def __init__(self, name):
        self.name = name

    def greet(self):
        return format_greeting(self.name)


def format_greeting(name):
    return f"Hello, {name}"
'''


class FakeLLM:
    """Language model scripted by system prompt; records every call."""

    def __init__(self, responses: dict[str, str] | None = None, default: str = ""):
        self.responses = responses or {}
        self.default = default
        self.calls: list[tuple[str, str, str]] = []
        self.error: Exception | None = None
        self.errors: dict[str, Exception] = {}

    def complete(self, system_prompt: str, context: str, question: str) -> str:
        self.calls.append((system_prompt, context, question))
        if self.error is not None:
            raise self.error
        if system_prompt in self.errors:
            raise self.errors[system_prompt]
        return self.responses.get(system_prompt, self.default)

    def calls_for(self, system_prompt: str) -> list[tuple[str, str, str]]:
        return [c for c in self.calls if c[0] == system_prompt]


class FakeEmbedder:
    """Deterministic bag-of-words embedder over a small hashed vocabulary."""

    DIMENSIONS = 32

    def __init__(self):
        self.model_name = "fake-embedder"
        self.batches: list[list[EmbeddingRequest]] = []

    def embed(self, text: str) -> list[float]:
        vector = [0.0] * self.DIMENSIONS
        for word in re.findall(r"[a-z0-9_]+", text.lower()):
            digest = hashlib.md5(word.encode("utf-8")).digest()
            vector[digest[0] % self.DIMENSIONS] += 1.0
        return vector

    def embed_batch(self, requests: list[EmbeddingRequest]) -> list[EmbeddingResult]:
        self.batches.append(list(requests))
        return [EmbeddingResult(id=r.id, vector=self.embed(r.content)) for r in requests]


def make_chunk(
    name: str = "func",
    content: str = "def func():\n    pass\n",
    source_path: str = "pkg/module.py",
    kind: ChunkKind = ChunkKind.FUNCTION,
    start_line: int = 1,
    end_line: int | None = None,
    **kwargs,
) -> Chunk:
    """Build a chunk with a real content-addressed id."""
    if end_line is None:
        end_line = start_line + max(content.count("\n"), 1) - 1
    return Chunk.create(
        content=content,
        source_path=source_path,
        start_line=start_line,
        end_line=end_line,
        kind=kind,
        name=name,
        **kwargs,
    )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_source_tree(temp_dir: Path) -> Path:
    """Small source tree with code, docs and directories that must be pruned."""
    src = temp_dir / "src"
    (src / "app").mkdir(parents=True)
    (src / "app" / "greeter.py").write_text(SAMPLE_MODULE)
    (src / "app" / "broken.py").write_text("def broken(:\n    pass\n")
    (src / "README.md").write_text("# Sample\n\nGreeter says hello.\n")
    (src / "app" / "notes.bin").write_text("ignored")

    for excluded in ("node_modules", ".git", "__pycache__"):
        (src / excluded).mkdir()
        (src / excluded / "hidden.py").write_text("def hidden():\n    pass\n")

    return src


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()
