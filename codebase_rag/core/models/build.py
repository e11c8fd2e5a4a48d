"""Build output models."""
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class RagMetadata:
    """Metadata written next to the snapshot."""
    created_at: datetime
    chunk_count: int
    source_dir: str
    model_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "created_at": self.created_at.isoformat(),
            "chunk_count": self.chunk_count,
            "source_dir": self.source_dir,
            "model_name": self.model_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RagMetadata":
        return cls(
            created_at=datetime.fromisoformat(data["created_at"]),
            chunk_count=data["chunk_count"],
            source_dir=data["source_dir"],
            model_name=data.get("model_name", ""),
        )


@dataclass
class BuildResult:
    """Summary returned by the build entry point."""
    chunk_count: int
    embedding_count: int
    output_path: str
