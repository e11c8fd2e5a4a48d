"""Chunk domain models."""
import hashlib
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

CHARS_PER_TOKEN = 3
CHUNK_ID_LENGTH = 12


class ChunkKind(Enum):
    """Kind of source span a chunk covers."""
    FILE = "file"
    MODULE = "module"
    TYPE = "type"
    FUNCTION = "function"
    GROUP = "group"

    @property
    def priority(self) -> int:
        """Position in the context ordering (file first, group last)."""
        return _KIND_PRIORITY[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


_KIND_PRIORITY = {
    ChunkKind.FILE: 0,
    ChunkKind.MODULE: 1,
    ChunkKind.TYPE: 2,
    ChunkKind.FUNCTION: 3,
    ChunkKind.GROUP: 4,
}


def estimate_tokens(text: str | None) -> int:
    """Cheap token estimate: one token per three characters, rounded up."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def compute_chunk_id(path: str, content: str, start_line: int, end_line: int) -> str:
    """Content-addressed chunk id."""
    digest = hashlib.md5(f"{path}:{start_line}-{end_line}:{content}".encode("utf-8"))
    return digest.hexdigest()[:CHUNK_ID_LENGTH]


@dataclass(frozen=True)
class ParentRef:
    """Weak back-reference to the enclosing chunk."""
    id: str
    kind: ChunkKind
    name: str


@dataclass(frozen=True)
class SplitInfo:
    """Position of a part produced by splitting an oversized chunk."""
    part_index: int  # 1-based
    part_total: int
    origin_id: str


@dataclass
class Chunk:
    """Contiguous source span plus metadata."""
    id: str
    content: str
    source_path: str
    start_line: int
    end_line: int
    kind: ChunkKind
    name: str
    context_label: str = ""
    parent: Optional[ParentRef] = None
    dependency_refs: tuple[str, ...] = field(default_factory=tuple)
    split: Optional[SplitInfo] = None

    @classmethod
    def create(
        cls,
        content: str,
        source_path: str,
        start_line: int,
        end_line: int,
        kind: ChunkKind,
        name: str,
        context_label: str = "",
        parent: Optional[ParentRef] = None,
        dependency_refs: tuple[str, ...] = (),
        split: Optional[SplitInfo] = None,
    ) -> "Chunk":
        """Create a chunk with its content-addressed id."""
        return cls(
            id=compute_chunk_id(source_path, content, start_line, end_line),
            content=content,
            source_path=source_path,
            start_line=start_line,
            end_line=end_line,
            kind=kind,
            name=name,
            context_label=context_label,
            parent=parent,
            dependency_refs=tuple(dependency_refs),
            split=split,
        )

    @property
    def token_estimate(self) -> int:
        return estimate_tokens(self.content)

    @property
    def parent_id(self) -> Optional[str]:
        return self.parent.id if self.parent else None

    @property
    def is_part(self) -> bool:
        return self.split is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the snapshot record format."""
        record: dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "source_path": self.source_path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "kind": self.kind.value,
            "name": self.name,
            "context_label": self.context_label,
        }
        if self.parent:
            record["parent_id"] = self.parent.id
            record["parent_kind"] = self.parent.kind.value
            record["parent_name"] = self.parent.name
        if self.dependency_refs:
            record["dependency_refs"] = list(self.dependency_refs)
        if self.split:
            record["part_index"] = self.split.part_index
            record["part_total"] = self.split.part_total
            record["origin_id"] = self.split.origin_id
        return record

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> "Chunk":
        """Rebuild a chunk from a snapshot record."""
        parent = None
        if record.get("parent_id"):
            parent = ParentRef(
                id=record["parent_id"],
                kind=ChunkKind(record.get("parent_kind", ChunkKind.TYPE.value)),
                name=record.get("parent_name", ""),
            )
        split = None
        if record.get("part_index") is not None:
            split = SplitInfo(
                part_index=record["part_index"],
                part_total=record["part_total"],
                origin_id=record["origin_id"],
            )
        return cls(
            id=record["id"],
            content=record["content"],
            source_path=record["source_path"],
            start_line=record["start_line"],
            end_line=record["end_line"],
            kind=ChunkKind(record["kind"]),
            name=record["name"],
            context_label=record.get("context_label", ""),
            parent=parent,
            dependency_refs=tuple(record.get("dependency_refs", ())),
            split=split,
        )
