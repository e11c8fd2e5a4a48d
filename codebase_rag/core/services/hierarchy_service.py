"""Hierarchy index - per-file chunk trees built from parent back-references."""

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Optional

from ..models.chunk import Chunk, ChunkKind

logger = logging.getLogger(__name__)

HIERARCHY_TEXT_FILE = "hierarchy.txt"
HIERARCHY_JSON_FILE = "hierarchy.json"


class HierarchyIndex:
    """Read model over segmenter output, keyed by chunk id.

    A parent that was split is represented by its first part; a chunk whose
    parent is not in the index is treated as a root.
    """

    def __init__(self, chunks: list[Chunk]):
        self._by_id: dict[str, Chunk] = {}
        self._children: dict[str, list[Chunk]] = defaultdict(list)
        self._by_file: dict[str, list[Chunk]] = defaultdict(list)
        self._parent_of: dict[str, str] = {}

        first_parts = {
            c.split.origin_id: c.id for c in chunks if c.split and c.split.part_index == 1
        }
        for chunk in chunks:
            self._by_id[chunk.id] = chunk
            self._by_file[chunk.source_path].append(chunk)

        for chunk in chunks:
            if not chunk.parent_id:
                continue
            parent_id = first_parts.get(chunk.parent_id, chunk.parent_id)
            if parent_id in self._by_id:
                self._parent_of[chunk.id] = parent_id
                self._children[parent_id].append(chunk)

    def get(self, chunk_id: str) -> Optional[Chunk]:
        return self._by_id.get(chunk_id)

    def children(self, chunk_id: str) -> list[Chunk]:
        return list(self._children.get(chunk_id, []))

    def files(self) -> list[str]:
        return list(self._by_file)

    def roots(self, source_path: str) -> list[Chunk]:
        """Chunks of a file with no parent in the index, excluding the whole-file chunk."""
        return [
            c
            for c in self._by_file.get(source_path, [])
            if c.id not in self._parent_of and c.kind is not ChunkKind.FILE
        ]

    def _render(self, chunk: Chunk, level: int, out: list[str]) -> None:
        indent = "  " * level
        out.append(f"{indent}- {chunk.kind.value}: {chunk.name} ({chunk.start_line}-{chunk.end_line})")
        if chunk.dependency_refs:
            out.append(f"{indent}  depends on: {', '.join(chunk.dependency_refs)}")
        for child in self.children(chunk.id):
            self._render(child, level + 1, out)

    def render_tree(self) -> str:
        """Text tree: one `# path` section per file, children indented."""
        out: list[str] = []
        for source_path in self._by_file:
            out.append(f"# {source_path}")
            for root in self.roots(source_path):
                self._render(root, 0, out)
            out.append("")
        return "\n".join(out)

    def export(self) -> dict[str, Any]:
        """Structured mirror of the tree: path -> flat chunk records."""
        hierarchy: dict[str, Any] = {}
        for source_path, chunks in self._by_file.items():
            hierarchy[source_path] = {
                "chunks": [
                    {
                        "id": c.id,
                        "kind": c.kind.value,
                        "name": c.name,
                        "start_line": c.start_line,
                        "end_line": c.end_line,
                        "parent_id": c.parent_id,
                        "parent_kind": c.parent.kind.value if c.parent else None,
                        "parent_name": c.parent.name if c.parent else None,
                        "dependency_refs": list(c.dependency_refs),
                    }
                    for c in chunks
                ]
            }
        return hierarchy

    def write(self, output_dir: Path) -> tuple[Path, Path]:
        """Write hierarchy.txt and hierarchy.json into output_dir."""
        text_path = output_dir / HIERARCHY_TEXT_FILE
        json_path = output_dir / HIERARCHY_JSON_FILE
        text_path.write_text(self.render_tree(), encoding="utf-8")
        json_path.write_text(
            json.dumps(self.export(), indent=2, ensure_ascii=False), encoding="utf-8"
        )
        logger.info(f"Hierarchy written to {text_path}")
        return text_path, json_path
