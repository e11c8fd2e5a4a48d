"""Context assembler - pack ranked chunks into a token-budgeted prompt context."""

import logging
from pathlib import Path

from ..models.chunk import Chunk, ChunkKind, estimate_tokens

logger = logging.getLogger(__name__)

UNIT_SEPARATOR = "\n\n"
MAX_OVERVIEW_FUNCTIONS = 3

FENCE_LANGUAGES = {
    ".py": "python",
    ".md": "markdown",
    ".rst": "rst",
}


def group_by_file(chunks: list[Chunk]) -> dict[str, list[Chunk]]:
    """Group chunks by source path, files in first-appearance order."""
    groups: dict[str, list[Chunk]] = {}
    for chunk in chunks:
        groups.setdefault(chunk.source_path, []).append(chunk)
    return groups


def sort_chunks(chunks: list[Chunk]) -> list[Chunk]:
    """Order by kind priority, then start line."""
    return sorted(chunks, key=lambda c: (c.kind.priority, c.start_line))


class ContextAssembler:
    """Builds the context blob: file overview, then per-file chunk sections."""

    def __init__(
        self,
        budget: int = 8000,
        overview_ratio: float = 0.1,
        notice_threshold: int = 100,
    ):
        """Initialize assembler.

        Args:
            budget: Maximum estimated tokens of the assembled context.
            overview_ratio: Share of the budget the overview may take.
            notice_threshold: Remaining budget above which an omission notice is added.
        """
        self._budget = budget
        self._overview_ratio = overview_ratio
        self._notice_threshold = notice_threshold

    def build_overview(self, groups: dict[str, list[Chunk]]) -> str:
        """One line per file: its types/modules, else a few functions, else the path."""
        lines = ["# Codebase overview", ""]
        for source_path, chunks in groups.items():
            entities = list(
                dict.fromkeys(
                    c.name for c in chunks if c.kind in (ChunkKind.TYPE, ChunkKind.MODULE)
                )
            )
            if entities:
                lines.append(f"- {source_path}: {', '.join(entities)}")
                continue

            functions = list(
                dict.fromkeys(c.name for c in chunks if c.kind is ChunkKind.FUNCTION)
            )[:MAX_OVERVIEW_FUNCTIONS]
            if functions:
                lines.append(f"- {source_path}: functions {', '.join(functions)}")
            else:
                lines.append(f"- {source_path}")
        return "\n".join(lines) + UNIT_SEPARATOR

    @staticmethod
    def render_chunk(chunk: Chunk) -> str:
        parts = [
            f"### {chunk.kind.label}: {chunk.name}",
            f"Lines: {chunk.start_line}-{chunk.end_line}",
        ]
        if chunk.split:
            parts.append(f"Part: {chunk.split.part_index}/{chunk.split.part_total}")
        if chunk.parent:
            parts.append(f"Parent: {chunk.parent.kind.value} {chunk.parent.name}")

        language = FENCE_LANGUAGES.get(Path(chunk.source_path).suffix.lower(), "")
        body = chunk.content.rstrip("\n")
        return "\n".join(parts) + f"\n\n```{language}\n{body}\n```" + UNIT_SEPARATOR

    @staticmethod
    def _notice(chunk: Chunk) -> str:
        return (
            f"{chunk.kind.label} {chunk.name} omitted: too long for the remaining "
            f"context budget." + UNIT_SEPARATOR
        )

    def build(self, chunks: list[Chunk]) -> str:
        """Assemble context from ranked chunks within the token budget.

        Args:
            chunks: Ranked chunks, most relevant first.

        Returns:
            Context text; empty when there are no chunks.
        """
        if not chunks:
            return ""

        groups = group_by_file(chunks)
        parts: list[str] = []
        used = 0

        overview = self.build_overview(groups)
        overview_tokens = estimate_tokens(overview)
        if overview_tokens <= self._budget * self._overview_ratio:
            parts.append(overview)
            used += overview_tokens

        stopped = False
        for source_path, file_chunks in groups.items():
            header = f"## File: {source_path}" + UNIT_SEPARATOR
            header_tokens = estimate_tokens(header)
            if used + header_tokens > self._budget:
                break
            parts.append(header)
            used += header_tokens

            for chunk in sort_chunks(file_chunks):
                unit = self.render_chunk(chunk)
                unit_tokens = estimate_tokens(unit)
                if used + unit_tokens <= self._budget:
                    parts.append(unit)
                    used += unit_tokens
                    continue

                if self._budget - used > self._notice_threshold:
                    notice = self._notice(chunk)
                    parts.append(notice)
                    used += estimate_tokens(notice)
                    logger.debug(f"Context: omitted {chunk.kind.value} {chunk.name}")
                else:
                    stopped = True
                break

            if stopped:
                break

        logger.info(f"Context: {used}/{self._budget} estimated tokens from {len(chunks)} chunks")
        return "".join(parts).rstrip("\n")
