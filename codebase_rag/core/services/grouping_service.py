"""Semantic grouping - cluster related functions of a file into group chunks."""

import logging
from collections import Counter
from typing import Optional

from ..models.chunk import Chunk, ChunkKind, ParentRef
from ..protocols.llm import LLMProtocol
from ..strategies.parsing import parse_groups

logger = logging.getLogger(__name__)

FUNCTION_PREVIEW_CHARS = 200

GROUP_SYSTEM_PROMPT = """You analyse code and group related functions.
Group functions that share a purpose, act on the same data or call each other.
Describe each group briefly.

Output format:
Group 1: description
- function name
- function name

Group 2: description
- function name
..."""


def _most_frequent_parent(members: list[Chunk]) -> Optional[ParentRef]:
    parents = [c.parent for c in members if c.parent]
    if not parents:
        return None
    counts = Counter(p.id for p in parents)
    best = max(counts.values())
    return next(p for p in parents if counts[p.id] == best)


class SemanticGrouper:
    """Asks the language model to group the functions of each file."""

    def __init__(self, llm: LLMProtocol, min_functions: int = 3):
        """Initialize grouper.

        Args:
            llm: Language-model collaborator.
            min_functions: Files with fewer function chunks are skipped.
        """
        self._llm = llm
        self._min_functions = min_functions

    def group(self, chunks: list[Chunk]) -> list[Chunk]:
        """Group chunks for every eligible file, in file order."""
        by_file: dict[str, list[Chunk]] = {}
        for chunk in chunks:
            if chunk.kind is ChunkKind.FUNCTION and not chunk.is_part:
                by_file.setdefault(chunk.source_path, []).append(chunk)

        groups: list[Chunk] = []
        for source_path, functions in by_file.items():
            if len(functions) < self._min_functions:
                continue
            groups.extend(self.group_file(source_path, functions))

        logger.info(f"Created {len(groups)} semantic groups")
        return groups

    def group_file(self, source_path: str, functions: list[Chunk]) -> list[Chunk]:
        listing = "\n\n".join(
            f"{c.name}: {c.content[:FUNCTION_PREVIEW_CHARS]}..." for c in functions
        )
        response = self._llm.complete(
            GROUP_SYSTEM_PROMPT, listing, f"Group the functions of {source_path}."
        )

        by_name: dict[str, Chunk] = {}
        for chunk in functions:
            by_name.setdefault(chunk.name, chunk)

        result = []
        for description, names in parse_groups(response):
            members = [by_name[n] for n in dict.fromkeys(names) if n in by_name]
            if not members:
                logger.debug(f"Group '{description}' matched no functions in {source_path}")
                continue
            result.append(self._group_chunk(source_path, description, names, members))
        return result

    @staticmethod
    def _group_chunk(
        source_path: str, description: str, names: list[str], members: list[Chunk]
    ) -> Chunk:
        content = "\n\n".join(
            f"# {c.name} (lines {c.start_line}-{c.end_line})\n{c.content}" for c in members
        )
        refs: list[str] = []
        for member in members:
            refs.extend(member.dependency_refs)

        return Chunk.create(
            content=content,
            source_path=source_path,
            start_line=min(c.start_line for c in members),
            end_line=max(c.end_line for c in members),
            kind=ChunkKind.GROUP,
            name=f"Group: {description}",
            context_label=f"Related functions: {', '.join(names)}",
            parent=_most_frequent_parent(members),
            dependency_refs=tuple(dict.fromkeys(refs)),
        )
