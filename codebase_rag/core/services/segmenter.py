"""Segmenter - split a source tree into hierarchical, content-addressed chunks."""

import ast
import logging
import math
import os
from pathlib import Path
from typing import Optional

from ...exceptions import SourceRootError
from ..models.chunk import Chunk, ChunkKind, ParentRef, SplitInfo

logger = logging.getLogger(__name__)

EXCLUDED_DIRS = frozenset(
    {
        "node_modules",
        "dist",
        "build",
        ".next",
        "tmp",
        "log",
        "coverage",
        "vendor",
        ".git",
        "__pycache__",
        ".venv",
        "venv",
        ".tox",
        ".mypy_cache",
        ".pytest_cache",
        "site-packages",
    }
)

SOURCE_EXTENSIONS = frozenset({".py"})
DOC_EXTENSIONS = frozenset({".md", ".rst", ".txt"})

# Calls too common to say anything about what a function depends on.
COMMON_CALLS = frozenset(
    {
        "print",
        "len",
        "str",
        "int",
        "float",
        "bool",
        "list",
        "dict",
        "set",
        "tuple",
        "range",
        "enumerate",
        "zip",
        "map",
        "filter",
        "sorted",
        "reversed",
        "min",
        "max",
        "sum",
        "any",
        "all",
        "isinstance",
        "issubclass",
        "hasattr",
        "getattr",
        "setattr",
        "super",
        "type",
        "repr",
        "format",
        "open",
        "iter",
        "next",
        "append",
        "extend",
        "get",
        "items",
        "keys",
        "values",
        "join",
        "split",
        "strip",
        "startswith",
        "endswith",
        "lower",
        "upper",
        "replace",
        "update",
        "pop",
        "add",
    }
)

_FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef)


def split_lines(text: str) -> list[str]:
    """Lines with their endings, broken on newline characters only, as ast counts them."""
    lines = text.split("\n")
    result = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        result.append(lines[-1])
    return result


def _dotted_name(node: ast.AST) -> Optional[str]:
    """Dotted name of a reference expression (Name, Attribute, Generic[T], call)."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = _dotted_name(node.value)
        return f"{base}.{node.attr}" if base else node.attr
    if isinstance(node, ast.Subscript):
        return _dotted_name(node.value)
    if isinstance(node, ast.Call):
        return _dotted_name(node.func)
    return None


def _call_name(call: ast.Call) -> Optional[str]:
    func = call.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return None


class Segmenter:
    """Extract file, type and function chunks from a source tree."""

    def __init__(
        self,
        max_chunk_tokens: int = 7000,
        excluded_dirs: frozenset[str] = EXCLUDED_DIRS,
        source_extensions: frozenset[str] = SOURCE_EXTENSIONS,
        doc_extensions: frozenset[str] = DOC_EXTENSIONS,
    ):
        """Initialize segmenter.

        Args:
            max_chunk_tokens: Estimated token ceiling above which chunks are split.
            excluded_dirs: Directory names never descended into.
            source_extensions: Extensions parsed into a syntax tree.
            doc_extensions: Extensions indexed as whole files only.
        """
        self._max_chunk_tokens = max_chunk_tokens
        self._excluded_dirs = excluded_dirs
        self._source_extensions = source_extensions
        self._doc_extensions = doc_extensions

    def discover(self, root: str | Path) -> list[Path]:
        """List eligible files under root, pruning excluded directories.

        Raises:
            SourceRootError: If root is missing or unreadable.
        """
        root_path = Path(root)
        if not root_path.is_dir():
            raise SourceRootError(f"Source directory not found: {root_path}")
        if not os.access(root_path, os.R_OK | os.X_OK):
            raise SourceRootError(f"Source directory is not readable: {root_path}")

        extensions = self._source_extensions | self._doc_extensions
        files: list[Path] = []

        for dirpath, dirnames, filenames in os.walk(root_path):
            dirnames[:] = sorted(d for d in dirnames if d not in self._excluded_dirs)
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if path.suffix.lower() in extensions:
                    files.append(path)

        logger.info(f"Discovered {len(files)} files under {root_path}")
        return files

    def segment(self, root: str | Path) -> list[Chunk]:
        """Chunk every eligible file under root, in discovery order."""
        files = self.discover(root)
        chunks: list[Chunk] = []
        for path in files:
            chunks.extend(self.parse_file(path))
        logger.info(f"Extracted {len(chunks)} chunks from {len(files)} files")
        return chunks

    def parse_file(self, path: str | Path) -> list[Chunk]:
        """Chunk one file: declarations in document order, whole file last.

        A file that does not parse still yields its whole-file chunk.
        """
        path = Path(path)
        source_path = str(path)

        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Skipping unreadable file {source_path}: {e}")
            return []

        lines = split_lines(content)
        if not lines:
            return []

        chunks: list[Chunk] = []
        if path.suffix.lower() in self._source_extensions:
            try:
                tree = ast.parse(content, filename=source_path)
            except (SyntaxError, ValueError, RecursionError) as e:
                logger.warning(f"Failed to parse {source_path}: {e}")
            else:
                self._extract(tree, source_path, lines, None, [], chunks)

        chunks.append(
            Chunk.create(
                content=content,
                source_path=source_path,
                start_line=1,
                end_line=len(lines),
                kind=ChunkKind.FILE,
                name=path.name,
                context_label=f"Full file {path.name}",
            )
        )

        result: list[Chunk] = []
        for chunk in chunks:
            if chunk.token_estimate > self._max_chunk_tokens:
                result.extend(self.split_chunk(chunk))
            else:
                result.append(chunk)
        return result

    def split_chunk(self, chunk: Chunk) -> list[Chunk]:
        """Replace an oversized chunk with ordered line-run parts.

        Part count is ceil(token_estimate / max_chunk_tokens) and each part
        holds ceil(lines / part count) lines, so a part can still exceed the
        ceiling when line lengths are uneven.
        """
        lines = split_lines(chunk.content)
        num_parts = math.ceil(chunk.token_estimate / self._max_chunk_tokens)
        lines_per_part = math.ceil(len(lines) / num_parts)
        runs = [lines[i : i + lines_per_part] for i in range(0, len(lines), lines_per_part)]

        parts: list[Chunk] = []
        for index, run in enumerate(runs):
            start_line = chunk.start_line + index * lines_per_part
            end_line = min(start_line + len(run) - 1, chunk.end_line)
            parts.append(
                Chunk.create(
                    content="".join(run),
                    source_path=chunk.source_path,
                    start_line=start_line,
                    end_line=end_line,
                    kind=chunk.kind,
                    name=chunk.name,
                    context_label=chunk.context_label,
                    parent=chunk.parent,
                    dependency_refs=chunk.dependency_refs,
                    split=SplitInfo(
                        part_index=index + 1,
                        part_total=len(runs),
                        origin_id=chunk.id,
                    ),
                )
            )

        logger.debug(f"Split {chunk.kind.value} {chunk.name} into {len(parts)} parts")
        return parts

    def _extract(
        self,
        node: ast.AST,
        source_path: str,
        lines: list[str],
        parent: Optional[ParentRef],
        scope: list[str],
        chunks: list[Chunk],
    ) -> None:
        if isinstance(node, ast.ClassDef):
            chunk = self._type_chunk(node, source_path, lines, parent, scope)
            chunks.append(chunk)
            child_parent = ParentRef(id=chunk.id, kind=chunk.kind, name=chunk.name)
            for child in node.body:
                self._extract(child, source_path, lines, child_parent, [*scope, node.name], chunks)
        elif isinstance(node, _FUNCTION_NODES):
            chunks.append(self._function_chunk(node, source_path, lines, parent))
        else:
            for child in ast.iter_child_nodes(node):
                self._extract(child, source_path, lines, parent, scope, chunks)

    @staticmethod
    def _span(node: ast.AST) -> tuple[int, int]:
        decorators = getattr(node, "decorator_list", [])
        start = min([node.lineno, *(d.lineno for d in decorators)])
        return start, node.end_lineno or node.lineno

    def _type_chunk(
        self,
        node: ast.ClassDef,
        source_path: str,
        lines: list[str],
        parent: Optional[ParentRef],
        scope: list[str],
    ) -> Chunk:
        start, end = self._span(node)
        name = ".".join([*scope, node.name])
        return Chunk.create(
            content="".join(lines[start - 1 : end]),
            source_path=source_path,
            start_line=start,
            end_line=end,
            kind=ChunkKind.TYPE,
            name=name,
            context_label=f"Class {name} in {Path(source_path).name}",
            parent=parent,
            dependency_refs=self._type_dependencies(node),
        )

    def _function_chunk(
        self,
        node: ast.FunctionDef | ast.AsyncFunctionDef,
        source_path: str,
        lines: list[str],
        parent: Optional[ParentRef],
    ) -> Chunk:
        start, end = self._span(node)
        file_name = Path(source_path).name
        if parent:
            label = f"Method {node.name} of {parent.name} in {file_name}"
        else:
            label = f"Function {node.name} in {file_name}"
        return Chunk.create(
            content="".join(lines[start - 1 : end]),
            source_path=source_path,
            start_line=start,
            end_line=end,
            kind=ChunkKind.FUNCTION,
            name=node.name,
            context_label=label,
            parent=parent,
            dependency_refs=self._call_dependencies(node),
        )

    @staticmethod
    def _type_dependencies(node: ast.ClassDef) -> tuple[str, ...]:
        """Base classes, metaclass, and capitalised constructors assigned in the body."""
        refs: list[str] = []
        for base in node.bases:
            name = _dotted_name(base)
            if name:
                refs.append(name)
        for keyword in node.keywords:
            if keyword.arg == "metaclass":
                name = _dotted_name(keyword.value)
                if name:
                    refs.append(name)
        for stmt in node.body:
            value = getattr(stmt, "value", None)
            if isinstance(stmt, (ast.Assign, ast.AnnAssign)) and isinstance(value, ast.Call):
                name = _dotted_name(value.func)
                if name and name.rsplit(".", 1)[-1][:1].isupper():
                    refs.append(name)
        return tuple(dict.fromkeys(refs))

    @staticmethod
    def _call_dependencies(node: ast.AST) -> tuple[str, ...]:
        """Names called anywhere in the subtree, in source order."""
        calls = [n for n in ast.walk(node) if isinstance(n, ast.Call)]
        calls.sort(key=lambda c: (c.lineno, c.col_offset))
        refs = []
        for call in calls:
            name = _call_name(call)
            if name and name not in COMMON_CALLS:
                refs.append(name)
        return tuple(dict.fromkeys(refs))
