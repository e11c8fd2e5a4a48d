"""Tests for token-budgeted context assembly."""

from pathlib import Path

from codebase_rag.core.models import ChunkKind, ParentRef, SplitInfo, estimate_tokens
from codebase_rag.core.services.context_assembler import ContextAssembler, group_by_file
from codebase_rag.core.services.segmenter import Segmenter

from conftest import make_chunk


def _function(name: str, source_path: str, start_line: int = 1, body: str = "    return 1\n"):
    return make_chunk(
        name=name,
        content=f"def {name}():\n{body}",
        source_path=source_path,
        start_line=start_line,
    )


class TestOverview:
    """Test the file overview unit."""

    def test_overview_lines(self):
        chunks = [
            make_chunk(name="Greeter", kind=ChunkKind.TYPE, source_path="a.py"),
            _function("greet", "a.py"),
            _function("one", "b.py"),
            _function("two", "b.py"),
            _function("three", "b.py"),
            _function("four", "b.py"),
            make_chunk(name="README.md", kind=ChunkKind.FILE, source_path="README.md"),
        ]
        overview = ContextAssembler().build_overview(group_by_file(chunks))

        assert overview.splitlines() == [
            "# Codebase overview",
            "",
            "- a.py: Greeter",
            "- b.py: functions one, two, three",
            "- README.md",
            "",
        ]

    def test_overview_skipped_when_too_large(self):
        chunks = [_function("greet", "a.py")]
        context = ContextAssembler(budget=8000, overview_ratio=0.0).build(chunks)
        assert "# Codebase overview" not in context


class TestRenderChunk:
    """Test per-chunk rendering."""

    def test_part_and_parent(self):
        chunk = make_chunk(
            name="greet",
            content="def greet(self):\n    pass\n",
            source_path="app/greeter.py",
            start_line=5,
            parent=ParentRef(id="abc123def456", kind=ChunkKind.TYPE, name="Greeter"),
            split=SplitInfo(part_index=2, part_total=3, origin_id="0123456789ab"),
        )
        rendered = ContextAssembler.render_chunk(chunk)

        assert rendered.startswith("### Function: greet\nLines: 5-6\nPart: 2/3\nParent: type Greeter\n")
        assert "```python\ndef greet(self):\n    pass\n```" in rendered


class TestBuild:
    """Test packing order and budget handling."""

    def test_empty(self):
        assert ContextAssembler().build([]) == ""

    def test_files_in_rank_order_chunks_by_priority(self, sample_source_tree: Path):
        chunks = Segmenter().parse_file(sample_source_tree / "app" / "greeter.py")
        greeter, _, greet, _, whole = chunks
        readme = Segmenter().parse_file(sample_source_tree / "README.md")[0]

        context = ContextAssembler().build([greet, readme, greeter, whole])

        assert context.index("# Codebase overview") == 0
        assert context.index(f"## File: {greet.source_path}") < context.index(
            f"## File: {readme.source_path}"
        )
        assert (
            context.index("### File: greeter.py")
            < context.index("### Type: Greeter")
            < context.index("### Function: greet")
        )

    def test_notice_then_next_file(self):
        """Test that an oversized chunk leaves a notice and packing moves on."""
        small = _function("a1", "a.py", start_line=1)
        huge = _function("a2", "a.py", start_line=10, body="    x = 1\n" * 300)
        other = _function("b1", "b.py")

        context = ContextAssembler(budget=300, overview_ratio=0.0).build([small, huge, other])

        assert "### Function: a1" in context
        assert "Function a2 omitted: too long for the remaining context budget." in context
        assert "### Function: b1" in context
        assert estimate_tokens(context) <= 300

    def test_stops_when_budget_nearly_spent(self):
        small = _function("a1", "a.py", start_line=1)
        huge = _function("a2", "a.py", start_line=10, body="    x = 1\n" * 300)
        other = _function("b1", "b.py")

        context = ContextAssembler(budget=120, overview_ratio=0.0).build([small, huge, other])

        assert "### Function: a1" in context
        assert "omitted" not in context
        assert "b.py" not in context

    def test_nothing_fits(self):
        chunks = [_function("a1", "a.py")]
        assert ContextAssembler(budget=3).build(chunks) == ""

    def test_never_exceeds_budget(self):
        chunks = [
            _function(f"f{i}", f"mod{i % 4}.py", start_line=i, body="    x = 1\n" * (i % 7 + 1))
            for i in range(40)
        ]
        for budget in (50, 200, 500, 1000):
            context = ContextAssembler(budget=budget).build(chunks)
            assert estimate_tokens(context) <= budget
