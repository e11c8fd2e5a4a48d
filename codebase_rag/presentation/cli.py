import argparse
import json
import logging
import sys
from pathlib import Path

from codebase_rag.config.settings import settings
from codebase_rag.container import EVALUATION_LOG, configure_container, container
from codebase_rag.core.protocols.vector_store import VectorStoreProtocol
from codebase_rag.core.services.evaluation_service import aggregate_evaluations
from codebase_rag.core.services.feedback_service import FeedbackService
from codebase_rag.core.services.hierarchy_service import (
    HIERARCHY_TEXT_FILE,
    HierarchyIndex,
)
from codebase_rag.core.services.ingest_service import IngestService, read_metadata
from codebase_rag.core.services.query_service import QueryService
from codebase_rag.exceptions import CodebaseRagError

logger = logging.getLogger(__name__)


def cmd_build(args: argparse.Namespace) -> None:
    """Build command - chunk, embed and persist a source tree."""
    if args.semantic_groups:
        settings.semantic_groups = True
    configure_container(settings, args.output)

    ingest_service = container.resolve(IngestService)
    result = ingest_service.run(args.src, args.output)

    print(f"Indexed {result.chunk_count} chunks ({result.embedding_count} embeddings)")
    print(f"Snapshot: {result.output_path}")


def cmd_query(args: argparse.Namespace) -> None:
    """Query command - answer one question from a built snapshot."""
    configure_container(settings, args.data)

    metadata = read_metadata(args.data)
    if metadata:
        logger.info(
            f"Index: {metadata.chunk_count} chunks from {metadata.source_dir} "
            f"(built {metadata.created_at.isoformat()}, {metadata.model_name})"
        )

    query_service = container.resolve(QueryService)
    query_service.load(args.data)
    print(query_service.ask(args.question, evaluate=args.evaluate, feedback=args.feedback))


def cmd_evaluate(args: argparse.Namespace) -> None:
    """Evaluate command - summarize logged evaluations."""
    stats = aggregate_evaluations(Path(args.data) / EVALUATION_LOG)
    if not stats:
        print("No evaluations logged yet.")
        return
    print(json.dumps(stats, indent=2, ensure_ascii=False))


def cmd_feedback_stats(args: argparse.Namespace) -> None:
    """Feedback stats command - summarize recorded ratings."""
    configure_container(settings, args.data)
    stats = container.resolve(FeedbackService).aggregate_feedback()
    if not stats:
        print("No feedback recorded yet.")
        return
    print(json.dumps(stats, indent=2, ensure_ascii=False))


def cmd_feedback(args: argparse.Namespace) -> None:
    """Feedback command - rate an answer given in feedback mode."""
    configure_container(settings, args.data)
    feedback_service = container.resolve(FeedbackService)
    try:
        entry = feedback_service.record_for_id(args.id, args.rating, args.comment)
    except KeyError as e:
        raise CodebaseRagError(str(e.args[0])) from e
    print(f"Feedback {entry.id} recorded (rating {entry.rating})")


def cmd_hierarchy(args: argparse.Namespace) -> None:
    """Hierarchy command - print the chunk tree of a built snapshot."""
    tree_path = Path(args.data) / HIERARCHY_TEXT_FILE
    if tree_path.exists():
        print(tree_path.read_text(encoding="utf-8"))
        return

    configure_container(settings, args.data)
    query_service = container.resolve(QueryService)
    query_service.load(args.data)
    chunks = container.resolve(VectorStoreProtocol).all_chunks()
    print(HierarchyIndex(chunks).render_tree())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codebase-rag", description="Index a codebase and answer questions about it."
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Index a source tree")
    build.add_argument("--src", required=True, help="Source directory")
    build.add_argument("--output", default=settings.data_dir, help="Output directory")
    build.add_argument("--semantic-groups", action="store_true", help="Add semantic group chunks")
    build.set_defaults(func=cmd_build)

    query = subparsers.add_parser("query", help="Answer a question")
    query.add_argument("question")
    query.add_argument("--data", default=settings.data_dir, help="RAG data directory")
    query.add_argument("--evaluate", action="store_true", help="Evaluate the answer")
    query.add_argument("--feedback", action="store_true", help="Collect feedback for the answer")
    query.set_defaults(func=cmd_query)

    evaluate = subparsers.add_parser("evaluate", help="Show evaluation statistics")
    evaluate.add_argument("--data", default=settings.data_dir, help="RAG data directory")
    evaluate.set_defaults(func=cmd_evaluate)

    stats = subparsers.add_parser("feedback-stats", help="Show feedback statistics")
    stats.add_argument("--data", default=settings.data_dir, help="RAG data directory")
    stats.set_defaults(func=cmd_feedback_stats)

    feedback = subparsers.add_parser("feedback", help="Rate an answer")
    feedback.add_argument("id", help="Feedback id printed with the answer")
    feedback.add_argument("rating", type=int, choices=range(1, 6), help="Rating from 1 to 5")
    feedback.add_argument("--comment", default=None)
    feedback.add_argument("--data", default=settings.data_dir, help="RAG data directory")
    feedback.set_defaults(func=cmd_feedback)

    hierarchy = subparsers.add_parser("hierarchy", help="Print the chunk hierarchy")
    hierarchy.add_argument("--data", default=settings.data_dir, help="RAG data directory")
    hierarchy.set_defaults(func=cmd_hierarchy)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s"
    )

    try:
        args.func(args)
    except CodebaseRagError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
