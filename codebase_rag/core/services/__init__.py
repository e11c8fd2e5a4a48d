"""Core business services."""
from .segmenter import Segmenter
from .hierarchy_service import HierarchyIndex
from .query_planner import QueryPlanner
from .retrieval_service import RetrievalService, merge_results
from .context_assembler import ContextAssembler
from .answer_service import AnswerService
from .grouping_service import SemanticGrouper
from .ingest_service import IngestService
from .query_service import QueryService
from .evaluation_service import EvaluationService, aggregate_evaluations
from .feedback_service import FeedbackService, generate_feedback_id

__all__ = [
    "Segmenter",
    "HierarchyIndex",
    "QueryPlanner",
    "RetrievalService",
    "merge_results",
    "ContextAssembler",
    "AnswerService",
    "SemanticGrouper",
    "IngestService",
    "QueryService",
    "EvaluationService",
    "aggregate_evaluations",
    "FeedbackService",
    "generate_feedback_id",
]
