"""Scoring, parsing and batching strategies."""
from .scoring import KeywordMatchScorer
from .batching import plan_batches
from .parsing import (
    parse_evaluation,
    parse_expansion,
    parse_groups,
    parse_keywords,
    parse_rerank_scores,
    supplement_keywords,
)

__all__ = [
    "KeywordMatchScorer",
    "plan_batches",
    "parse_evaluation",
    "parse_expansion",
    "parse_groups",
    "parse_keywords",
    "parse_rerank_scores",
    "supplement_keywords",
]
