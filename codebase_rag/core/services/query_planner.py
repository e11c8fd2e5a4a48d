"""Query planner - question expansion and keyword extraction."""

import logging

from ..models.chunk import Chunk
from ..models.retrieval import RankedCandidate
from ..protocols.llm import LLMProtocol
from ..strategies.parsing import (
    parse_expansion,
    parse_keywords,
    supplement_keywords,
)
from ..strategies.scoring import KeywordMatchScorer

logger = logging.getLogger(__name__)

EXPAND_SYSTEM_PROMPT = """You expand search queries for a code search engine.
Analyse the question and add technical terms, class names, function names and
concepts that would help find the relevant code, keeping the original intent.

Output format:
1. The original question, unchanged
2. A newline
3. 5-10 related keywords separated by spaces

Example:
How does user authentication work?
authenticate login password session token hash credentials verify user oauth"""

KEYWORDS_SYSTEM_PROMPT = """You extract search keywords from questions about a codebase.
Focus on class names, function names, variable names and technical terms.
Output only the keywords, one per line, 5-10 single words."""


class QueryPlanner:
    """Turns a question into search inputs, with local fallbacks."""

    def __init__(self, llm: LLMProtocol, scorer: KeywordMatchScorer | None = None):
        """Initialize planner.

        Args:
            llm: Language-model collaborator.
            scorer: Keyword scorer used by keyword_search.
        """
        self._llm = llm
        self._scorer = scorer or KeywordMatchScorer()

    def expand(self, question: str) -> str:
        """Append model-suggested keywords to the question."""
        response = self._llm.complete(EXPAND_SYSTEM_PROMPT, "", question)
        expanded = parse_expansion(question, response)
        if expanded == question:
            logger.warning(f"[planner] Expansion fell back to original: '{question[:50]}'")
        else:
            logger.info(f"[planner] Expanded: '{expanded[:80]}'")
        return expanded

    def extract_keywords(self, question: str) -> list[str]:
        """Model-extracted keywords, topped up from the question when too few."""
        response = self._llm.complete(KEYWORDS_SYSTEM_PROMPT, "", question)
        keywords = supplement_keywords(question, parse_keywords(response))
        logger.info(f"[planner] Keywords: {keywords}")
        return keywords

    def keyword_search(self, keywords: list[str], chunks: list[Chunk]) -> list[Chunk]:
        """Chunks matching any keyword, best score first."""
        return [c.chunk for c in self.rank_by_keywords(keywords, chunks)]

    def rank_by_keywords(
        self, keywords: list[str], chunks: list[Chunk]
    ) -> list[RankedCandidate]:
        return self._scorer.rank(keywords, chunks)
