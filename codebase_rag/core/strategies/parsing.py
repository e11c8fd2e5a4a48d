"""Parsers for free-text language-model responses.

Every parser here is a pure function that never raises: malformed or empty
responses produce the documented fallback value instead.
"""

import re

from ..models.evaluation import Evaluation, MetricScore

KEYWORD_RE = re.compile(r"[A-Za-z0-9_]+")
RERANK_SCORE_RE = re.compile(r"(?:chunk|position)\s*#?\s*(\d+)\s*:\s*(\d+)", re.IGNORECASE)
GROUP_HEADER_RE = re.compile(r"^group\s*\d*\s*:\s*(.+)$", re.IGNORECASE)
METRIC_RE = re.compile(r"^\s*([A-Za-z][A-Za-z _]*?)\s*:\s*(\d+)\s*-\s*(.+)$")
OVERALL_RE = re.compile(r"overall(?:\s+score)?\s*:\s*(\d+)", re.IGNORECASE)
SUGGESTIONS_RE = re.compile(r"suggestions\s*:\s*(.+)", re.IGNORECASE | re.DOTALL)

MIN_KEYWORDS = 3
MIN_LOCAL_KEYWORD_LENGTH = 3


def parse_expansion(question: str, response: str) -> str:
    """Build the expanded question from a two-line expansion response.

    The first line echoes the question and the remaining lines hold
    space-separated keywords. With fewer than two lines the question is
    returned unchanged.
    """
    lines = (response or "").strip().split("\n")
    if len(lines) < 2:
        return question
    keywords = " ".join(line.strip() for line in lines[1:]).strip()
    return f"{question} {keywords}"


def parse_keywords(response: str) -> list[str]:
    """Split a newline-separated keyword response, dropping blank lines."""
    return [line.strip() for line in (response or "").strip().split("\n") if line.strip()]


def supplement_keywords(question: str, keywords: list[str]) -> list[str]:
    """Top up a short keyword list with identifier-like runs from the question."""
    if len(keywords) >= MIN_KEYWORDS:
        return keywords
    local = [w for w in KEYWORD_RE.findall(question) if len(w) >= MIN_LOCAL_KEYWORD_LENGTH]
    return list(dict.fromkeys([*keywords, *local]))


def parse_rerank_scores(response: str, batch_size: int) -> dict[int, int]:
    """Extract `Chunk N: score` lines as {0-based position: score}.

    Positions outside the batch are ignored and the first score given for a
    position wins. An empty dict means nothing could be parsed.
    """
    scores: dict[int, int] = {}
    for match in RERANK_SCORE_RE.finditer(response or ""):
        position = int(match.group(1)) - 1
        if 0 <= position < batch_size and position not in scores:
            scores[position] = int(match.group(2))
    return scores


def _clean_member(name: str) -> str:
    name = name.strip().strip("`").strip()
    if name.endswith("()"):
        name = name[:-2]
    return name


def parse_groups(response: str) -> list[tuple[str, list[str]]]:
    """Extract `Group N: description` headers and their `- name` members.

    Groups without members are dropped.
    """
    groups: list[tuple[str, list[str]]] = []
    current: str | None = None
    members: list[str] = []

    for raw in (response or "").splitlines():
        line = raw.strip()
        header = GROUP_HEADER_RE.match(line)
        if header:
            if current and members:
                groups.append((current, members))
            current = header.group(1).strip()
            members = []
        elif line.startswith("-") and current:
            member = _clean_member(line[1:])
            if member:
                members.append(member)

    if current and members:
        groups.append((current, members))
    return groups


def _metric_key(name: str) -> str:
    return "_".join(name.strip().lower().split())


def parse_evaluation(response: str) -> Evaluation:
    """Parse `metric: score - reason` lines, the overall score and suggestions."""
    evaluation = Evaluation()
    text = response or ""

    for line in text.splitlines():
        match = METRIC_RE.match(line)
        if not match:
            continue
        key = _metric_key(match.group(1))
        if key in ("overall", "overall_score"):
            continue
        evaluation.metrics[key] = MetricScore(
            score=int(match.group(2)), explanation=match.group(3).strip()
        )

    overall = OVERALL_RE.search(text)
    if overall:
        evaluation.overall = int(overall.group(1))

    suggestions = SUGGESTIONS_RE.search(text)
    if suggestions:
        evaluation.suggestions = suggestions.group(1).strip()

    return evaluation
