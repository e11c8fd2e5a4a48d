"""Evaluation and feedback models."""
from dataclasses import dataclass, field
from typing import Any, Optional

METRICS = (
    "relevance",
    "accuracy",
    "completeness",
    "conciseness",
    "code_references",
)


@dataclass
class MetricScore:
    """Score (0-10) for one evaluation metric."""
    score: int
    explanation: str = ""


@dataclass
class Evaluation:
    """Parsed answer evaluation."""
    metrics: dict[str, MetricScore] = field(default_factory=dict)
    overall: Optional[int] = None
    suggestions: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.metrics and self.overall is None and not self.suggestions

    def to_dict(self) -> dict[str, Any]:
        return {
            "metrics": {
                name: {"score": m.score, "explanation": m.explanation}
                for name, m in self.metrics.items()
            },
            "overall": self.overall,
            "suggestions": self.suggestions,
        }

    def to_text(self) -> str:
        """Render as plain lines for debug output."""
        lines = [f"{name}: {m.score} - {m.explanation}" for name, m in self.metrics.items()]
        if self.overall is not None:
            lines.append(f"overall: {self.overall}")
        if self.suggestions:
            lines.append(f"suggestions: {self.suggestions}")
        return "\n".join(lines)


@dataclass
class FeedbackEntry:
    """User feedback for one answer."""
    id: str
    timestamp: str
    question: str
    answer: str
    rating: int
    comment: Optional[str] = None
