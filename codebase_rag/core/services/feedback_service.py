"""Feedback service - collect and aggregate user ratings of answers."""

import hashlib
import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..models.evaluation import FeedbackEntry

logger = logging.getLogger(__name__)

MAX_EXAMPLES = 3


def generate_feedback_id(question: str, answer: str) -> str:
    return hashlib.md5(f"{question}:{answer}".encode("utf-8")).hexdigest()[:8]


def _append_json_line(path: Path, entry: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(entry, ensure_ascii=False) + "\n")


def _read_json_lines(path: Path) -> list[dict[str, Any]]:
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


class FeedbackService:
    """Stores answers awaiting feedback and the ratings given for them."""

    def __init__(self, log_path: str | Path, answers_path: str | Path):
        """Initialize feedback service.

        Args:
            log_path: JSON-lines file of feedback entries.
            answers_path: JSON-lines file of answers given in feedback mode.
        """
        self._log_path = Path(log_path)
        self._answers_path = Path(answers_path)

    @property
    def log_path(self) -> Path:
        return self._log_path

    def remember_answer(self, question: str, answer: str) -> str:
        """Store an answer so feedback can later refer to it by id."""
        feedback_id = generate_feedback_id(question, answer)
        _append_json_line(
            self._answers_path,
            {"id": feedback_id, "question": question, "answer": answer},
        )
        return feedback_id

    def find_answer(self, feedback_id: str) -> Optional[dict[str, Any]]:
        for entry in _read_json_lines(self._answers_path):
            if entry.get("id") == feedback_id:
                return entry
        return None

    def record_feedback(
        self, question: str, answer: str, rating: int, comment: Optional[str] = None
    ) -> FeedbackEntry:
        """Append a rating (1-5) for an answer."""
        if not 1 <= rating <= 5:
            raise ValueError(f"Rating must be between 1 and 5, got {rating}")

        entry = FeedbackEntry(
            id=generate_feedback_id(question, answer),
            timestamp=datetime.now(timezone.utc).isoformat(),
            question=question,
            answer=answer,
            rating=rating,
            comment=comment,
        )
        _append_json_line(self._log_path, entry.__dict__)
        logger.info(f"Feedback {entry.id} recorded (rating={rating})")
        return entry

    def record_for_id(
        self, feedback_id: str, rating: int, comment: Optional[str] = None
    ) -> FeedbackEntry:
        """Rate a remembered answer by its feedback id."""
        remembered = self.find_answer(feedback_id)
        if remembered is None:
            raise KeyError(f"No answer found for feedback id {feedback_id}")
        return self.record_feedback(remembered["question"], remembered["answer"], rating, comment)

    def get_feedback(self, feedback_id: str) -> Optional[FeedbackEntry]:
        for entry in _read_json_lines(self._log_path):
            if entry.get("id") == feedback_id:
                return FeedbackEntry(**entry)
        return None

    def aggregate_feedback(self) -> dict[str, Any]:
        """Count, average rating, distribution and best/worst examples."""
        entries = _read_json_lines(self._log_path)
        if not entries:
            return {}

        ratings = [e["rating"] for e in entries]
        return {
            "count": len(entries),
            "average_rating": sum(ratings) / len(ratings),
            "rating_distribution": dict(sorted(Counter(ratings).items())),
            "best_examples": [e for e in entries if e["rating"] == 5][:MAX_EXAMPLES],
            "worst_examples": [e for e in entries if e["rating"] == 1][:MAX_EXAMPLES],
        }
