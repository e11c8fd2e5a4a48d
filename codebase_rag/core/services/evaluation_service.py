"""Evaluation service - LLM-judged answer quality with a JSON-lines log."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..models.evaluation import METRICS, Evaluation
from ..protocols.llm import LLMProtocol
from ..strategies.parsing import parse_evaluation

logger = logging.getLogger(__name__)

CONTEXT_PREVIEW_CHARS = 1000

EVALUATE_SYSTEM_PROMPT = """You evaluate answers produced by a retrieval-augmented code assistant.
Given the question, the answer and (part of) the context, score:

relevance: 0-10, does the answer address the question
accuracy: 0-10, is the answer correct according to the context
completeness: 0-10, does the answer cover every aspect of the question
conciseness: 0-10, is the answer clear and to the point
code_references: 0-10, does the answer cite the code appropriately

Output format:
relevance: score - explanation
accuracy: score - explanation
completeness: score - explanation
conciseness: score - explanation
code_references: score - explanation

overall: score

suggestions:
improvement suggestions"""

EVALUATE_CONTEXT = """Question:
{question}

Context (excerpt):
{context}...

Answer:
{answer}"""


def _overall_or(entry: dict[str, Any], default: int) -> int:
    score = entry["evaluation"].get("overall")
    return default if score is None else score


def aggregate_evaluations(log_path: str | Path) -> dict[str, Any]:
    """Per-metric average/count/min/max plus best and worst examples.

    Returns an empty dict when the log is missing or empty.
    """
    log_path = Path(log_path)
    if not log_path.exists():
        return {}
    with open(log_path, "r", encoding="utf-8") as f:
        entries = [json.loads(line) for line in f if line.strip()]
    if not entries:
        return {}

    aggregated: dict[str, Any] = {}
    for metric in (*METRICS, "overall"):
        if metric == "overall":
            scores = [e["evaluation"].get("overall") for e in entries]
        else:
            scores = [
                e["evaluation"].get("metrics", {}).get(metric, {}).get("score")
                for e in entries
            ]
        scores = [s for s in scores if s is not None]
        if not scores:
            continue
        aggregated[metric] = {
            "average": sum(scores) / len(scores),
            "count": len(scores),
            "min": min(scores),
            "max": max(scores),
        }

    best = max(entries, key=lambda e: _overall_or(e, 0))
    worst = min(entries, key=lambda e: _overall_or(e, 10))
    aggregated["examples"] = {
        "best": {
            "question": best["question"],
            "answer": best["answer"],
            "score": best["evaluation"].get("overall"),
        },
        "worst": {
            "question": worst["question"],
            "answer": worst["answer"],
            "score": worst["evaluation"].get("overall"),
        },
    }
    return aggregated


class EvaluationService:
    """Scores answers and aggregates the evaluation log."""

    def __init__(self, llm: LLMProtocol, log_path: str | Path):
        """Initialize evaluation service.

        Args:
            llm: Language-model collaborator acting as judge.
            log_path: JSON-lines file evaluations are appended to.
        """
        self._llm = llm
        self._log_path = Path(log_path)

    @property
    def log_path(self) -> Path:
        return self._log_path

    def evaluate(self, question: str, answer: str, context: str) -> Evaluation:
        evaluation_context = EVALUATE_CONTEXT.format(
            question=question,
            context=context[:CONTEXT_PREVIEW_CHARS],
            answer=answer,
        )
        response = self._llm.complete(
            EVALUATE_SYSTEM_PROMPT, evaluation_context, "Evaluate this answer."
        )
        return parse_evaluation(response)

    def log(self, question: str, answer: str, context: str, evaluation: Evaluation) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "question": question,
            "answer": answer,
            "context_length": len(context),
            "evaluation": evaluation.to_dict(),
        }
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        logger.info(f"Evaluation logged to {self._log_path}")

    def aggregate(self) -> dict[str, Any]:
        return aggregate_evaluations(self._log_path)
