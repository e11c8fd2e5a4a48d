"""Query service - answer a question from a loaded index snapshot."""

import logging
from pathlib import Path
from typing import Optional

from ...exceptions import SnapshotNotFoundError
from ..protocols.vector_store import VectorStoreProtocol
from .answer_service import AnswerService, format_error
from .context_assembler import ContextAssembler
from .evaluation_service import EvaluationService
from .feedback_service import FeedbackService
from .ingest_service import SNAPSHOT_FILE
from .retrieval_service import RetrievalService

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "No relevant code was found for this question."

FEEDBACK_GUIDE = """

---
Feedback id: {feedback_id}
Rate this answer from 1 to 5 with:
  codebase-rag feedback {feedback_id} <rating> [--comment "..."]"""


class QueryService:
    """Query entry point: retrieve, assemble, synthesize."""

    def __init__(
        self,
        vector_store: VectorStoreProtocol,
        retrieval: RetrievalService,
        assembler: ContextAssembler,
        answer: AnswerService,
        evaluation: Optional[EvaluationService] = None,
        feedback: Optional[FeedbackService] = None,
        debug: bool = False,
    ):
        """Initialize query service.

        Args:
            vector_store: Store the snapshot is loaded into.
            retrieval: Multi-stage retrieval.
            assembler: Context packing.
            answer: Final synthesis.
            evaluation: Answer evaluation, used when asked to evaluate.
            feedback: Feedback store, used in feedback mode.
            debug: Append evaluation scores to the answer.
        """
        self._vector_store = vector_store
        self._retrieval = retrieval
        self._assembler = assembler
        self._answer = answer
        self._evaluation = evaluation
        self._feedback = feedback
        self._debug = debug

    def load(self, data_dir: str | Path) -> int:
        """Load the snapshot from data_dir into the vector store.

        Raises:
            SnapshotNotFoundError: If no snapshot exists in data_dir.
        """
        path = Path(data_dir) / SNAPSHOT_FILE
        if not path.exists():
            raise SnapshotNotFoundError(
                f"RAG data not found: {path}. Run 'codebase-rag build' first."
            )
        self._vector_store.load(path)
        return self._vector_store.count()

    def ask(self, question: str, evaluate: bool = False, feedback: bool = False) -> str:
        """Answer a question; faults come back as "An error occurred: ..." text."""
        try:
            return self._ask(question, evaluate, feedback)
        except Exception as e:
            logger.error(f"Query failed for '{question[:50]}': {e}")
            return format_error(e)

    def _ask(self, question: str, evaluate: bool, feedback: bool) -> str:
        chunks = self._retrieval.retrieve(question)
        if not chunks:
            return NOT_FOUND_MESSAGE

        context = self._assembler.build(chunks)
        answer = self._answer.synthesize(context, question)

        if evaluate and self._evaluation is not None:
            answer = self._evaluate(question, answer, context)

        if feedback and self._feedback is not None:
            feedback_id = self._feedback.remember_answer(question, answer)
            answer += FEEDBACK_GUIDE.format(feedback_id=feedback_id)

        return answer

    def _evaluate(self, question: str, answer: str, context: str) -> str:
        """Log an evaluation; the answer only changes in debug mode."""
        try:
            evaluation = self._evaluation.evaluate(question, answer, context)
            self._evaluation.log(question, answer, context, evaluation)
        except Exception as e:
            logger.warning(f"Evaluation failed: {e}")
            return answer

        if self._debug and not evaluation.is_empty:
            return f"{answer}\n\n---\nEvaluation:\n{evaluation.to_text()}"
        return answer
