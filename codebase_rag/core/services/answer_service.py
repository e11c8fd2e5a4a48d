"""Answer service - final synthesis from context and question."""

import logging

from ..protocols.llm import LLMProtocol

logger = logging.getLogger(__name__)

ERROR_PREFIX = "An error occurred"

ANSWER_SYSTEM_PROMPT = """You are an expert assistant answering questions about a codebase.

Answer the question specifically and accurately using the code context below.
When explaining code, cite the relevant file names and line numbers and include
concrete implementation details.

Structure:
1. Start with a short summary that answers the question directly.
2. Then explain the relevant code in detail.
3. Where useful, describe usage examples or the execution flow.
4. Finish with related components or caveats, if any.

If you do not know, say so plainly. Do not guess or present uncertain information as fact.
When explaining intent or design, reason from the structure and naming of the code."""


def format_error(error: Exception) -> str:
    return f"{ERROR_PREFIX}: {error}"


class AnswerService:
    """Delegates synthesis to the language model; faults become text."""

    def __init__(self, llm: LLMProtocol, system_prompt: str = ANSWER_SYSTEM_PROMPT):
        self._llm = llm
        self._system_prompt = system_prompt

    def synthesize(self, context: str, question: str) -> str:
        """Raw model answer, or an "An error occurred: ..." string on failure."""
        try:
            return self._llm.complete(self._system_prompt, context, question)
        except Exception as e:
            logger.error(f"Answer synthesis failed: {e}")
            return format_error(e)
