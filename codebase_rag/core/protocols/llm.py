"""LLM protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for the language-model collaborator."""

    def complete(self, system_prompt: str, context: str, question: str) -> str:
        """Run one blocking completion.

        Args:
            system_prompt: Instruction for the model.
            context: Supporting text (may be empty).
            question: User question or task.

        Returns:
            Raw response text.
        """
        ...
