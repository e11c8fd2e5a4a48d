
import logging

from openai import OpenAI

logger = logging.getLogger(__name__)

USER_PROMPT = """Context:

{context}

Question: {question}"""


class OpenAIChatClient:
    """LLM client for any OpenAI-compatible chat completions API."""

    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        api_key: str = "",
        model: str = "gpt-4o-mini",
        max_tokens: int = 2000,
        temperature: float = 0.2,
    ):
        """Initialize client.

        Args:
            base_url: API URL (OpenAI, or e.g. Ollama at http://localhost:11434/v1).
            api_key: API key. Local servers accept any value.
            model: Model name.
            max_tokens: Max response tokens.
            temperature: Sampling temperature.
        """
        self._client = OpenAI(base_url=base_url, api_key=api_key or "not-needed")
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def model_name(self) -> str:
        return self._model

    def complete(self, system_prompt: str, context: str, question: str) -> str:
        """Run one blocking chat completion.

        Args:
            system_prompt: System instruction.
            context: Supporting text.
            question: User question or task.

        Returns:
            Response text (empty if the provider returned none).
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": USER_PROMPT.format(context=context, question=question),
            },
        ]

        response = self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

        content = response.choices[0].message.content if response.choices else None
        logger.debug(f"[llm] {self._model} returned {len(content or '')} chars")
        return content or ""
