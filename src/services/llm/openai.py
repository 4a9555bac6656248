import logging

from openai import OpenAI

from src.services.llm.base import LLMService, T

logger = logging.getLogger("pickup_intake.llm")


class OpenAILLM(LLMService):
    """OpenAI-compatible chat model used to read fields out of OCR text."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = 60.0,
    ):
        self._model = model
        self._client = OpenAI(base_url=base_url, api_key=api_key, timeout=timeout, max_retries=0)

    def structured_output(self, messages: list[dict], response_model: type[T]) -> T:
        completion = self._client.beta.chat.completions.parse(
            model=self._model,
            messages=messages,
            response_format=response_model,
            temperature=0,
        )
        message = completion.choices[0].message
        if message.parsed is None:
            logger.warning(f"Model {self._model} returned no parsable {response_model.__name__}")
            raise ValueError(f"LLM refused to respond or failed to parse into {response_model.__name__}")
        return message.parsed
