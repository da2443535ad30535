"""OpenAI chat completions adapter."""

import openai

from ...logging_config import get_logger
from ...models import Turn
from ..bundle import PromptBundle
from ..errors import (
    TransientError,
    UnknownError,
    classify_status,
    parse_retry_after,
)
from .base import GenerationParams

logger = get_logger(__name__)

DEFAULT_PARAMS = GenerationParams(
    max_tokens=1000,
    temperature=0.7,
    presence_penalty=0.6,
    frequency_penalty=0.3,
)


class OpenAIAdapter:
    """Full rendered prompt as the system message, then recent turns."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4-turbo-preview",
        params: GenerationParams = DEFAULT_PARAMS,
        timeout: float = 30.0,
    ):
        self._model = model
        self._params = params
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout,
            max_retries=0,
        )

    async def generate_response(
        self,
        bundle: PromptBundle,
        recent_history: list[Turn],
    ) -> str:
        logger.debug("Sending request to OpenAI")
        try:
            completion = await self._client.chat.completions.create(
                model=self._model,
                messages=self.format_messages(bundle, recent_history),
                max_tokens=self._params.max_tokens,
                temperature=self._params.temperature,
                presence_penalty=self._params.presence_penalty,
                frequency_penalty=self._params.frequency_penalty,
            )
        except openai.APIStatusError as e:
            retry_after = parse_retry_after(e.response.headers.get("retry-after"))
            raise classify_status(e.status_code, str(e), retry_after) from e
        except openai.APIConnectionError as e:
            raise TransientError(f"OpenAI connection error: {e}") from e
        except openai.OpenAIError as e:
            raise UnknownError(f"OpenAI API error: {e}") from e

        try:
            text = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise UnknownError(f"Unexpected OpenAI payload: {completion!r}") from e
        if not isinstance(text, str):
            raise UnknownError(f"Unexpected OpenAI payload: {completion!r}")

        return text.strip()

    @staticmethod
    def format_messages(bundle: PromptBundle, recent_history: list[Turn]) -> list[dict]:
        messages = [{"role": "system", "content": bundle.rendered}]
        messages.extend(
            {"role": turn.role, "content": turn.text}
            for turn in recent_history
            if turn.role in ("user", "assistant")
        )
        return messages

    async def aclose(self) -> None:
        await self._client.close()
