"""Anthropic Claude adapter (messages API)."""

import anthropic

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

DEFAULT_PARAMS = GenerationParams(max_tokens=1000, temperature=0.7)
FALLBACK_GREETING = "Olá"


class AnthropicAdapter:
    """Sends the persona as ``system`` and the dialogue as role-tagged messages."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        params: GenerationParams = DEFAULT_PARAMS,
        timeout: float = 30.0,
    ):
        self._model = model
        self._params = params
        # Retries are left to the caller.
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout,
            max_retries=0,
        )

    async def generate_response(
        self,
        bundle: PromptBundle,
        recent_history: list[Turn],
    ) -> str:
        """Generate completion using the Claude messages API."""
        logger.debug("Sending request to Anthropic")
        try:
            response = await self._client.messages.create(
                model=self._model,
                system=bundle.system_prompt,
                messages=self.format_messages(bundle, recent_history),
                max_tokens=self._params.max_tokens,
                temperature=self._params.temperature,
            )
        except anthropic.APIStatusError as e:
            retry_after = parse_retry_after(e.response.headers.get("retry-after"))
            raise classify_status(e.status_code, str(e), retry_after) from e
        except anthropic.APIConnectionError as e:
            raise TransientError(f"Anthropic connection error: {e}") from e
        except anthropic.APIError as e:
            raise UnknownError(f"Anthropic API error: {e}") from e

        try:
            text = response.content[0].text
        except (AttributeError, IndexError, TypeError) as e:
            raise UnknownError(f"Unexpected Anthropic payload: {response!r}") from e
        if not isinstance(text, str):
            raise UnknownError(f"Unexpected Anthropic payload: {response!r}")

        return text.strip()

    @staticmethod
    def format_messages(bundle: PromptBundle, recent_history: list[Turn]) -> list[dict]:
        """Build an alternating user/assistant list that starts with the user."""
        pairs = [
            ("assistant" if turn.role == "assistant" else "user", turn.text)
            for turn in recent_history
        ]
        already_sent = bool(pairs) and pairs[-1] == ("user", bundle.current_text)
        if bundle.current_text and not already_sent:
            pairs.append(("user", bundle.current_text))

        messages: list[dict] = []
        for role, content in pairs:
            if not messages and role == "assistant":
                continue
            if messages and messages[-1]["role"] == role:
                messages[-1]["content"] += f"\n{content}"
            else:
                messages.append({"role": role, "content": content})

        if not messages:
            messages.append({"role": "user", "content": FALLBACK_GREETING})

        return messages

    async def aclose(self) -> None:
        await self._client.close()
