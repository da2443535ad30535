"""Google Gemini adapter over the Generative Language REST API."""

import httpx

from ...logging_config import get_logger
from ...models import Turn
from ..bundle import PromptBundle, render_turns
from ..errors import (
    TransientError,
    UnknownError,
    classify_status,
    parse_retry_after,
)
from .base import GenerationParams

logger = get_logger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_PARAMS = GenerationParams(
    max_tokens=1000,
    temperature=0.7,
    top_p=0.95,
    top_k=40,
)
HISTORY_HEADER = "Histórico Recente:"


class GoogleAdapter:
    """Gemini takes one flattened string: rendered prompt plus recent history."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        params: GenerationParams = DEFAULT_PARAMS,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._model = model
        self._params = params
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def generate_response(
        self,
        bundle: PromptBundle,
        recent_history: list[Turn],
    ) -> str:
        logger.debug("Sending request to Google AI")
        payload = {
            "contents": [{"parts": [{"text": self.format_prompt(bundle, recent_history)}]}],
            "generationConfig": {
                "temperature": self._params.temperature,
                "topK": self._params.top_k,
                "topP": self._params.top_p,
                "maxOutputTokens": self._params.max_tokens,
            },
        }

        try:
            resp = await self._client.post(
                f"{GEMINI_API_URL}/{self._model}:generateContent",
                headers={"x-goog-api-key": self._api_key},
                json=payload,
            )
        except httpx.TransportError as e:
            # Covers timeouts as well as connection failures.
            raise TransientError(f"Google AI transport error: {e}") from e

        if resp.status_code != 200:
            logger.warning("Gemini API returned %s", resp.status_code)
            raise classify_status(
                resp.status_code,
                self._error_message(resp),
                parse_retry_after(resp.headers.get("retry-after")),
            )

        try:
            data = resp.json()
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise UnknownError(f"Unexpected Gemini payload: {resp.text[:500]}") from e

        if not text.strip():
            raise UnknownError(f"Empty Gemini response: {resp.text[:500]}")

        return text.strip()

    @staticmethod
    def format_prompt(bundle: PromptBundle, recent_history: list[Turn]) -> str:
        prompt = bundle.rendered
        if recent_history:
            prompt = f"{prompt}\n\n{HISTORY_HEADER}\n{render_turns(recent_history)}"
        return prompt

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            error = resp.json().get("error", {})
            return f"{error.get('status', '')} {error.get('message', '')}".strip() or resp.text
        except (ValueError, AttributeError):
            return resp.text

    async def aclose(self) -> None:
        await self._client.aclose()
