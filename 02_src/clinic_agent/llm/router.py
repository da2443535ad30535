"""Generation router: one backend chosen at construction, one error taxonomy."""

import asyncio
import time
from enum import Enum
from typing import Protocol

from ..logging_config import get_logger
from ..models import Stage, UserProfile
from .adapters import AnthropicAdapter, GoogleAdapter, IBackendAdapter, OpenAIAdapter
from .adapters import anthropic_adapter, google_adapter, openai_adapter
from .bundle import PromptBundle
from .errors import ConfigurationError, GenerationError, TransientError, UnknownError

logger = get_logger(__name__)


class Backend(str, Enum):
    """Supported generation providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


_ADAPTERS = {
    Backend.OPENAI: (OpenAIAdapter, openai_adapter.DEFAULT_PARAMS),
    Backend.ANTHROPIC: (AnthropicAdapter, anthropic_adapter.DEFAULT_PARAMS),
    Backend.GOOGLE: (GoogleAdapter, google_adapter.DEFAULT_PARAMS),
}

CONNECTION_TEST_PROMPT = 'Responda apenas com "OK" se você está funcionando.'


class IGenerationRouter(Protocol):
    """Abstraction for text generation."""

    async def generate(self, bundle: PromptBundle) -> str:
        """Generate a reply or raise a GenerationError."""
        ...


class GenerationRouter:
    """Selects exactly one adapter and normalizes its failures."""

    def __init__(
        self,
        backend: Backend | str | None,
        api_key: str | None,
        *,
        timeout: float = 30.0,
        history_window: int = 10,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ):
        self._backend = self._resolve(backend)
        if self._backend is None:
            raise ConfigurationError(f"Unknown AI provider: {backend}")
        if not api_key:
            raise ConfigurationError(f"API key not provided for {self._backend.value}")

        adapter_cls, default_params = _ADAPTERS[self._backend]
        logger.info("Initializing %s adapter", adapter_cls.__name__)
        self._adapter: IBackendAdapter = adapter_cls(
            api_key,
            params=default_params.override(max_tokens, temperature),
            timeout=timeout,
        )
        self._timeout = timeout
        self._history_window = history_window
        self.last_latency_ms: float | None = None

    @staticmethod
    def _resolve(backend: Backend | str | None) -> Backend | None:
        if isinstance(backend, Backend):
            return backend
        if not backend:
            return None
        try:
            return Backend(backend.strip().lower())
        except ValueError:
            return None

    @property
    def backend(self) -> Backend:
        return self._backend

    async def generate(self, bundle: PromptBundle) -> str:
        """Invoke the adapter under a timeout. No retries."""
        recent = bundle.recent(self._history_window)
        started = time.perf_counter()
        try:
            text = await asyncio.wait_for(
                self._adapter.generate_response(bundle, recent),
                timeout=self._timeout,
            )
        except GenerationError as e:
            logger.error(
                "Generation failed (%s): %s",
                self._backend.value,
                e,
                extra={"context": {"provider": self._backend.value, "kind": e.kind.value}},
            )
            raise
        except asyncio.TimeoutError as e:
            logger.error("Generation timed out after %.1fs", self._timeout)
            raise TransientError(
                f"{self._backend.value} did not answer within {self._timeout}s"
            ) from e
        except Exception as e:
            logger.error("Unclassified %s failure: %r", self._backend.value, e, exc_info=True)
            raise UnknownError(f"{self._backend.value} failure: {e}") from e
        finally:
            self.last_latency_ms = (time.perf_counter() - started) * 1000

        logger.info(
            "AI response generated in %.0fms",
            self.last_latency_ms,
            extra={
                "context": {
                    "provider": self._backend.value,
                    "latency_ms": round(self.last_latency_ms, 1),
                }
            },
        )
        return text

    async def test_connection(self) -> bool:
        """Ask the backend for a trivial reply."""
        bundle = PromptBundle(
            persona=CONNECTION_TEST_PROMPT,
            stage=Stage.GREETING,
            guidance="",
            profile=UserProfile(contact="connection-test"),
            current_text=CONNECTION_TEST_PROMPT,
        )
        try:
            response = await self.generate(bundle)
        except GenerationError:
            return False
        return "ok" in response.lower()

    def info(self) -> dict:
        return {
            "provider": self._backend.value,
            "is_configured": True,
            "adapter_type": type(self._adapter).__name__,
        }

    async def aclose(self) -> None:
        await self._adapter.aclose()
