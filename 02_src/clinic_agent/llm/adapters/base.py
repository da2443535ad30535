"""Contract shared by every backend adapter."""

from dataclasses import dataclass, replace
from typing import Protocol

from ...models import Turn
from ..bundle import PromptBundle


@dataclass(frozen=True)
class GenerationParams:
    """Fixed sampling parameters for one backend."""

    max_tokens: int = 1000
    temperature: float = 0.7
    top_p: float | None = None
    top_k: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None

    def override(
        self,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> "GenerationParams":
        """Apply configured overrides, ignoring unset values."""
        changes = {}
        if max_tokens is not None:
            changes["max_tokens"] = max_tokens
        if temperature is not None:
            changes["temperature"] = temperature
        return replace(self, **changes) if changes else self


class IBackendAdapter(Protocol):
    """Backend-specific implementation of the generation capability."""

    async def generate_response(
        self,
        bundle: PromptBundle,
        recent_history: list[Turn],
    ) -> str:
        """Generate a reply. Raises GenerationError subclasses on failure."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...
