"""Error taxonomy shared by the generation router and its adapters."""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of generation failure kinds."""

    AUTH = "auth_error"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    TRANSIENT = "transient_error"
    UNKNOWN = "unknown"


class ConfigurationError(Exception):
    """Unknown backend selector or missing credential. Fatal at construction."""


class GenerationError(Exception):
    """Base class for classified generation failures."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, retry_after: float | None = None):
        super().__init__(message)
        self.message = message
        self.retry_after = retry_after


class AuthError(GenerationError):
    kind = ErrorKind.AUTH


class RateLimited(GenerationError):
    kind = ErrorKind.RATE_LIMITED


class QuotaExceeded(GenerationError):
    kind = ErrorKind.QUOTA_EXCEEDED


class TransientError(GenerationError):
    kind = ErrorKind.TRANSIENT


class UnknownError(GenerationError):
    kind = ErrorKind.UNKNOWN


# Gemini sends RESOURCE_EXHAUSTED for both per-minute limits and spent quota,
# so only the message wording decides.
QUOTA_MARKERS = ("quota", "credit balance")
AUTH_MARKERS = ("api key", "api_key_invalid", "permission_denied", "unauthorized")


def classify_status(
    status: int | None,
    message: str,
    retry_after: float | None = None,
) -> GenerationError:
    """Map a backend HTTP status and error text onto the taxonomy.

    Quota markers are checked before the status because providers report an
    exhausted quota as 429 as well.
    """
    lowered = message.lower()

    if any(marker in lowered for marker in QUOTA_MARKERS):
        return QuotaExceeded(message, retry_after=retry_after)
    if status == 429:
        return RateLimited(message, retry_after=retry_after)
    if status in (401, 403) or any(marker in lowered for marker in AUTH_MARKERS):
        return AuthError(message)
    if status is not None and (status in (408, 409) or status >= 500):
        return TransientError(message)
    return UnknownError(message)


def parse_retry_after(value: str | None) -> float | None:
    """Parse a ``retry-after`` header given in seconds."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None
