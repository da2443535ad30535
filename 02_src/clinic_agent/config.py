"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "traces.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

PathLike = Union[str, Path]

# Environment variable holding the credential for each provider.
API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "google": "GOOGLE_API_KEY",
}


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    return float(raw) if raw else default


@dataclass
class Settings:
    """Runtime settings consumed by the application."""

    ai_provider: str = "openai"
    api_key: str | None = None
    max_history: int = 20
    session_timeout_hours: int = 24
    history_window: int = 10
    ai_timeout_seconds: float = 30.0
    eviction_interval_seconds: float = 3600.0
    generation_max_tokens: int | None = None
    generation_temperature: float | None = None
    clinic_name: str = "Clínica Odontológica Sorriso"
    clinic_address: str = "Rua das Flores, 123 - Centro"
    clinic_hours: str = "Segunda a Sexta 8h-18h, Sábado 8h-12h"
    clinic_phone: str = "(11) 9999-9999"
    database_url: str | None = None
    api_host: str = "localhost"
    api_port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        provider = os.getenv("AI_PROVIDER", cls.ai_provider).strip().lower()
        key_env = API_KEY_ENV.get(provider)

        return cls(
            ai_provider=provider,
            api_key=os.getenv(key_env) if key_env else None,
            max_history=_env_int("MAX_CONTEXT_MESSAGES", cls.max_history),
            session_timeout_hours=_env_int(
                "SESSION_TIMEOUT_HOURS", cls.session_timeout_hours
            ),
            history_window=_env_int("HISTORY_WINDOW", cls.history_window),
            ai_timeout_seconds=_env_float("AI_TIMEOUT_SECONDS", cls.ai_timeout_seconds),
            eviction_interval_seconds=_env_float(
                "EVICTION_INTERVAL_SECONDS", cls.eviction_interval_seconds
            ),
            generation_max_tokens=(
                _env_int("GENERATION_MAX_TOKENS", 0) or None
            ),
            generation_temperature=_env_float("GENERATION_TEMPERATURE", None),
            clinic_name=os.getenv("CLINIC_NAME", cls.clinic_name),
            clinic_address=os.getenv("CLINIC_ADDRESS", cls.clinic_address),
            clinic_hours=os.getenv("CLINIC_HOURS", cls.clinic_hours),
            clinic_phone=os.getenv("CLINIC_PHONE", cls.clinic_phone),
            database_url=os.getenv("DATABASE_URL"),
            api_host=os.getenv("API_HOST", cls.api_host),
            api_port=_env_int("API_PORT", cls.api_port),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
        )
