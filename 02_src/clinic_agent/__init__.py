"""Clinic agent core."""

from .app import Application, IApplication
from .channel import IChannelConnector, LoopbackConnector, ReconnectSupervisor
from .config import Settings
from .dialogue import DialogueController, IDialogueController, PromptTemplates, next_stage
from .llm import (
    AuthError,
    Backend,
    ConfigurationError,
    ErrorKind,
    GenerationError,
    GenerationRouter,
    PromptBundle,
    QuotaExceeded,
    RateLimited,
    TransientError,
    UnknownError,
)
from .models import (
    InboundMessage,
    Session,
    SessionSummary,
    SessionUpdate,
    Stage,
    TraceEvent,
    Turn,
    UserProfile,
)
from .sessions import SessionStore
from .storage import ITraceStorage, TraceStorage
from .tracker import ITracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Models
    "InboundMessage",
    "Session",
    "SessionSummary",
    "SessionUpdate",
    "Stage",
    "TraceEvent",
    "Turn",
    "UserProfile",
    # Components
    "SessionStore",
    "DialogueController",
    "IDialogueController",
    "PromptTemplates",
    "next_stage",
    "GenerationRouter",
    "Backend",
    "PromptBundle",
    "IChannelConnector",
    "LoopbackConnector",
    "ReconnectSupervisor",
    "ITraceStorage",
    "TraceStorage",
    "ITracker",
    "Tracker",
    # Errors
    "ConfigurationError",
    "ErrorKind",
    "GenerationError",
    "AuthError",
    "RateLimited",
    "QuotaExceeded",
    "TransientError",
    "UnknownError",
]
