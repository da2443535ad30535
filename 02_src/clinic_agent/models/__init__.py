"""Core data models for the clinic agent."""

from .messages import InboundMessage
from .session import (
    Session,
    SessionSummary,
    SessionUpdate,
    Stage,
    Turn,
    UserProfile,
)
from .tracing import TraceEvent

__all__ = [
    # Channel
    "InboundMessage",
    # Sessions
    "Session",
    "SessionSummary",
    "SessionUpdate",
    "Stage",
    "Turn",
    "UserProfile",
    # Tracing
    "TraceEvent",
]
