"""Session-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal


class Stage(str, Enum):
    """Phases of the guided scheduling conversation."""

    GREETING = "greeting"
    INFO_COLLECTION = "info_collection"
    SCHEDULING = "scheduling"
    CONFIRMATION = "confirmation"
    FOLLOW_UP = "follow_up"


@dataclass(frozen=True)
class Turn:
    """A single role-tagged message in a conversation."""

    role: Literal["user", "assistant"]
    text: str
    timestamp: datetime


@dataclass
class UserProfile:
    """What we know about the person on the other end."""

    contact: str
    name: str | None = None


@dataclass
class Session:
    """Full conversational state for one identity."""

    identity: str
    created_at: datetime
    last_activity: datetime
    stage: Stage = Stage.GREETING
    history: list[Turn] = field(default_factory=list)
    profile: UserProfile | None = None
    appointment: dict[str, Any] = field(default_factory=dict)  # unvalidated draft

    def __post_init__(self) -> None:
        if self.profile is None:
            self.profile = UserProfile(contact=self.identity)

    def snapshot(self) -> "Session":
        """Return a copy that callers can hold without seeing later mutations."""
        return Session(
            identity=self.identity,
            created_at=self.created_at,
            last_activity=self.last_activity,
            stage=self.stage,
            history=list(self.history),
            profile=UserProfile(contact=self.profile.contact, name=self.profile.name),
            appointment=dict(self.appointment),
        )

    def to_dict(self) -> dict:
        """Serialize for the session dump endpoint."""
        return {
            "identity": self.identity,
            "stage": self.stage.value,
            "profile": {"name": self.profile.name, "contact": self.profile.contact},
            "appointment": dict(self.appointment),
            "history": [
                {
                    "role": turn.role,
                    "text": turn.text,
                    "timestamp": turn.timestamp.isoformat(),
                }
                for turn in self.history
            ],
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
        }


@dataclass
class SessionUpdate:
    """Partial patch applied atomically by the SessionStore."""

    stage: Stage | None = None
    name: str | None = None
    appointment: dict[str, Any] | None = None
    turn: Turn | None = None


@dataclass
class SessionSummary:
    """Lightweight view of a session for listings."""

    identity: str
    stage: Stage
    history_length: int
    created_at: datetime
    last_activity: datetime
