"""Channel message models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class InboundMessage:
    """A turn delivered by the channel connector."""

    identity: str
    text: str
    display_name: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
