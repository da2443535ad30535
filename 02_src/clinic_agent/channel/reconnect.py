"""Reconnect policy for channel connectors, modelled as a state machine."""

from enum import Enum

from ..logging_config import get_logger

logger = get_logger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    GIVING_UP = "giving_up"


class ReconnectSupervisor:
    """Bounded reconnect attempts with a fixed delay.

    ``connection_lost`` returns the delay before the next attempt, or None
    once the connector should stop trying. Leaving GIVING_UP requires an
    explicit ``restart()``.
    """

    def __init__(self, max_attempts: int = 5, delay_seconds: float = 5.0):
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self.state = ConnectionState.DISCONNECTED
        self.attempts = 0

    def connecting(self) -> None:
        if self.state == ConnectionState.GIVING_UP:
            raise RuntimeError("Reconnect supervisor gave up; call restart() first")
        self.state = ConnectionState.CONNECTING

    def connected(self) -> None:
        self.state = ConnectionState.CONNECTED
        self.attempts = 0
        logger.info("Channel connected")

    def connection_lost(self, logged_out: bool = False) -> float | None:
        if logged_out or self.attempts >= self.max_attempts:
            self.state = ConnectionState.GIVING_UP
            logger.error(
                "Not reconnecting (logged_out=%s, attempts=%s). Restart required.",
                logged_out,
                self.attempts,
            )
            return None

        self.attempts += 1
        self.state = ConnectionState.DISCONNECTED
        logger.info("Reconnecting... attempt %s/%s", self.attempts, self.max_attempts)
        return self.delay_seconds

    def restart(self) -> None:
        """External signal to start over after giving up."""
        self.state = ConnectionState.DISCONNECTED
        self.attempts = 0
