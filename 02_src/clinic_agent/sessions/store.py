"""In-memory session store with per-identity locking and idle eviction."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Callable, Protocol

from ..logging_config import get_logger
from ..models import Session, SessionSummary, SessionUpdate

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ISessionStore(Protocol):
    """Owner of every Session record."""

    async def get(self, identity: str) -> Session:
        """Fetch or create the session for identity."""
        ...

    async def update(self, identity: str, patch: SessionUpdate) -> Session:
        """Apply a partial update atomically."""
        ...

    async def evict_expired(self, now: datetime | None = None) -> int:
        """Drop sessions idle for longer than the TTL."""
        ...

    async def remove(self, identity: str) -> bool:
        """Operator-issued clear."""
        ...

    def list(self) -> list[SessionSummary]:
        """Summaries of all live sessions."""
        ...


@dataclass
class _IdentityLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class SessionTransaction:
    """Handle valid while the identity lock is held."""

    def __init__(self, store: "SessionStore", identity: str):
        self._store = store
        self._identity = identity

    @property
    def identity(self) -> str:
        return self._identity

    def get(self) -> Session:
        return self._store._get_locked(self._identity)

    def update(self, patch: SessionUpdate) -> Session:
        return self._store._update_locked(self._identity, patch)


class SessionStore:
    """Owns all sessions. Every mutation runs under the identity's lock."""

    def __init__(
        self,
        max_history: int = 20,
        ttl: timedelta = timedelta(hours=24),
        clock: Clock = utc_now,
    ):
        if max_history < 1:
            raise ValueError("max_history must be positive")
        self._max_history = max_history
        self._ttl = ttl
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, _IdentityLock] = {}

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    @asynccontextmanager
    async def transaction(self, identity: str) -> AsyncIterator[SessionTransaction]:
        """Hold the identity lock for a full read-modify-write cycle.

        asyncio.Lock wakes waiters in FIFO order, so turns for one identity
        run in arrival order.
        """
        entry = self._locks.setdefault(identity, _IdentityLock())
        entry.users += 1
        try:
            async with entry.lock:
                yield SessionTransaction(self, identity)
        finally:
            entry.users -= 1
            if entry.users == 0 and identity not in self._sessions:
                self._locks.pop(identity, None)

    async def get(self, identity: str) -> Session:
        async with self.transaction(identity) as tx:
            return tx.get()

    async def update(self, identity: str, patch: SessionUpdate) -> Session:
        async with self.transaction(identity) as tx:
            return tx.update(patch)

    async def remove(self, identity: str) -> bool:
        async with self.transaction(identity):
            if self._sessions.pop(identity, None) is None:
                return False
        logger.info("Context cleared", extra={"context": {"identity": identity}})
        return True

    async def evict_expired(self, now: datetime | None = None) -> int:
        now = now or self._clock()
        if now.tzinfo is None:
            # Session timestamps are UTC-aware.
            now = now.replace(tzinfo=timezone.utc)
        candidates = [
            identity
            for identity, session in self._sessions.items()
            if now - session.last_activity > self._ttl
        ]

        evicted = 0
        for identity in candidates:
            async with self.transaction(identity):
                session = self._sessions.get(identity)
                # Re-check: a turn may have touched it while we waited.
                if session is None or now - session.last_activity <= self._ttl:
                    continue
                del self._sessions[identity]
                evicted += 1
            logger.info("Cleared idle context", extra={"context": {"identity": identity}})

        return evicted

    def peek(self, identity: str) -> Session | None:
        """Read without creating or touching last_activity."""
        session = self._sessions.get(identity)
        return session.snapshot() if session else None

    def list(self) -> list[SessionSummary]:
        return [
            SessionSummary(
                identity=identity,
                stage=session.stage,
                history_length=len(session.history),
                created_at=session.created_at,
                last_activity=session.last_activity,
            )
            for identity, session in self._sessions.items()
        ]

    def clear(self) -> None:
        """Drop every session. Used on application shutdown."""
        self._sessions.clear()

    # Called only with the identity lock held.

    def _touch(self, session: Session) -> None:
        session.last_activity = max(session.last_activity, self._clock())

    def _get_locked(self, identity: str) -> Session:
        session = self._sessions.get(identity)
        if session is None:
            now = self._clock()
            session = Session(identity=identity, created_at=now, last_activity=now)
            self._sessions[identity] = session
            logger.info(
                "New conversation context created",
                extra={"context": {"identity": identity}},
            )
        else:
            self._touch(session)
        return session.snapshot()

    def _update_locked(self, identity: str, patch: SessionUpdate) -> Session:
        self._get_locked(identity)
        session = self._sessions[identity]

        if patch.stage is not None:
            session.stage = patch.stage
        if patch.name is not None:
            session.profile.name = patch.name
        if patch.appointment:
            session.appointment.update(patch.appointment)
        if patch.turn is not None:
            session.history.append(patch.turn)
            if len(session.history) > self._max_history:
                del session.history[: len(session.history) - self._max_history]

        self._touch(session)
        logger.debug(
            "Context updated",
            extra={"context": {"identity": identity, "stage": session.stage.value}},
        )
        return session.snapshot()
