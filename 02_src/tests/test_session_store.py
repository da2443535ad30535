"""Tests for SessionStore."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from clinic_agent.models import SessionUpdate, Stage, Turn
from clinic_agent.sessions import SessionStore


def _turn(role: str, text: str) -> Turn:
    return Turn(role=role, text=text, timestamp=datetime.now(timezone.utc))


class TestSessionStoreGet:
    """Tests for SessionStore.get()."""

    async def test_get_creates_fresh_session(self, store):
        """First access creates a greeting-stage session with no history."""
        session = await store.get("5511999999999")

        assert session.identity == "5511999999999"
        assert session.stage == Stage.GREETING
        assert session.history == []
        assert session.profile.name is None
        assert session.profile.contact == "5511999999999"
        assert session.appointment == {}
        assert store.active_count == 1

    async def test_get_is_idempotent(self, store, clock):
        """Two gets differ only in last_activity."""
        first = await store.get("X")
        clock.advance(timedelta(minutes=5))
        second = await store.get("X")

        assert store.active_count == 1
        assert second.last_activity > first.last_activity
        first.last_activity = second.last_activity
        assert first == second

    async def test_get_returns_snapshot(self, store):
        """Mutating a returned session does not change the stored one."""
        session = await store.get("X")
        session.history.append(_turn("user", "intruso"))
        session.stage = Stage.CONFIRMATION

        stored = await store.get("X")
        assert stored.history == []
        assert stored.stage == Stage.GREETING

    async def test_last_activity_never_moves_backwards(self, store, clock):
        """A clock going backwards does not rewind last_activity."""
        first = await store.get("X")
        clock.advance(timedelta(minutes=-10))
        second = await store.get("X")

        assert second.last_activity == first.last_activity


class TestSessionStoreUpdate:
    """Tests for SessionStore.update()."""

    async def test_update_sets_stage(self, store):
        session = await store.update("X", SessionUpdate(stage=Stage.SCHEDULING))
        assert session.stage == Stage.SCHEDULING

    async def test_update_appends_turn(self, store):
        await store.update("X", SessionUpdate(turn=_turn("user", "Olá")))
        session = await store.update("X", SessionUpdate(turn=_turn("assistant", "Oi!")))

        assert [t.text for t in session.history] == ["Olá", "Oi!"]
        assert [t.role for t in session.history] == ["user", "assistant"]

    async def test_update_never_downgrades_name(self, store):
        """A patch without a name keeps the known name."""
        await store.update("X", SessionUpdate(name="Maria"))
        session = await store.update("X", SessionUpdate(name=None, stage=Stage.SCHEDULING))

        assert session.profile.name == "Maria"
        assert session.stage == Stage.SCHEDULING

    async def test_update_name_last_write_wins(self, store):
        await store.update("X", SessionUpdate(name="Maria"))
        session = await store.update("X", SessionUpdate(name="Maria Souza"))
        assert session.profile.name == "Maria Souza"

    async def test_update_merges_appointment(self, store):
        """Appointment keys accumulate; later values win."""
        await store.update("X", SessionUpdate(appointment={"service": "limpeza"}))
        session = await store.update(
            "X", SessionUpdate(appointment={"date": "2024-05-02", "service": "canal"})
        )

        assert session.appointment == {"service": "canal", "date": "2024-05-02"}

    async def test_history_trimmed_fifo(self, clock):
        """After M > max turns only the most recent max remain, in order."""
        store = SessionStore(max_history=5, clock=clock)
        for i in range(12):
            await store.update("X", SessionUpdate(turn=_turn("user", f"msg {i}")))

        session = await store.get("X")
        assert len(session.history) == 5
        assert [t.text for t in session.history] == [f"msg {i}" for i in range(7, 12)]

    def test_invalid_max_history(self):
        with pytest.raises(ValueError):
            SessionStore(max_history=0)


class TestSessionStoreEviction:
    """Tests for TTL eviction and explicit removal."""

    async def test_evict_expired_removes_idle_sessions(self, store, clock):
        await store.get("idle")
        clock.advance(timedelta(hours=23))
        await store.get("active")
        clock.advance(timedelta(hours=2))

        cleared = await store.evict_expired()

        assert cleared == 1
        assert store.peek("idle") is None
        assert store.peek("active") is not None

    async def test_evict_at_exact_ttl_keeps_session(self, store, clock):
        """Only sessions strictly older than the TTL are removed."""
        await store.get("X")
        clock.advance(timedelta(hours=24))

        assert await store.evict_expired() == 0
        assert store.active_count == 1

    async def test_evict_with_explicit_now(self, store, clock):
        await store.get("X")
        now = clock.now + timedelta(hours=25)

        assert await store.evict_expired(now) == 1

    async def test_evict_with_naive_now_treated_as_utc(self, store, clock):
        await store.get("X")
        await store.get("Y")
        naive = (clock.now + timedelta(hours=25)).replace(tzinfo=None)

        assert await store.evict_expired(naive) == 2
        assert store.active_count == 0

    async def test_evicted_identity_starts_fresh(self, store, clock):
        """After TTL + 1h the next get returns an empty-history session."""
        await store.update("X", SessionUpdate(turn=_turn("user", "Olá"), stage=Stage.SCHEDULING))
        clock.advance(timedelta(hours=25))

        assert await store.evict_expired() == 1

        session = await store.get("X")
        assert session.history == []
        assert session.stage == Stage.GREETING
        assert session.created_at == clock.now

    async def test_eviction_waits_for_in_flight_turn(self, store, clock):
        """The sweep serializes with a transaction and re-checks expiry."""
        await store.get("X")
        clock.advance(timedelta(hours=25))

        async def slow_turn():
            async with store.transaction("X") as tx:
                await asyncio.sleep(0.05)
                tx.update(SessionUpdate(turn=_turn("user", "ainda aqui")))

        turn_task = asyncio.create_task(slow_turn())
        await asyncio.sleep(0)  # let the turn take the lock
        cleared = await store.evict_expired(now=clock.now)
        await turn_task

        assert cleared == 0
        session = store.peek("X")
        assert session is not None
        assert [t.text for t in session.history] == ["ainda aqui"]

    async def test_remove(self, store):
        await store.get("X")

        assert await store.remove("X") is True
        assert await store.remove("X") is False
        assert store.active_count == 0

    async def test_lock_entries_released(self, store):
        """Lock bookkeeping does not outlive removed sessions."""
        await store.get("X")
        await store.remove("X")

        assert "X" not in store._locks


class TestSessionStoreListing:
    """Tests for list() and peek()."""

    async def test_list_summaries(self, store):
        await store.update("A", SessionUpdate(turn=_turn("user", "Olá")))
        await store.update("B", SessionUpdate(stage=Stage.SCHEDULING))

        summaries = {s.identity: s for s in store.list()}

        assert set(summaries) == {"A", "B"}
        assert summaries["A"].history_length == 1
        assert summaries["B"].stage == Stage.SCHEDULING
        assert summaries["B"].history_length == 0

    async def test_peek_does_not_create(self, store):
        assert store.peek("nobody") is None
        assert store.active_count == 0


class TestSessionStoreConcurrency:
    """Per-identity serialization."""

    async def test_concurrent_updates_do_not_lose_turns(self, store):
        """N concurrent appends for one identity all land, in arrival order."""
        n = 15

        async def append(i: int):
            async with store.transaction("X") as tx:
                tx.get()
                await asyncio.sleep(0.001 * (n - i))  # later arrivals finish faster
                tx.update(SessionUpdate(turn=_turn("user", f"msg {i}")))

        await asyncio.gather(*[append(i) for i in range(n)])

        session = await store.get("X")
        assert [t.text for t in session.history] == [f"msg {i}" for i in range(n)]

    async def test_different_identities_run_in_parallel(self, store):
        """A held lock for one identity does not block another."""
        entered = asyncio.Event()
        release = asyncio.Event()

        async def hold_a():
            async with store.transaction("A"):
                entered.set()
                await release.wait()

        task = asyncio.create_task(hold_a())
        await entered.wait()

        session = await asyncio.wait_for(store.get("B"), timeout=1.0)
        assert session.identity == "B"

        release.set()
        await task
