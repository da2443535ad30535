"""Pytest configuration and fixtures."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


class FakeClock:
    """Controllable UTC clock for the session store."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """Session store with a small history bound and a 24h TTL."""
    from clinic_agent.sessions import SessionStore

    return SessionStore(max_history=20, ttl=timedelta(hours=24), clock=clock)


@pytest_asyncio.fixture
async def trace_storage():
    """Create in-memory trace storage for testing."""
    from clinic_agent.storage import TraceStorage

    st = TraceStorage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest_asyncio.fixture
async def tracker(trace_storage):
    """Create a running Tracker."""
    from clinic_agent.tracker import Tracker

    tr = Tracker(trace_storage)
    await tr.start()
    yield tr
    await tr.stop()


@pytest.fixture
def templates():
    from clinic_agent.dialogue import PromptTemplates

    return PromptTemplates(
        clinic_name="Clínica Teste",
        clinic_address="Rua Teste, 1",
        clinic_hours="8h-18h",
        clinic_phone="(11) 5555-0000",
    )


@pytest.fixture
def mock_router():
    """Create mock generation router."""
    router = Mock()
    router.generate = AsyncMock(return_value="Test response")
    return router


@pytest_asyncio.fixture
async def controller(store, mock_router, templates, tracker):
    """Create a started DialogueController."""
    from clinic_agent.dialogue import DialogueController

    dc = DialogueController(
        store=store,
        router=mock_router,
        templates=templates,
        tracker=tracker,
    )
    await dc.start()
    yield dc
    await dc.stop()


@pytest.fixture
def make_bundle():
    """Factory for prompt bundles."""
    from clinic_agent.llm import PromptBundle
    from clinic_agent.models import Stage, Turn, UserProfile

    def _make(current_text="Quero agendar", history=None, name=None):
        ts = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        if history is None:
            history = [
                Turn(role="user", text="Olá", timestamp=ts),
                Turn(role="assistant", text="Olá! Como posso ajudar?", timestamp=ts),
                Turn(role="user", text=current_text, timestamp=ts),
            ]
        return PromptBundle(
            persona="Você é um assistente.",
            stage=Stage.GREETING,
            guidance="Cumprimente.",
            profile=UserProfile(contact="5511999999999", name=name),
            current_text=current_text,
            history=history,
        )

    return _make
