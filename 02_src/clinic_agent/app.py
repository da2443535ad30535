"""Application bootstrap and lifecycle management."""

import asyncio
import time
from datetime import timedelta
from typing import Protocol

from .channel import IChannelConnector, LoopbackConnector
from .config import Settings
from .dialogue import DialogueController, PromptTemplates
from .llm import GenerationRouter
from .logging_config import get_logger
from .models import InboundMessage
from .sessions import SessionStore
from .storage import ITraceStorage, TraceStorage
from .tracker import Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def sweep_expired(self) -> int:
        """Run one eviction sweep now."""
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        settings: Settings | None = None,
        connector: IChannelConnector | None = None,
    ):
        self._settings = settings or Settings.from_env()
        self._connector: IChannelConnector = connector or LoopbackConnector()
        self._started_at = time.monotonic()

        # Components (will be initialized in start())
        self._router: GenerationRouter | None = None
        self._storage: ITraceStorage | None = None
        self._tracker: Tracker | None = None
        self._sessions: SessionStore | None = None
        self._controller: DialogueController | None = None
        self._eviction_task: asyncio.Task | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        settings = self._settings
        logger.info("Starting application (AI provider: %s)", settings.ai_provider)

        # 1. Router first: a bad provider or key must fail before anything runs
        self._router = GenerationRouter(
            settings.ai_provider,
            settings.api_key,
            timeout=settings.ai_timeout_seconds,
            history_window=settings.history_window,
            max_tokens=settings.generation_max_tokens,
            temperature=settings.generation_temperature,
        )

        # 2. Trace storage + tracker
        self._storage = TraceStorage(settings.database_url)
        await self._storage.init()
        self._tracker = Tracker(self._storage)
        await self._tracker.start()
        logger.info("Trace storage initialized")

        # 3. Session store
        self._sessions = SessionStore(
            max_history=settings.max_history,
            ttl=timedelta(hours=settings.session_timeout_hours),
        )

        # 4. DialogueController (depends on store, router, tracker)
        self._controller = DialogueController(
            store=self._sessions,
            router=self._router,
            templates=PromptTemplates.from_settings(settings),
            tracker=self._tracker,
        )
        await self._controller.start()
        logger.info("DialogueController started")

        # 5. Channel
        self._connector.on_message(self._on_inbound)
        await self._connector.start()

        # 6. Periodic eviction
        self._eviction_task = asyncio.create_task(self._eviction_loop())
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._eviction_task:
            self._eviction_task.cancel()
            try:
                await self._eviction_task
            except asyncio.CancelledError:
                pass
            self._eviction_task = None
        await self._connector.stop()
        if self._controller:
            await self._controller.stop()
        if self._sessions:
            self._sessions.clear()
        if self._tracker:
            await self._tracker.stop()
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")
        if self._router:
            await self._router.aclose()

    async def sweep_expired(self) -> int:
        """Evict idle sessions."""
        cleared = await self.sessions.evict_expired()
        if cleared > 0:
            logger.info("Cleared %s old conversation contexts", cleared)
            if self._tracker:
                self._tracker.track("sessions_evicted", "application", {"count": cleared})
        return cleared

    async def _on_inbound(self, message: InboundMessage) -> str:
        return await self.controller.handle_turn(message)

    async def _eviction_loop(self) -> None:
        """Background timer for the idle-session sweep."""
        while True:
            try:
                await asyncio.sleep(self._settings.eviction_interval_seconds)
                await self.sweep_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Eviction sweep error: %s", e, exc_info=True)

    def health(self) -> dict:
        return {
            "status": "ok",
            "uptime": round(time.monotonic() - self._started_at, 1),
            "channel": "connected" if self._connector.is_connected() else "disconnected",
            "ai_provider": self._settings.ai_provider,
            "active_conversations": self._sessions.active_count if self._sessions else 0,
        }

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def connector(self) -> IChannelConnector:
        return self._connector

    @property
    def storage(self) -> ITraceStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def tracker(self) -> Tracker:
        if not self._tracker:
            raise RuntimeError("Application not started")
        return self._tracker

    @property
    def sessions(self) -> SessionStore:
        """Get session store instance."""
        if not self._sessions:
            raise RuntimeError("Application not started")
        return self._sessions

    @property
    def controller(self) -> DialogueController:
        """Get dialogue controller instance."""
        if not self._controller:
            raise RuntimeError("Application not started")
        return self._controller

    @property
    def router(self) -> GenerationRouter:
        if not self._router:
            raise RuntimeError("Application not started")
        return self._router
