"""Tracker implementation for creating TraceEvents."""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Protocol

from ..logging_config import get_logger
from ..models import TraceEvent
from ..storage import ITraceStorage

logger = get_logger(__name__)


class ITracker(Protocol):
    """Creating TraceEvents without blocking the caller."""

    def track(self, event_type: str, actor: str, data: dict) -> None:
        """Queue a TraceEvent for persistence."""
        ...


class Tracker:
    """Queues TraceEvents and writes them to storage from a background task."""

    def __init__(self, storage: ITraceStorage, max_pending: int = 10_000):
        self._storage = storage
        self._queue: asyncio.Queue[TraceEvent] = asyncio.Queue(maxsize=max_pending)
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start the background writer."""
        if self._task is None:
            self._task = asyncio.create_task(self._writer())

    def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create a TraceEvent and queue it. Never raises on a full queue."""
        trace_event = TraceEvent(
            id=str(uuid.uuid4()),
            event_type=event_type,
            actor=actor,
            data=data,
            timestamp=datetime.now(timezone.utc),
        )
        try:
            self._queue.put_nowait(trace_event)
        except asyncio.QueueFull:
            logger.warning("Trace queue full, dropping %s event", event_type)

    async def flush(self) -> None:
        """Wait until every queued event has been written."""
        if self._task is not None:
            await self._queue.join()

    async def stop(self) -> None:
        """Drain the queue, then stop the writer."""
        if self._task is None:
            return
        await self.flush()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _writer(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._storage.save_trace_event(event)
            except Exception as e:
                logger.error("Failed to persist trace event %s: %s", event.event_type, e)
            finally:
                self._queue.task_done()
