"""Health, channel pairing and trace event routes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException, Query

from ...app import Application
from ...models import TraceEvent


class TraceEventResponse(BaseModel):
    id: str
    event_type: str
    actor: str
    data: dict[str, Any]
    timestamp: datetime

    @classmethod
    def from_event(cls, event: TraceEvent) -> "TraceEventResponse":
        return cls(
            id=event.id,
            event_type=event.event_type,
            actor=event.actor,
            data=event.data,
            timestamp=event.timestamp,
        )


class HealthResponse(BaseModel):
    status: str
    uptime: float
    channel: str
    ai_provider: str
    active_conversations: int


class PairingResponse(BaseModel):
    status: str
    code: str | None = None


def _parse_after(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid 'after' timestamp: {value}")


def create_observability_router(app: Application) -> APIRouter:
    """Create observability router."""
    router = APIRouter(tags=["observability"])

    @router.get("/health", response_model=HealthResponse)
    async def health() -> dict:
        return app.health()

    @router.get("/api/pairing", response_model=PairingResponse)
    async def pairing() -> dict:
        """Pairing code while the channel waits for the operator."""
        code = app.connector.pairing_code
        if code:
            return {"status": "waiting_scan", "code": code}
        return {"status": "connected" if app.connector.is_connected() else "initializing"}

    @router.get("/api/trace-events", response_model=list[TraceEventResponse])
    async def trace_events(
        after: str | None = Query(None, description="ISO timestamp, exclusive"),
        event_type: list[str] | None = Query(None, description="Repeatable"),
        actor: str | None = None,
        limit: int = Query(100, ge=1, le=1000),
    ) -> list[TraceEventResponse]:
        after_dt = _parse_after(after)

        # Events are written in the background; read our own writes.
        await app.tracker.flush()
        events = await app.storage.get_trace_events(
            after=after_dt,
            event_types=event_type,
            actor=actor,
            limit=limit,
        )
        return [TraceEventResponse.from_event(e) for e in events]

    return router
