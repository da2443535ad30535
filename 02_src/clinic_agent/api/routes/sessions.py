"""Session inspection routes for operators."""

from datetime import datetime

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...app import Application


class SessionSummaryResponse(BaseModel):
    identity: str
    stage: str
    history_length: int
    created_at: datetime
    last_activity: datetime


class ClearResponse(BaseModel):
    cleared: bool


def create_sessions_router(app: Application) -> APIRouter:
    """Create sessions router."""
    router = APIRouter(prefix="/api/sessions", tags=["sessions"])

    @router.get("", response_model=list[SessionSummaryResponse])
    async def list_sessions() -> list[dict]:
        return [
            {
                "identity": s.identity,
                "stage": s.stage.value,
                "history_length": s.history_length,
                "created_at": s.created_at,
                "last_activity": s.last_activity,
            }
            for s in app.sessions.list()
        ]

    @router.get("/{identity}")
    async def get_session(identity: str) -> dict:
        """Dump one session without creating it."""
        session = app.sessions.peek(identity)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found")
        return session.to_dict()

    @router.delete("/{identity}", response_model=ClearResponse)
    async def clear_session(identity: str) -> dict:
        return {"cleared": await app.sessions.remove(identity)}

    return router
