"""Control API routes."""

from typing import Any

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...app import Application


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


class EvictResponse(BaseModel):
    cleared: int


def create_control_router(app: Application, sim: Any = None) -> APIRouter:
    """Create control router."""
    router = APIRouter(prefix="/api/control", tags=["control"])

    @router.post("/evict", response_model=EvictResponse)
    async def evict_expired() -> dict:
        """Run the idle-session sweep now."""
        return {"cleared": await app.sweep_expired()}

    @router.post("/sim/start", response_model=StatusResponse)
    async def start_sim() -> dict:
        """Start the scripted patient simulation."""
        if sim is None:
            raise HTTPException(status_code=404, detail="SIM not configured")
        try:
            await sim.start()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return {"status": "ok"}

    @router.post("/sim/stop", response_model=StatusResponse)
    async def stop_sim() -> dict:
        """Stop the scripted patient simulation."""
        if sim is None:
            raise HTTPException(status_code=404, detail="SIM not configured")
        try:
            await sim.stop()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return {"status": "ok"}

    return router
