"""FastAPI application setup."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..app import Application
from .routes import control, messaging, observability, sessions


def create_fastapi_app(application: Application, sim: Any = None) -> FastAPI:
    """Create and configure the FastAPI application around one Application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await application.start()
        if sim is not None and hasattr(sim, "set_tracker"):
            sim.set_tracker(application.tracker)
        yield
        if sim is not None:
            await sim.stop()
        await application.stop()

    fastapi_app = FastAPI(
        title="Clinic Agent API",
        description="Conversation engine for clinic scheduling over messaging",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.application = application

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(observability.create_observability_router(application))
    fastapi_app.include_router(messaging.create_messaging_router(application))
    fastapi_app.include_router(sessions.create_sessions_router(application))
    fastapi_app.include_router(control.create_control_router(application, sim))

    return fastapi_app
