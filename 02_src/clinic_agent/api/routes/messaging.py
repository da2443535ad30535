"""Messaging API routes."""

from pydantic import BaseModel, Field
from fastapi import APIRouter, HTTPException

from ...app import Application
from ...models import InboundMessage


class MessageRequest(BaseModel):
    """Request model for an inbound turn."""

    identity: str = Field(min_length=1)
    text: str = Field(min_length=1)
    display_name: str | None = None


class MessageResponse(BaseModel):
    """Response model for message."""

    response: str


class SendRequest(BaseModel):
    """Request model for a one-off outbound message."""

    identity: str = Field(min_length=1)
    text: str = Field(min_length=1)


class SendResponse(BaseModel):
    success: bool
    message: str


def create_messaging_router(app: Application) -> APIRouter:
    """Create messaging router."""
    router = APIRouter(prefix="/api", tags=["messaging"])

    @router.post("/messages", response_model=MessageResponse)
    async def post_message(request: MessageRequest) -> dict:
        """Run one conversation turn and return the reply."""
        try:
            response = await app.controller.handle_turn(
                InboundMessage(
                    identity=request.identity,
                    text=request.text,
                    display_name=request.display_name,
                )
            )
            return {"response": response}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/send", response_model=SendResponse)
    async def send_message(request: SendRequest) -> dict:
        """Send a message through the channel without running a turn."""
        sent = await app.connector.send(request.identity, request.text)
        if not sent:
            raise HTTPException(status_code=503, detail="Channel is not connected")
        return {"success": True, "message": "Message sent successfully"}

    return router
