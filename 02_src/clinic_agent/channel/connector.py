"""Channel connector contract and the in-process loopback implementation."""

import asyncio
import uuid
from typing import Awaitable, Callable, Protocol

from ..logging_config import get_logger
from ..models import InboundMessage
from .reconnect import ConnectionState, ReconnectSupervisor

logger = get_logger(__name__)


MessageHandler = Callable[[InboundMessage], Awaitable[str | None]]


class IChannelConnector(Protocol):
    """What the application needs from a messaging network."""

    def on_message(self, handler: MessageHandler) -> None:
        """Register the callback that produces replies to inbound turns."""
        ...

    async def send(self, identity: str, text: str) -> bool:
        """Send text to identity. Returns False when it could not be sent."""
        ...

    def is_connected(self) -> bool:
        ...

    @property
    def pairing_code(self) -> str | None:
        """Artifact shown to the operator while unauthenticated."""
        ...

    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...


class LoopbackConnector:
    """Keeps outbound messages in memory; inbound turns arrive via ``deliver``."""

    def __init__(
        self,
        supervisor: ReconnectSupervisor | None = None,
        auto_pair: bool = True,
    ):
        self._supervisor = supervisor or ReconnectSupervisor()
        self._auto_pair = auto_pair
        self._handler: MessageHandler | None = None
        self._pairing_code: str | None = None
        self._reconnect_task: asyncio.Task | None = None
        self.outbox: list[tuple[str, str]] = []

    @property
    def state(self) -> ConnectionState:
        return self._supervisor.state

    @property
    def pairing_code(self) -> str | None:
        return self._pairing_code

    def on_message(self, handler: MessageHandler) -> None:
        self._handler = handler

    def is_connected(self) -> bool:
        return self._supervisor.state == ConnectionState.CONNECTED

    async def start(self) -> None:
        self._supervisor.connecting()
        self._pairing_code = uuid.uuid4().hex[:8].upper()
        logger.info("Pairing code generated - confirm to connect")
        if self._auto_pair:
            self.confirm_pairing()

    def confirm_pairing(self) -> None:
        self._pairing_code = None
        self._supervisor.connected()

    async def stop(self) -> None:
        if self._reconnect_task:
            self._reconnect_task.cancel()
            try:
                await self._reconnect_task
            except asyncio.CancelledError:
                pass
            self._reconnect_task = None
        self._supervisor.state = ConnectionState.DISCONNECTED
        logger.info("Channel disconnected")

    def connection_lost(self, logged_out: bool = False) -> None:
        """Apply the reconnect policy after the link drops."""
        delay = self._supervisor.connection_lost(logged_out=logged_out)
        if delay is not None:
            self._reconnect_task = asyncio.create_task(self._reconnect(delay))

    async def _reconnect(self, delay: float) -> None:
        await asyncio.sleep(delay)
        await self.start()

    async def deliver(self, message: InboundMessage) -> str | None:
        """Dispatch an inbound turn and send the reply back."""
        if not message.text:
            return None
        if self._handler is None:
            raise RuntimeError("No message handler registered")

        logger.info(
            "New message from %s (%s)",
            message.identity,
            message.display_name,
            extra={"context": {"identity": message.identity}},
        )
        reply = await self._handler(message)
        if reply:
            await self.send(message.identity, reply)
        return reply

    async def send(self, identity: str, text: str) -> bool:
        if not self.is_connected():
            logger.error("Cannot send to %s: channel is not connected", identity)
            return False
        self.outbox.append((identity, text))
        logger.debug("Message sent to %s: %s", identity, text[:50])
        return True
