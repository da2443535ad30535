"""DialogueController implementation."""

from typing import Protocol

from ..llm import ErrorKind, GenerationError, IGenerationRouter, PromptBundle
from ..logging_config import get_logger
from ..models import InboundMessage, Session, SessionUpdate, Turn
from ..sessions import SessionStore, SessionTransaction, utc_now
from ..tracker import ITracker
from .stages import next_stage
from .templates import PromptTemplates

logger = get_logger(__name__)


class IDialogueController(Protocol):
    """Orchestrates conversation turns."""

    async def handle_turn(self, message: InboundMessage) -> str:
        """Process one inbound turn and return the reply text."""
        ...

    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...


class DialogueController:
    """Runs each turn end to end under the identity's session lock.

    This is the only place generation failures are caught. A failed turn keeps
    the user Turn, adds no assistant Turn and returns the fallback reply.
    """

    def __init__(
        self,
        store: SessionStore,
        router: IGenerationRouter,
        templates: PromptTemplates,
        tracker: ITracker | None = None,
    ):
        self._store = store
        self._router = router
        self._templates = templates
        self._tracker = tracker
        self._running = False

    async def start(self) -> None:
        logger.info("Starting DialogueController")
        self._running = True

    async def stop(self) -> None:
        logger.info("Stopping DialogueController")
        self._running = False

    async def handle_turn(self, message: InboundMessage) -> str:
        if not self._running:
            raise RuntimeError("DialogueController not started")

        identity = message.identity
        logger.info(
            "Message received: %s",
            message.text[:100],
            extra={"context": {"identity": identity}},
        )

        async with self._store.transaction(identity) as tx:
            try:
                return await self._run_turn(tx, message)
            except GenerationError as e:
                kind, detail, retry_after = e.kind, e.message, e.retry_after
                logger.warning(
                    "Generation failed, sending fallback: %s",
                    detail,
                    extra={
                        "context": {
                            "identity": identity,
                            "kind": kind.value,
                            "retry_after": retry_after,
                        }
                    },
                )
            except Exception as e:
                kind, detail, retry_after = ErrorKind.UNKNOWN, repr(e), None
                logger.error(
                    "Error processing message",
                    exc_info=True,
                    extra={"context": {"identity": identity, "kind": kind.value}},
                )

        self._track(
            "generation_failed",
            {
                "identity": identity,
                "kind": kind.value,
                "message": detail,
                "retry_after": retry_after,
            },
        )
        return self._templates.fallback()

    def build_bundle(self, session: Session, current_text: str) -> PromptBundle:
        """Assemble the prompt parts for the session's current stage."""
        return PromptBundle(
            persona=self._templates.persona(),
            stage=session.stage,
            guidance=self._templates.guidance(session.stage),
            profile=session.profile,
            current_text=current_text,
            history=list(session.history),
        )

    async def _run_turn(self, tx: SessionTransaction, message: InboundMessage) -> str:
        session = tx.get()

        if message.display_name and not session.profile.name:
            tx.update(SessionUpdate(name=message.display_name))

        session = tx.update(
            SessionUpdate(turn=Turn(role="user", text=message.text, timestamp=message.timestamp))
        )
        self._track(
            "turn_received",
            {"identity": tx.identity, "stage": session.stage.value, "text": message.text},
        )

        bundle = self.build_bundle(session, message.text)
        response_text = await self._router.generate(bundle)

        session = tx.update(
            SessionUpdate(turn=Turn(role="assistant", text=response_text, timestamp=utc_now()))
        )

        new_stage = next_stage(session.stage, message.text, response_text, session.profile)
        if new_stage != session.stage:
            logger.debug(
                "Stage updated from %s to %s",
                session.stage.value,
                new_stage.value,
                extra={"context": {"identity": tx.identity}},
            )
            session = tx.update(SessionUpdate(stage=new_stage))

        logger.info(
            "Message processed",
            extra={"context": {"identity": tx.identity, "stage": session.stage.value}},
        )
        self._track(
            "turn_completed",
            {
                "identity": tx.identity,
                "stage": session.stage.value,
                "response_text": response_text,
            },
        )
        return response_text

    def _track(self, event_type: str, data: dict) -> None:
        if self._tracker is not None:
            self._tracker.track(event_type=event_type, actor="dialogue_controller", data=data)
