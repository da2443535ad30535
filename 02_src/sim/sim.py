"""Scripted patients talking to the HTTP API."""

import asyncio
import random
from dataclasses import dataclass
from typing import Protocol

import httpx

from clinic_agent.logging_config import get_logger
from clinic_agent.tracker import ITracker

logger = get_logger(__name__)


@dataclass(frozen=True)
class Patient:
    identity: str
    display_name: str | None
    script: tuple[str, ...]


SCENARIO = (
    Patient(
        identity="5511900000001@s.whatsapp.net",
        display_name="Ana",
        script=(
            "Olá, gostaria de agendar uma consulta",
            "Pode ser na quinta de manhã?",
            "Perfeito, obrigada!",
        ),
    ),
    Patient(
        identity="5511900000002@s.whatsapp.net",
        display_name="Bruno",
        script=(
            "Boa tarde! Quanto custa uma limpeza?",
            "Meu nome é Bruno Silva, quero marcar para semana que vem",
            "Terça às 14h funciona",
        ),
    ),
    Patient(
        identity="5511900000003@s.whatsapp.net",
        display_name=None,
        script=(
            "Oi",
            "Vocês aceitam Unimed?",
            "Qual o endereço da clínica?",
        ),
    ),
)


class ISim(Protocol):
    """Background traffic generator controlled through the API."""

    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...


class Sim:
    """Plays SCENARIO round by round; patients in one round talk concurrently."""

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        tracker: ITracker | None = None,
        delay_range: tuple[float, float] = (1.0, 3.0),
        scenario: tuple[Patient, ...] = SCENARIO,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_url = api_url
        self._tracker = tracker
        self._delay_range = delay_range
        self._scenario = scenario
        self._transport = transport
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def set_tracker(self, tracker: ITracker) -> None:
        """Inject tracker for SIM trace events."""
        self._tracker = tracker

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.play())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def play(self) -> list[tuple[str, str, str | None]]:
        """Run the whole scenario once. Returns (identity, text, reply) triples."""
        summary = {
            "scenario": "clinic_scheduling",
            "patient_count": len(self._scenario),
            "message_count": sum(len(p.script) for p in self._scenario),
        }
        transcript: list[tuple[str, str, str | None]] = []
        rounds = max((len(p.script) for p in self._scenario), default=0)

        self._track("sim_started", summary)
        try:
            async with httpx.AsyncClient(
                base_url=self._api_url, transport=self._transport, timeout=60.0
            ) as client:
                for round_idx in range(rounds):
                    speakers = [p for p in self._scenario if round_idx < len(p.script)]
                    replies = await asyncio.gather(
                        *[self._say(client, p, p.script[round_idx]) for p in speakers]
                    )
                    transcript.extend(
                        (p.identity, p.script[round_idx], reply)
                        for p, reply in zip(speakers, replies)
                    )
                    if round_idx < rounds - 1:
                        await asyncio.sleep(random.uniform(*self._delay_range))
        finally:
            self._track("sim_completed", {**summary, "sent": len(transcript)})
        return transcript

    async def _say(self, client: httpx.AsyncClient, patient: Patient, text: str) -> str | None:
        try:
            response = await client.post(
                "/api/messages",
                json={
                    "identity": patient.identity,
                    "text": text,
                    "display_name": patient.display_name,
                },
            )
        except httpx.HTTPError as e:
            logger.error("SIM: failed to send message: %s", e)
            return None

        if response.status_code != 200:
            logger.error("SIM: %s got HTTP %s", patient.identity, response.status_code)
            return None

        try:
            reply = response.json().get("response")
        except ValueError:
            logger.error("SIM: non-JSON reply for %s", patient.identity)
            return None
        logger.info(
            "SIM: %s -> %s",
            text,
            reply,
            extra={"context": {"identity": patient.identity}},
        )
        return reply

    def _track(self, event_type: str, data: dict) -> None:
        if self._tracker:
            self._tracker.track(event_type, "sim", data)
