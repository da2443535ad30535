"""SQLite storage for trace events."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import aiosqlite

from ..config import resolve_db_path
from ..models import TraceEvent

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class ITraceStorage(Protocol):
    """Append-only log of observability events."""

    async def init(self) -> None:
        """Open the database and apply the schema."""
        ...

    async def close(self) -> None:
        ...

    async def save_trace_event(self, event: TraceEvent) -> None:
        ...

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Newest-first events matching every given filter."""
        ...

    async def clear(self) -> None:
        ...


def _to_utc_iso(value: datetime) -> str:
    # Stored as ISO text so lexical order matches time order.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _row_to_event(row: aiosqlite.Row) -> TraceEvent:
    return TraceEvent(
        id=row["id"],
        event_type=row["event_type"],
        actor=row["actor"],
        data=json.loads(row["data"]),
        timestamp=datetime.fromisoformat(row["timestamp"]),
    )


class TraceStorage:
    """Trace events only. Session state is never written here."""

    def __init__(self, db_path: str | Path | None = None):
        self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Storage not initialized")
        return self._conn

    async def init(self) -> None:
        self._conn = await aiosqlite.connect(self._db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
        await self._conn.commit()

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def save_trace_event(self, event: TraceEvent) -> None:
        await self.conn.execute(
            "INSERT INTO trace_events (id, event_type, actor, data, timestamp) "
            "VALUES (:id, :event_type, :actor, :data, :timestamp)",
            {
                "id": event.id,
                "event_type": event.event_type,
                "actor": event.actor,
                "data": json.dumps(event.data, ensure_ascii=False, default=str),
                "timestamp": _to_utc_iso(event.timestamp),
            },
        )
        await self.conn.commit()

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Newest-first events matching every given filter."""
        clauses: list[str] = []
        args: list = []

        if after is not None:
            clauses.append("timestamp > ?")
            args.append(_to_utc_iso(after))
        if event_types:
            clauses.append(f"event_type IN ({', '.join('?' for _ in event_types)})")
            args.extend(event_types)
        if actor:
            clauses.append("actor = ?")
            args.append(actor)

        sql = "SELECT id, event_type, actor, data, timestamp FROM trace_events"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY timestamp DESC LIMIT ?"
        args.append(limit)

        async with self.conn.execute(sql, args) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_event(row) for row in rows]

    async def clear(self) -> None:
        await self.conn.execute("DELETE FROM trace_events")
        await self.conn.commit()
