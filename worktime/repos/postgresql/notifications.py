"""
PostgreSQL broadcast channel (LISTEN/NOTIFY) and audit trail.
"""

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List

from asyncpg import Pool

from worktime.domain import AuditEntry
from worktime.repositories import AuditRepository, BroadcastRepository

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "worktime_schedule"


class PostgreSQLBroadcastRepository(BroadcastRepository):
    """
    Publishes changes with ``pg_notify`` so any listener on the channel
    can fan them out to connected viewers.
    """

    def __init__(self, pool: Pool, channel: str = DEFAULT_CHANNEL):
        self.pool = pool
        self.channel = channel

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        message = json.dumps({"event": event_name, "payload": payload})
        async with self.pool.acquire() as conn:
            await conn.execute(
                "SELECT pg_notify($1, $2)", self.channel, message
            )
        logger.debug(
            "Published schedule notification",
            extra={"event_name": event_name, "channel": self.channel},
        )


class PostgreSQLAuditRepository(AuditRepository):
    def __init__(self, pool: Pool):
        self.pool = pool

    async def record(self, entry: AuditEntry) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO schedule_audit (
                    action, actor_id, entity_type, entity_id,
                    target_user_id, week_start, details, recorded_at
                ) VALUES ($1, $2, $3, $4, $5, $6, $7::jsonb, $8)
                """,
                entry.action,
                entry.actor_id,
                entry.entity_type,
                entry.entity_id,
                entry.target_user_id,
                entry.week_start,
                json.dumps(entry.details, default=str),
                entry.recorded_at or datetime.now(timezone.utc),
            )

    async def list_week_entries(
        self, user_id: str, week_start: date
    ) -> List[AuditEntry]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT action, actor_id, entity_type, entity_id,
                       target_user_id, week_start, details, recorded_at
                FROM schedule_audit
                WHERE target_user_id = $1 AND week_start = $2
                ORDER BY recorded_at DESC, audit_id DESC
                """,
                user_id,
                week_start,
            )
        entries = []
        for row in rows:
            data = dict(row)
            if isinstance(data["details"], str):
                data["details"] = json.loads(data["details"])
            entries.append(AuditEntry(**data))
        return entries
