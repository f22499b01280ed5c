"""
In-memory broadcast channel and audit trail.
"""

import logging
from collections import deque
from datetime import date, datetime, timezone
from typing import Any, Deque, Dict, List, Tuple

from worktime.domain import AuditEntry
from worktime.repositories import AuditRepository, BroadcastRepository

logger = logging.getLogger(__name__)

MAX_PUBLISHED = 1000


class MemoryBroadcastRepository(BroadcastRepository):
    """
    Keeps the most recent published notifications so viewers (and tests)
    can read them; older ones are dropped once the limit is reached.
    """

    def __init__(self, max_published: int = MAX_PUBLISHED) -> None:
        self.published: Deque[Tuple[str, Dict[str, Any]]] = deque(
            maxlen=max_published
        )

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        self.published.append((event_name, dict(payload)))
        logger.debug(
            "Broadcast schedule change", extra={"event_name": event_name}
        )


class MemoryAuditRepository(AuditRepository):
    def __init__(self) -> None:
        self.entries: List[AuditEntry] = []

    async def record(self, entry: AuditEntry) -> None:
        if entry.recorded_at is None:
            entry = entry.model_copy(
                update={"recorded_at": datetime.now(timezone.utc)}
            )
        self.entries.append(entry)

    async def list_week_entries(
        self, user_id: str, week_start: date
    ) -> List[AuditEntry]:
        matches = [
            entry
            for entry in self.entries
            if entry.target_user_id == user_id
            and entry.week_start == week_start
        ]
        # entries are appended in write order
        return list(reversed(matches))
