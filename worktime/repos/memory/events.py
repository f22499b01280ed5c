"""
In-memory implementation of CalendarEventRepository.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from worktime.domain import CalendarEvent
from worktime.repositories import CalendarEventRepository


class MemoryCalendarEventRepository(CalendarEventRepository):
    def __init__(self) -> None:
        self._events: Dict[str, CalendarEvent] = {}

    async def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        event = self._events.get(event_id)
        return event.model_copy(deep=True) if event else None

    async def save_event(self, event: CalendarEvent) -> None:
        self._events[event.event_id] = event.model_copy(deep=True)

    async def delete_event(self, event_id: str) -> bool:
        return self._events.pop(event_id, None) is not None

    async def list_events(
        self, owner_id: str, start: datetime, end: datetime
    ) -> List[CalendarEvent]:
        matches = []
        for event in self._events.values():
            if event.owner_id != owner_id or event.start_time >= end:
                continue
            # Recurring series are expanded by the caller
            if event.recurrence is not None or event.end_time >= start:
                matches.append(event.model_copy(deep=True))
        return sorted(matches, key=lambda e: e.start_time)

    async def generate_event_id(self) -> str:
        return str(uuid.uuid4())
