"""
In-memory implementation of ScheduleDayRepository.
"""

import asyncio
import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from worktime.domain import ScheduleDay, Weekday
from worktime.repositories import ScheduleDayRepository

logger = logging.getLogger(__name__)

DayKey = Tuple[str, date, Weekday]


class MemoryScheduleDayRepository(ScheduleDayRepository):
    """
    Schedule days keyed by (user, week, weekday). A week write swaps in all
    records under one lock, so readers never see a half-written week.
    """

    def __init__(self) -> None:
        self._days: Dict[DayKey, ScheduleDay] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def _key(day: ScheduleDay) -> DayKey:
        return (day.user_id, day.week_start, day.weekday)

    async def get_week(
        self, user_id: str, week_start: date
    ) -> List[ScheduleDay]:
        async with self._lock:
            days = [
                day.model_copy(deep=True)
                for (owner, start, _), day in self._days.items()
                if owner == user_id and start == week_start
            ]
        return sorted(days, key=lambda d: d.weekday.day_index)

    async def get_day(
        self, user_id: str, week_start: date, weekday: Weekday
    ) -> Optional[ScheduleDay]:
        async with self._lock:
            day = self._days.get((user_id, week_start, weekday))
        return day.model_copy(deep=True) if day else None

    async def save_day(self, day: ScheduleDay) -> None:
        async with self._lock:
            self._days[self._key(day)] = day.model_copy(deep=True)

    async def save_week(self, days: List[ScheduleDay]) -> None:
        staged = {self._key(day): day.model_copy(deep=True) for day in days}
        async with self._lock:
            self._days.update(staged)
        logger.debug("Saved schedule days", extra={"count": len(staged)})

    async def insert_missing_days(self, days: List[ScheduleDay]) -> None:
        staged = {self._key(day): day.model_copy(deep=True) for day in days}
        async with self._lock:
            for key, day in staged.items():
                self._days.setdefault(key, day)

    async def get_days_in_range(
        self, user_id: str, start_date: date, end_date: date
    ) -> List[ScheduleDay]:
        async with self._lock:
            days = [
                day.model_copy(deep=True)
                for (owner, start, _), day in self._days.items()
                if owner == user_id and start_date <= start <= end_date
            ]
        return sorted(days, key=lambda d: (d.week_start, d.weekday.day_index))
