"""
In-memory implementation of HolidayRepository.
"""

import logging
import uuid
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from worktime.domain import PublicHoliday
from worktime.repositories import HolidayRepository

logger = logging.getLogger(__name__)


class MemoryHolidayRepository(HolidayRepository):
    def __init__(self, holidays: Optional[Iterable[PublicHoliday]] = None):
        self._holidays: Dict[str, PublicHoliday] = {
            holiday.holiday_id: holiday for holiday in holidays or []
        }

    async def get_public_holidays(
        self, start_date: date, end_date: date
    ) -> Set[date]:
        return {
            holiday.date
            for holiday in self._holidays.values()
            if start_date <= holiday.date <= end_date
        }

    async def list_holidays(self, year: int) -> List[PublicHoliday]:
        return sorted(
            (h for h in self._holidays.values() if h.date.year == year),
            key=lambda h: h.date,
        )

    async def get_holiday(self, holiday_id: str) -> Optional[PublicHoliday]:
        return self._holidays.get(holiday_id)

    async def save_holidays(self, holidays: List[PublicHoliday]) -> None:
        for holiday in holidays:
            self._holidays[holiday.holiday_id] = holiday.model_copy(deep=True)
        logger.debug(
            "Saved holidays in memory", extra={"count": len(holidays)}
        )

    async def delete_holiday(self, holiday_id: str) -> bool:
        return self._holidays.pop(holiday_id, None) is not None

    async def generate_holiday_id(self) -> str:
        return str(uuid.uuid4())
