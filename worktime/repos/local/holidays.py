"""
Local YAML-based implementation of HolidayRepository.

The file holds a single ``holidays`` list::

    holidays:
      - date: 2024-05-01
        name: Tag der Arbeit
        region: DE
"""

import logging
import uuid
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import yaml
from pydantic import ValidationError

from worktime.domain import PublicHoliday
from worktime.repositories import HolidayRepository

logger = logging.getLogger(__name__)


class LocalHolidayRepository(HolidayRepository):
    """
    Public holidays kept in a YAML file. The file is read on first use and
    rewritten in full on every change.
    """

    def __init__(self, holidays_path: str):
        self.holidays_path = Path(holidays_path).expanduser()
        self._holidays: Optional[Dict[str, PublicHoliday]] = None
        logger.debug(
            f"Initialized LocalHolidayRepository with path: "
            f"{self.holidays_path}"
        )

    def _parse_entry(self, index: int, entry: Any) -> Optional[PublicHoliday]:
        if not isinstance(entry, dict):
            logger.error(
                f"Holiday entry {index} must be a mapping: "
                f"{self.holidays_path}"
            )
            return None
        data = dict(entry)
        data.setdefault("holiday_id", f"{self.holidays_path.stem}-{index}")
        try:
            return PublicHoliday.model_validate(data)
        except ValidationError as e:
            logger.error(f"Failed to parse holiday entry {index}: {e}")
            return None

    def load(self) -> Dict[str, PublicHoliday]:
        """Read the file; a missing or malformed file yields no holidays."""
        if self._holidays is not None:
            return self._holidays

        self._holidays = {}
        if not self.holidays_path.exists():
            logger.warning(f"Holidays file not found: {self.holidays_path}")
            return self._holidays

        with open(self.holidays_path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict) or not isinstance(
            data.get("holidays"), list
        ):
            logger.error(
                f"Holidays file must contain a 'holidays' list: "
                f"{self.holidays_path}"
            )
            return self._holidays

        for index, entry in enumerate(data["holidays"]):
            holiday = self._parse_entry(index, entry)
            if holiday is not None:
                self._holidays[holiday.holiday_id] = holiday

        logger.info(
            f"Loaded {len(self._holidays)} holidays from {self.holidays_path}"
        )
        return self._holidays

    def _write(self, holidays: Dict[str, PublicHoliday]) -> None:
        entries = [
            holiday.model_dump(exclude_none=True)
            for holiday in sorted(holidays.values(), key=lambda h: h.date)
        ]
        self.holidays_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.holidays_path, "w") as f:
            yaml.safe_dump({"holidays": entries}, f, sort_keys=False)

    async def get_public_holidays(
        self, start_date: date, end_date: date
    ) -> Set[date]:
        return {
            holiday.date
            for holiday in self.load().values()
            if start_date <= holiday.date <= end_date
        }

    async def list_holidays(self, year: int) -> List[PublicHoliday]:
        return sorted(
            (h for h in self.load().values() if h.date.year == year),
            key=lambda h: h.date,
        )

    async def get_holiday(self, holiday_id: str) -> Optional[PublicHoliday]:
        return self.load().get(holiday_id)

    async def save_holidays(self, holidays: List[PublicHoliday]) -> None:
        updated = dict(self.load())
        for holiday in holidays:
            updated[holiday.holiday_id] = holiday
        self._write(updated)
        self._holidays = updated

    async def delete_holiday(self, holiday_id: str) -> bool:
        current = self.load()
        if holiday_id not in current:
            return False
        updated = {k: v for k, v in current.items() if k != holiday_id}
        self._write(updated)
        self._holidays = updated
        return True

    async def generate_holiday_id(self) -> str:
        return str(uuid.uuid4())
