"""
Local YAML-based implementation of StaffRepository.

The file holds a single ``staff`` list::

    staff:
      - user_id: anna
        name: Anna Schmidt
        role: admin
        employment_type: full_time
        weekly_quota: 40
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import ValidationError

from worktime.domain import StaffMember
from worktime.repositories import StaffRepository

logger = logging.getLogger(__name__)


class LocalStaffRepository(StaffRepository):
    """Read-only staff directory loaded once from a YAML file."""

    def __init__(self, staff_path: str):
        self.staff_path = Path(staff_path).expanduser()
        self._members: Optional[Dict[str, StaffMember]] = None

    def load(self) -> Dict[str, StaffMember]:
        if self._members is not None:
            return self._members

        self._members = {}
        if not self.staff_path.exists():
            logger.warning(f"Staff file not found: {self.staff_path}")
            return self._members

        with open(self.staff_path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict) or not isinstance(
            data.get("staff"), list
        ):
            logger.error(
                f"Staff file must contain a 'staff' list: {self.staff_path}"
            )
            return self._members

        for entry in data["staff"]:
            try:
                member = StaffMember.model_validate(entry)
            except ValidationError as e:
                logger.error(f"Failed to parse staff entry: {e}")
                continue
            self._members[member.user_id] = member

        logger.info(
            f"Loaded {len(self._members)} staff members from "
            f"{self.staff_path}"
        )
        return self._members

    async def get_staff_member(self, user_id: str) -> Optional[StaffMember]:
        return self.load().get(user_id)

    async def list_staff(self) -> List[StaffMember]:
        return sorted(self.load().values(), key=lambda m: m.name)
