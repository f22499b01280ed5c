"""
In-memory implementation of StaffRepository.
"""

import logging
from typing import Dict, Iterable, List, Optional

from worktime.domain import StaffMember
from worktime.repositories import StaffRepository

logger = logging.getLogger(__name__)


class MemoryStaffRepository(StaffRepository):
    """Staff directory held in a dict, seeded at construction."""

    def __init__(self, members: Optional[Iterable[StaffMember]] = None):
        self._members: Dict[str, StaffMember] = {
            member.user_id: member for member in members or []
        }
        logger.debug(
            "Initialized MemoryStaffRepository",
            extra={"staff_count": len(self._members)},
        )

    def add(self, member: StaffMember) -> None:
        self._members[member.user_id] = member

    async def get_staff_member(self, user_id: str) -> Optional[StaffMember]:
        return self._members.get(user_id)

    async def list_staff(self) -> List[StaffMember]:
        return sorted(self._members.values(), key=lambda m: m.name)
