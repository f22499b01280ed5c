"""In-memory implementations of the scheduling repositories."""

from .events import MemoryCalendarEventRepository
from .holidays import MemoryHolidayRepository
from .notifications import MemoryAuditRepository, MemoryBroadcastRepository
from .schedule import MemoryScheduleDayRepository
from .staff import MemoryStaffRepository

__all__ = [
    "MemoryAuditRepository",
    "MemoryBroadcastRepository",
    "MemoryCalendarEventRepository",
    "MemoryHolidayRepository",
    "MemoryScheduleDayRepository",
    "MemoryStaffRepository",
]
