"""PostgreSQL implementations of the scheduling repositories."""

from .events import PostgreSQLCalendarEventRepository
from .holidays import PostgreSQLHolidayRepository
from .notifications import (
    PostgreSQLAuditRepository,
    PostgreSQLBroadcastRepository,
)
from .schedule import PostgreSQLScheduleDayRepository
from .schema import create_schema
from .staff import PostgreSQLStaffRepository

__all__ = [
    "PostgreSQLAuditRepository",
    "PostgreSQLBroadcastRepository",
    "PostgreSQLCalendarEventRepository",
    "PostgreSQLHolidayRepository",
    "PostgreSQLScheduleDayRepository",
    "PostgreSQLStaffRepository",
    "create_schema",
]
