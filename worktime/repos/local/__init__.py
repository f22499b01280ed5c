"""File-backed repositories."""

from .holidays import LocalHolidayRepository
from .staff import LocalStaffRepository

__all__ = ["LocalHolidayRepository", "LocalStaffRepository"]
