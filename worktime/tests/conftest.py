import pytest
from datetime import date
from typing import List

from worktime.domain import (
    EmploymentType,
    PublicHoliday,
    StaffMember,
    StaffRole,
)
from worktime.repos.memory import (
    MemoryAuditRepository,
    MemoryBroadcastRepository,
    MemoryCalendarEventRepository,
    MemoryHolidayRepository,
    MemoryScheduleDayRepository,
    MemoryStaffRepository,
)


@pytest.fixture
def staff_members() -> List[StaffMember]:
    """An employee, a working student, an admin and a superadmin."""
    return [
        StaffMember(user_id="emp-1", name="Erika Muster"),
        StaffMember(
            user_id="stud-1",
            name="Sam Student",
            employment_type=EmploymentType.WORKING_STUDENT,
            weekly_quota=20.0,
        ),
        StaffMember(user_id="admin-1", name="Ada Admin", role=StaffRole.ADMIN),
        StaffMember(
            user_id="root-1", name="Rita Root", role=StaffRole.SUPERADMIN
        ),
    ]


@pytest.fixture
def may_day() -> PublicHoliday:
    """Wednesday 2024-05-01."""
    return PublicHoliday(
        holiday_id="may-day", date=date(2024, 5, 1), name="Tag der Arbeit"
    )


@pytest.fixture
def staff_repo(staff_members: List[StaffMember]) -> MemoryStaffRepository:
    return MemoryStaffRepository(staff_members)


@pytest.fixture
def holiday_repo(may_day: PublicHoliday) -> MemoryHolidayRepository:
    return MemoryHolidayRepository([may_day])


@pytest.fixture
def schedule_repo() -> MemoryScheduleDayRepository:
    return MemoryScheduleDayRepository()


@pytest.fixture
def event_repo() -> MemoryCalendarEventRepository:
    return MemoryCalendarEventRepository()


@pytest.fixture
def broadcast_repo() -> MemoryBroadcastRepository:
    return MemoryBroadcastRepository()


@pytest.fixture
def audit_repo() -> MemoryAuditRepository:
    return MemoryAuditRepository()
