"""
FastAPI application for working-time schedules, hours and calendar events.
"""

import logging
import os
from datetime import date
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse

from worktime.api.dependencies import (
    get_calendar_event_use_case,
    get_current_user_id,
    get_holiday_management_use_case,
    get_hours_summary_use_case,
    get_replace_schedule_week_use_case,
    get_schedule_audit_use_case,
    get_schedule_week_use_case,
    get_staff_overview_use_case,
    get_update_schedule_day_use_case,
)
from worktime.api.requests import (
    BulkHolidayRequest,
    DuplicateEventRequest,
    WeekReplaceRequest,
)
from worktime.api.responses import (
    AuditEntryResponse,
    CalendarEventResponse,
    ErrorResponse,
    HealthCheckResponse,
    MonthHoursSummaryResponse,
    PublicHolidayResponse,
    ScheduleDayResponse,
    StaffHoursOverviewResponse,
    WeekHoursSummaryResponse,
    WeekScheduleResponse,
)
from worktime.domain import (
    DayUpdate,
    EventRequest,
    PublicHolidayRequest,
    Weekday,
)
from worktime.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ScheduleValidationError,
)
from worktime.usecase import (
    CalendarEventUseCase,
    HolidayManagementUseCase,
    HoursSummaryUseCase,
    ReplaceScheduleWeekUseCase,
    ScheduleAuditUseCase,
    ScheduleWeekUseCase,
    StaffOverviewUseCase,
    UpdateScheduleDayUseCase,
)


def setup_logging() -> None:
    """Configure logging based on environment variables"""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    log_format = os.environ.get(
        "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        print(f"Invalid log level: {log_level}, defaulting to INFO")
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        force=True,  # Override any existing configuration
    )


# Setup logging when module is imported
setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Working-Time Scheduling API")


# --- Error mapping ---


def _error(status_code: int, message: str, field: Optional[str] = None):
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, field=field).model_dump(
            exclude_none=True
        ),
    )


@app.exception_handler(ScheduleValidationError)
async def validation_error_handler(
    request: Request, exc: ScheduleValidationError
) -> JSONResponse:
    return _error(400, exc.message, exc.field)


@app.exception_handler(PermissionDeniedError)
async def permission_error_handler(
    request: Request, exc: PermissionDeniedError
) -> JSONResponse:
    return _error(403, str(exc))


@app.exception_handler(NotFoundError)
async def not_found_error_handler(
    request: Request, exc: NotFoundError
) -> JSONResponse:
    return _error(404, str(exc))


@app.exception_handler(PersistenceError)
async def persistence_error_handler(
    request: Request, exc: PersistenceError
) -> JSONResponse:
    # Store details stay in the logs
    logger.error("Persistence failure", extra={"path": request.url.path})
    return _error(503, "The change could not be saved, please try again")


@app.exception_handler(Exception)
async def unexpected_error_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    logger.error(
        "Unhandled error",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
        exc_info=exc,
    )
    return _error(500, "Internal server error")


def _parse_weekday(value: str) -> Weekday:
    try:
        if value.isdigit():
            return Weekday.from_index(int(value))
        return Weekday(value.lower())
    except ValueError as e:
        raise ScheduleValidationError(
            f"Unknown weekday: {value}", field="weekday"
        ) from e


# --- Health ---


@app.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint"""
    logger.debug("Health check requested")
    return HealthCheckResponse(status="ok", version="1.0.0")


# --- Schedule ---


@app.get("/schedule/week/{week_start}", response_model=WeekScheduleResponse)
async def get_week(
    week_start: date,
    user_id: Optional[str] = Query(None, alias="userId"),
    actor_id: str = Depends(get_current_user_id),
    use_case: ScheduleWeekUseCase = Depends(get_schedule_week_use_case),
) -> WeekScheduleResponse:
    """The seven days of a week, seeding defaults on first view."""
    target = user_id or actor_id
    days = await use_case.execute(actor_id, target, week_start)
    return WeekScheduleResponse(
        user_id=target,
        week_start=days[0].week_start,
        days=[ScheduleDayResponse.from_domain(day) for day in days],
    )


@app.put(
    "/schedule/week/{week_start}/days/{weekday}",
    response_model=ScheduleDayResponse,
)
async def update_day(
    week_start: date,
    weekday: str,
    update: DayUpdate,
    user_id: Optional[str] = Query(None, alias="userId"),
    actor_id: str = Depends(get_current_user_id),
    use_case: UpdateScheduleDayUseCase = Depends(
        get_update_schedule_day_use_case
    ),
) -> ScheduleDayResponse:
    day = await use_case.execute(
        actor_id,
        user_id or actor_id,
        week_start,
        _parse_weekday(weekday),
        update,
    )
    return ScheduleDayResponse.from_domain(day)


@app.put("/schedule/week/{week_start}", response_model=WeekScheduleResponse)
async def replace_week(
    week_start: date,
    request: WeekReplaceRequest,
    user_id: Optional[str] = Query(None, alias="userId"),
    actor_id: str = Depends(get_current_user_id),
    use_case: ReplaceScheduleWeekUseCase = Depends(
        get_replace_schedule_week_use_case
    ),
) -> WeekScheduleResponse:
    """Replace all seven days at once; nothing is applied on failure."""
    target = user_id or actor_id
    days = await use_case.execute(actor_id, target, week_start, request.days)
    return WeekScheduleResponse(
        user_id=target,
        week_start=days[0].week_start,
        days=[ScheduleDayResponse.from_domain(day) for day in days],
    )


@app.get(
    "/schedule/hours-summary/month/{year}/{month}",
    response_model=MonthHoursSummaryResponse,
)
async def month_hours_summary(
    year: int,
    month: int,
    user_id: Optional[str] = Query(None, alias="userId"),
    actor_id: str = Depends(get_current_user_id),
    use_case: HoursSummaryUseCase = Depends(get_hours_summary_use_case),
) -> MonthHoursSummaryResponse:
    summary = await use_case.month_summary(
        actor_id, user_id or actor_id, year, month
    )
    return MonthHoursSummaryResponse.model_validate(
        summary.model_dump(mode="json")
    )


@app.get(
    "/schedule/hours-summary/{week_start}",
    response_model=WeekHoursSummaryResponse,
)
async def week_hours_summary(
    week_start: date,
    user_id: Optional[str] = Query(None, alias="userId"),
    actor_id: str = Depends(get_current_user_id),
    use_case: HoursSummaryUseCase = Depends(get_hours_summary_use_case),
) -> WeekHoursSummaryResponse:
    summary = await use_case.week_summary(
        actor_id, user_id or actor_id, week_start
    )
    return WeekHoursSummaryResponse.model_validate(
        summary.model_dump(mode="json")
    )


@app.get(
    "/schedule/audit/{week_start}", response_model=List[AuditEntryResponse]
)
async def week_audit(
    week_start: date,
    user_id: Optional[str] = Query(None, alias="userId"),
    actor_id: str = Depends(get_current_user_id),
    use_case: ScheduleAuditUseCase = Depends(get_schedule_audit_use_case),
) -> List[AuditEntryResponse]:
    entries = await use_case.execute(
        actor_id, user_id or actor_id, week_start
    )
    return [AuditEntryResponse.from_domain(entry) for entry in entries]


@app.get(
    "/schedule/users", response_model=List[StaffHoursOverviewResponse]
)
async def staff_overview(
    actor_id: str = Depends(get_current_user_id),
    use_case: StaffOverviewUseCase = Depends(get_staff_overview_use_case),
) -> List[StaffHoursOverviewResponse]:
    """Current-week hours of all staff (administrators only)."""
    rows = await use_case.execute(actor_id)
    return [
        StaffHoursOverviewResponse.model_validate(row.model_dump(mode="json"))
        for row in rows
    ]


# --- Public holidays ---


@app.get("/public-holidays", response_model=List[PublicHolidayResponse])
async def list_holidays(
    year: Optional[int] = Query(None),
    actor_id: str = Depends(get_current_user_id),
    use_case: HolidayManagementUseCase = Depends(
        get_holiday_management_use_case
    ),
) -> List[PublicHolidayResponse]:
    holidays = await use_case.list_holidays(year or date.today().year)
    return [PublicHolidayResponse.from_domain(h) for h in holidays]


@app.get(
    "/public-holidays/{holiday_id}", response_model=PublicHolidayResponse
)
async def get_holiday(
    holiday_id: str,
    actor_id: str = Depends(get_current_user_id),
    use_case: HolidayManagementUseCase = Depends(
        get_holiday_management_use_case
    ),
) -> PublicHolidayResponse:
    holiday = await use_case.get_holiday(holiday_id)
    return PublicHolidayResponse.from_domain(holiday)


@app.post(
    "/public-holidays",
    response_model=PublicHolidayResponse,
    status_code=201,
)
async def create_holiday(
    request: PublicHolidayRequest,
    actor_id: str = Depends(get_current_user_id),
    use_case: HolidayManagementUseCase = Depends(
        get_holiday_management_use_case
    ),
) -> PublicHolidayResponse:
    holidays = await use_case.create_holidays(actor_id, [request])
    return PublicHolidayResponse.from_domain(holidays[0])


@app.post(
    "/public-holidays/bulk",
    response_model=List[PublicHolidayResponse],
    status_code=201,
)
async def create_holidays_bulk(
    request: BulkHolidayRequest,
    actor_id: str = Depends(get_current_user_id),
    use_case: HolidayManagementUseCase = Depends(
        get_holiday_management_use_case
    ),
) -> List[PublicHolidayResponse]:
    holidays = await use_case.create_holidays(actor_id, request.holidays)
    return [PublicHolidayResponse.from_domain(h) for h in holidays]


@app.delete("/public-holidays/{holiday_id}", status_code=204)
async def delete_holiday(
    holiday_id: str,
    actor_id: str = Depends(get_current_user_id),
    use_case: HolidayManagementUseCase = Depends(
        get_holiday_management_use_case
    ),
) -> Response:
    await use_case.delete_holiday(actor_id, holiday_id)
    return Response(status_code=204)


# --- Calendar events ---


@app.get("/events", response_model=List[CalendarEventResponse])
async def list_events(
    start: date,
    end: date,
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    actor_id: str = Depends(get_current_user_id),
    use_case: CalendarEventUseCase = Depends(get_calendar_event_use_case),
) -> List[CalendarEventResponse]:
    """Events in [start, end] with recurring series expanded."""
    occurrences = await use_case.list_events(actor_id, start, end, owner_id)
    return [CalendarEventResponse.from_occurrence(o) for o in occurrences]


@app.post("/events", response_model=CalendarEventResponse, status_code=201)
async def create_event(
    request: EventRequest,
    actor_id: str = Depends(get_current_user_id),
    use_case: CalendarEventUseCase = Depends(get_calendar_event_use_case),
) -> CalendarEventResponse:
    event = await use_case.create_event(actor_id, request)
    return CalendarEventResponse.from_event(event)


@app.put("/events/{event_id}", response_model=CalendarEventResponse)
async def update_event(
    event_id: str,
    request: EventRequest,
    actor_id: str = Depends(get_current_user_id),
    use_case: CalendarEventUseCase = Depends(get_calendar_event_use_case),
) -> CalendarEventResponse:
    event = await use_case.update_event(actor_id, event_id, request)
    return CalendarEventResponse.from_event(event)


@app.post(
    "/events/{event_id}/duplicate",
    response_model=CalendarEventResponse,
    status_code=201,
)
async def duplicate_event(
    event_id: str,
    request: DuplicateEventRequest,
    actor_id: str = Depends(get_current_user_id),
    use_case: CalendarEventUseCase = Depends(get_calendar_event_use_case),
) -> CalendarEventResponse:
    event = await use_case.duplicate_event(
        actor_id, event_id, request.new_date
    )
    return CalendarEventResponse.from_event(event)


@app.delete("/events/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    actor_id: str = Depends(get_current_user_id),
    use_case: CalendarEventUseCase = Depends(get_calendar_event_use_case),
) -> Response:
    await use_case.delete_event(actor_id, event_id)
    return Response(status_code=204)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "worktime.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
