"""
Resolution of calendar event requests into concrete instants.

Requests carry separate date and time-of-day fields. All-day events are
anchored at local midnight; timed events combine the date with the time of
day in the configured zone. An end that precedes the start falls back to
the start.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .domain import (
    CalendarEvent,
    EventOccurrence,
    EventRequest,
    RecurrencePattern,
)
from .exceptions import ScheduleValidationError
from .time_blocks import parse_time_of_day

logger = logging.getLogger(__name__)

DEFAULT_EVENT_COLOR = "#475569"

EVENT_TYPE_COLORS: Dict[str, str] = {
    "Arbeit": "#0EA5E9",
    "Meeting": "#6366F1",
    "Urlaub": "#F97316",
    "Krankheit": "#EF4444",
    "Training": "#10B981",
    "Projekt": "#8B5CF6",
    "Termin": "#06B6D4",
    "Deadline": "#DC2626",
    "Personal": "#84CC16",
}

# Upper bound on recurrence steps per event and window
MAX_RECURRENCE_STEPS = 2000


def event_color(event_type: Optional[str]) -> str:
    return EVENT_TYPE_COLORS.get(event_type or "", DEFAULT_EVENT_COLOR)


def _parse_date_field(
    value: Optional[str], tz: tzinfo
) -> Tuple[Optional[date], Optional[time]]:
    """
    Split an ISO date or datetime string into its date and, when present,
    its local time of day. Unparsable input yields (None, None).
    """
    if not value or not value.strip():
        return None, None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        logger.warning("Unparsable event date", extra={"value": value})
        return None, None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)
    has_time = "T" in value or " " in value.strip()
    clock = parsed.time().replace(tzinfo=None) if has_time else None
    return parsed.date(), clock


def _parse_event_time(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    parsed = parse_time_of_day(value)
    if parsed is not None:
        return parsed
    try:
        return time.fromisoformat(value.strip()).replace(tzinfo=None)
    except ValueError:
        return None


def resolve_event_times(
    all_day: bool,
    start_date: Optional[str],
    end_date: Optional[str] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    tz: tzinfo = timezone.utc,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Resolve request fields into (start, end) instants in ``tz``.

    Returns (None, None) when the start date cannot be parsed; callers must
    reject the request instead of building a partial event.
    """
    start_day, start_clock = _parse_date_field(start_date, tz)
    if start_day is None:
        return None, None
    end_day, end_clock = _parse_date_field(end_date, tz)
    if end_day is None:
        end_day = start_day

    if all_day:
        start = datetime.combine(start_day, time.min, tzinfo=tz)
        end = datetime.combine(end_day, time.min, tzinfo=tz)
    else:
        start_of_day = _parse_event_time(start_time) or start_clock or time.min
        end_of_day = _parse_event_time(end_time) or end_clock or time.min
        start = datetime.combine(start_day, start_of_day, tzinfo=tz)
        end = datetime.combine(end_day, end_of_day, tzinfo=tz)

    if end < start:
        end = start
    return start, end


def build_event(
    request: EventRequest,
    event_id: str,
    owner_id: str,
    tz: tzinfo,
    now: Optional[datetime] = None,
    created_at: Optional[datetime] = None,
) -> CalendarEvent:
    """
    Build an event from a create or update request.

    Raises:
        ScheduleValidationError: If the start date is missing or unparsable
    """
    start, end = resolve_event_times(
        request.all_day,
        request.start_date,
        request.end_date,
        request.start_time,
        request.end_time,
        tz,
    )
    if start is None or end is None:
        raise ScheduleValidationError(
            "A valid start date is required (YYYY-MM-DD)", field="startDate"
        )
    stamp = now or datetime.now(timezone.utc)
    return CalendarEvent(
        event_id=event_id,
        owner_id=owner_id,
        title=request.title,
        description=request.description,
        start_time=start,
        end_time=end,
        all_day=request.all_day,
        event_type=request.event_type,
        color=request.color or event_color(request.event_type),
        location=request.location,
        attendees=request.attendees,
        attachments=request.attachments,
        priority=request.priority,
        status=request.status,
        category=request.category,
        reminder=request.reminder,
        notes=request.notes,
        tags=request.tags,
        recurrence=request.build_recurrence(),
        created_at=created_at or stamp,
        updated_at=stamp,
    )


def duplicate_event(
    event: CalendarEvent,
    new_date: date,
    new_event_id: str,
    tz: tzinfo,
    now: Optional[datetime] = None,
) -> CalendarEvent:
    """
    Copy an event onto another date, keeping its duration and mode.

    Timed events keep the original wall-clock start in ``tz``; all-day
    events shift by whole days.
    """
    local_start = event.start_time.astimezone(tz)
    local_end = event.end_time.astimezone(tz)
    if event.all_day:
        span_days = (local_end.date() - local_start.date()).days
        start = datetime.combine(new_date, time.min, tzinfo=tz)
        end = datetime.combine(
            new_date + timedelta(days=span_days), time.min, tzinfo=tz
        )
    else:
        start = datetime.combine(
            new_date, local_start.time().replace(tzinfo=None), tzinfo=tz
        )
        end = start + event.duration

    stamp = now or datetime.now(timezone.utc)
    return event.model_copy(
        update={
            "event_id": new_event_id,
            "start_time": start,
            "end_time": end,
            "created_at": stamp,
            "updated_at": stamp,
        }
    )


def _step(pattern: RecurrencePattern, steps: int) -> relativedelta:
    if pattern == RecurrencePattern.DAILY:
        return relativedelta(days=steps)
    if pattern == RecurrencePattern.MONTHLY:
        return relativedelta(months=steps)
    if pattern == RecurrencePattern.YEARLY:
        return relativedelta(years=steps)
    return relativedelta(weeks=steps)


def _first_step_index(
    base: datetime, pattern: RecurrencePattern, interval: int, window: datetime
) -> int:
    """Number of whole intervals that fit between base and window start."""
    if base >= window:
        return 0
    if pattern == RecurrencePattern.MONTHLY:
        elapsed = (window.year - base.year) * 12 + window.month - base.month
    elif pattern == RecurrencePattern.YEARLY:
        elapsed = window.year - base.year
    else:
        elapsed = (window.date() - base.date()).days
        if pattern != RecurrencePattern.DAILY:
            elapsed //= 7
    return max(0, elapsed // interval)


def expand_recurring_events(
    events: Iterable[CalendarEvent],
    range_start: date,
    range_end: date,
    tz: tzinfo = timezone.utc,
) -> List[EventOccurrence]:
    """
    Expand recurring events into concrete occurrences inside a window.

    Non-recurring events pass through as a single occurrence. Occurrence k
    of a series starts at ``base + k * interval`` in wall-clock time of
    ``tz``, so month and year steps clamp to the month end without drifting.
    """
    window_start = datetime.combine(range_start, time.min, tzinfo=tz)
    window_end = datetime.combine(range_end, time.max, tzinfo=tz)
    expanded: List[EventOccurrence] = []

    for event in events:
        if event.recurrence is None:
            expanded.append(
                EventOccurrence(
                    occurrence_id=event.event_id,
                    event=event,
                    start_time=event.start_time,
                    end_time=event.end_time,
                )
            )
            continue

        rule = event.recurrence
        base = event.start_time.astimezone(tz)
        duration = max(event.duration, timedelta(0))
        effective_end = window_end
        if rule.end_date is not None:
            limit = rule.end_date
            if limit.tzinfo is None:
                limit = limit.replace(tzinfo=tz)
            effective_end = min(effective_end, limit)

        index = _first_step_index(base, rule.pattern, rule.interval, window_start)
        for _ in range(MAX_RECURRENCE_STEPS):
            occurrence_start = base + _step(rule.pattern, index * rule.interval)
            if occurrence_start > effective_end:
                break
            index += 1
            if occurrence_start < window_start:
                continue
            expanded.append(
                EventOccurrence(
                    occurrence_id=(
                        f"{event.event_id}-occ-"
                        f"{occurrence_start.strftime('%Y%m%d')}"
                    ),
                    event=event,
                    start_time=occurrence_start,
                    end_time=occurrence_start + duration,
                    is_occurrence=True,
                    recurrence_parent_id=event.event_id,
                )
            )

    logger.debug(
        "Expanded calendar events",
        extra={
            "window_start": range_start.isoformat(),
            "window_end": range_end.isoformat(),
            "occurrence_count": len(expanded),
        },
    )
    return expanded
