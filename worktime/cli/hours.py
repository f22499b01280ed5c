#!/usr/bin/env python3
"""
CLI for expected-versus-booked hours.

Computes the week or month reconciliation for a weekly quota, using a
YAML holidays file and, optionally, a YAML file of booked time blocks::

    days:
      2024-05-06:
        - {start: "08:00", end: "12:00"}
        - {start: "12:30", end: "16:30"}
"""

import asyncio
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import AbstractSet, List, Optional

import click
import yaml

from worktime.domain import ScheduleDay, Weekday
from worktime.hours import summarize_month, summarize_week
from worktime.repos.local.holidays import LocalHolidayRepository
from worktime.schedule_days import schedule_day_key
from worktime.time_blocks import sanitize_time_blocks
from worktime.working_days import (
    iso_week_number,
    month_bounds,
    monday_of,
    sunday_of,
    to_calendar_date,
)

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

CLI_USER = "cli"


def _load_holidays(
    holidays_file: Optional[str], start: date, end: date
) -> AbstractSet[date]:
    if not holidays_file:
        return set()
    repo = LocalHolidayRepository(holidays_file)
    return asyncio.run(repo.get_public_holidays(start, end))


def _load_booked_days(schedule_file: Optional[str]) -> List[ScheduleDay]:
    """Turn a YAML map of date -> blocks into schedule day records."""
    if not schedule_file:
        return []
    with open(Path(schedule_file).expanduser(), "r") as f:
        data = yaml.safe_load(f) or {}

    entries = data.get("days") if isinstance(data, dict) else None
    if not isinstance(entries, dict):
        raise click.ClickException(
            f"Schedule file must contain a 'days' mapping: {schedule_file}"
        )

    now = datetime.now(timezone.utc)
    days = []
    for raw_date, raw_blocks in entries.items():
        try:
            day = to_calendar_date(raw_date)
        except ValueError:
            raise click.ClickException(
                f"Invalid date in schedule: {raw_date}"
            )
        blocks = sanitize_time_blocks(raw_blocks or [])
        weekday = Weekday.for_date(day)
        days.append(
            ScheduleDay(
                schedule_day_id=schedule_day_key(
                    CLI_USER, monday_of(day), weekday
                ),
                user_id=CLI_USER,
                week_start=monday_of(day),
                weekday=weekday,
                is_working=bool(blocks),
                time_blocks=blocks,
                last_updated_by=CLI_USER,
                created_at=now,
                updated_at=now,
            )
        )
    return days


@click.group()
def cli() -> None:
    """Expected-versus-booked working hours."""


@cli.command()
@click.option("--quota", default=40.0, show_default=True, type=float,
              help="Weekly quota in hours.")
@click.option("--week", "week_of", required=True,
              help="Any date inside the week (YYYY-MM-DD).")
@click.option("--holidays-file", type=click.Path(),
              help="YAML file with a 'holidays' list.")
@click.option("--schedule-file", type=click.Path(exists=True),
              help="YAML file with booked time blocks per date.")
def week(
    quota: float,
    week_of: str,
    holidays_file: Optional[str],
    schedule_file: Optional[str],
) -> None:
    """Reconcile one week."""
    try:
        monday = monday_of(week_of)
    except ValueError:
        raise click.BadParameter(
            f"Invalid date: {week_of}", param_hint="--week"
        )
    holidays = _load_holidays(holidays_file, monday, sunday_of(monday))
    summary = summarize_week(
        quota, monday, _load_booked_days(schedule_file), holidays
    )

    click.echo(
        f"Week {iso_week_number(monday)}: {monday.isoformat()} - "
        f"{sunday_of(monday).isoformat()}"
    )
    click.echo(f"Working days:      {summary.working_days_count}")
    click.echo(f"Expected hours:    {summary.expected_hours:.2f}")
    click.echo(f"Booked hours:      {summary.total_booked:.2f}")
    click.echo(f"  on working days: {summary.working_day_hours:.2f}")
    click.echo(f"  weekend/holiday: {summary.weekend_or_holiday_hours:.2f}")
    click.echo(f"Difference:        {summary.difference:+.2f}")
    click.echo(f"Status:            {summary.status.value}")


@cli.command()
@click.option("--quota", default=40.0, show_default=True, type=float,
              help="Weekly quota in hours.")
@click.option("--year", required=True, type=int)
@click.option("--month", required=True, type=click.IntRange(1, 12))
@click.option("--holidays-file", type=click.Path(),
              help="YAML file with a 'holidays' list.")
@click.option("--schedule-file", type=click.Path(exists=True),
              help="YAML file with booked time blocks per date.")
def month(
    quota: float,
    year: int,
    month: int,
    holidays_file: Optional[str],
    schedule_file: Optional[str],
) -> None:
    """Reconcile one calendar month, week by week."""
    month_start, month_end = month_bounds(year, month)
    holidays = _load_holidays(
        holidays_file, monday_of(month_start), sunday_of(month_end)
    )
    summary = summarize_month(
        quota, year, month, _load_booked_days(schedule_file), holidays
    )

    click.echo(f"Month {year}-{month:02d}")
    click.echo("-" * 30)
    for entry in summary.weeks:
        click.echo(
            f"{entry.week_start.isoformat()}  "
            f"days={entry.days_in_month}  "
            f"working={entry.working_days_count}  "
            f"expected={entry.expected_hours:.2f}  "
            f"booked={entry.total_booked:.2f}"
        )
    click.echo("-" * 30)
    click.echo(f"Working days:   {summary.working_days_count}")
    click.echo(f"Expected hours: {summary.expected_hours:.2f}")
    click.echo(f"Booked hours:   {summary.total_booked:.2f}")
    click.echo(f"Difference:     {summary.difference:+.2f}")
    click.echo(f"Status:         {summary.status.value}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
