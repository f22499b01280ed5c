"""
Pydantic models for API requests.
These define the contract between the API and external clients.

Day and event payloads use the domain request models (DayUpdate,
EventRequest) directly; this module only holds envelopes specific to HTTP.
"""

from datetime import date
from typing import Any, List

from pydantic import AliasChoices, BaseModel, Field

from worktime.domain import PublicHolidayRequest


class WeekReplaceRequest(BaseModel):
    """
    Seven day entries, either a list ordered Monday..Sunday or an object
    keyed by weekday name or "0".."6" index. The count is checked by the
    use case so that a wrong count is reported like any other schedule
    validation error.
    """

    days: Any


class DuplicateEventRequest(BaseModel):
    new_date: date = Field(
        ..., validation_alias=AliasChoices("date", "newDate", "new_date")
    )


class BulkHolidayRequest(BaseModel):
    holidays: List[PublicHolidayRequest]
