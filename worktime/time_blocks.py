"""
Sanitizing and merging of raw daily time intervals.

The sanitizer never raises for bad data: malformed or inverted entries are
dropped and the result degrades to an empty (not working) or minimal valid
block list. Callers that need at least one block decide whether an empty
result is an error.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from datetime import time
from typing import Any, Iterable, List, Optional, Tuple

from .domain import TimeBlock

logger = logging.getLogger(__name__)

TIME_OF_DAY_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_time_of_day(value: Any) -> Optional[time]:
    """
    Parse an ``HH:MM`` string (hour 0-23, minute 0-59) into a time.

    Already parsed ``time`` values are accepted as-is (truncated to the
    minute). Anything else yields None.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str):
        return None
    match = TIME_OF_DAY_PATTERN.match(value.strip())
    if not match:
        return None
    return time(int(match.group(1)), int(match.group(2)))


def _coerce_interval(entry: Any) -> Optional[Tuple[time, time]]:
    """Extract a (start, end) pair from a block-like entry."""
    if isinstance(entry, TimeBlock):
        return entry.start, entry.end
    if isinstance(entry, Mapping):
        raw_start, raw_end = entry.get("start"), entry.get("end")
    elif (
        isinstance(entry, Sequence)
        and not isinstance(entry, str)
        and len(entry) == 2
    ):
        raw_start, raw_end = entry[0], entry[1]
    else:
        return None

    start = parse_time_of_day(raw_start)
    end = parse_time_of_day(raw_end)
    if start is None or end is None or end <= start:
        return None
    return start, end


def merge_time_blocks(blocks: Iterable[TimeBlock]) -> List[TimeBlock]:
    """
    Merge overlapping blocks of one day.

    Blocks are sorted by start; a block that starts strictly before the end
    of the last merged block extends it, otherwise it is appended.
    """
    ordered = sorted(blocks, key=lambda b: (b.start_minutes, b.end_minutes))
    merged: List[TimeBlock] = []
    for candidate in ordered:
        if merged and candidate.start_minutes < merged[-1].end_minutes:
            last = merged[-1]
            if candidate.end_minutes > last.end_minutes:
                merged[-1] = TimeBlock(start=last.start, end=candidate.end)
            continue
        merged.append(candidate)
    return merged


def sanitize_time_blocks(
    raw_blocks: Optional[Iterable[Any]],
    fallback_start: Any = None,
    fallback_end: Any = None,
) -> List[TimeBlock]:
    """
    Turn a possibly malformed list of intervals into the canonical block
    list for one calendar day.

    Args:
        raw_blocks: Entries shaped like ``{"start": "08:00", "end": "12:00"}``,
            ``("08:00", "12:00")`` or TimeBlock instances
        fallback_start: Single-interval start used when no entry survives
        fallback_end: Single-interval end used when no entry survives

    Returns:
        Sorted, pairwise non-overlapping blocks; empty means not working
    """
    entries = list(raw_blocks or [])
    blocks: List[TimeBlock] = []
    for entry in entries:
        interval = _coerce_interval(entry)
        if interval is None:
            continue
        blocks.append(TimeBlock(start=interval[0], end=interval[1]))

    dropped = len(entries) - len(blocks)
    if dropped:
        logger.warning(
            "Dropped invalid time blocks",
            extra={"dropped": dropped, "received": len(entries)},
        )

    if not blocks and (fallback_start is not None or fallback_end is not None):
        fallback = _coerce_interval(
            {"start": fallback_start, "end": fallback_end}
        )
        if fallback is not None:
            blocks.append(TimeBlock(start=fallback[0], end=fallback[1]))

    return merge_time_blocks(blocks)


def total_minutes(blocks: Iterable[TimeBlock]) -> int:
    return sum(block.duration_minutes for block in blocks)


def total_hours(blocks: Iterable[TimeBlock]) -> float:
    """
    Hours worked on a day: the sum of block durations, so gaps such as a
    lunch break are not counted.
    """
    return total_minutes(blocks) / 60
