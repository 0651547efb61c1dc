"""
Recurrence expansion and time-grid placement for calendar blocks.

Everything here is a pure function of its arguments. Blocks are read through
their attributes (`day`, `start_time`, `end_time`, `recurrence_type`,
`recurrence_end_date`, `recurrence_days_of_week`), so both `models.Block`
rows and transient instances work. Dates are compared as calendar dates only;
no timezone-aware instant is built for day arithmetic.
"""
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from services.validation_service import parse_day_value, parse_days_of_week, parse_time_str


DEFAULT_GRID_ORIGIN_HOUR = 4
DEFAULT_PIXELS_PER_HOUR = 49


def sunday_weekday(day_value) -> int:
    """Weekday number with 0 = Sunday ... 6 = Saturday."""
    return (day_value.weekday() + 1) % 7


def occurs_on(block, query_date) -> bool:
    anchor = parse_day_value(getattr(block, "day", None))
    query = parse_day_value(query_date)
    if anchor is None or query is None:
        return False

    rec_type = (getattr(block, "recurrence_type", None) or "").lower()
    if not rec_type:
        return query == anchor

    if query < anchor:
        return False
    end_day = getattr(block, "recurrence_end_date", None)
    if end_day:
        end_day = parse_day_value(end_day)
        if end_day is not None and query > end_day:
            return False

    if rec_type == "daily":
        return True
    if rec_type == "weekly":
        days_of_week = parse_days_of_week(getattr(block, "recurrence_days_of_week", None))
        if days_of_week:
            return sunday_weekday(query) in days_of_week
        # Rules saved before per-weekday selection existed.
        return query.weekday() == anchor.weekday()
    if rec_type == "monthly":
        # Exact day-of-month match: a 31st anchor skips 30-day months.
        return query.day == anchor.day
    return False


def occurrences_for_day(blocks: Iterable, query_date) -> List:
    """Blocks with an occurrence on `query_date`, in input order."""
    return [block for block in blocks if occurs_on(block, query_date)]


def occurrences_for_range(blocks: Iterable, start_day, end_day) -> Dict[str, List]:
    """Map each ISO day in [start_day, end_day] to its occurring blocks."""
    start = parse_day_value(start_day)
    end = parse_day_value(end_day)
    blocks = list(blocks)
    by_day = {}
    if start is None or end is None or end < start:
        return by_day
    current = start
    while current <= end:
        by_day[current.isoformat()] = occurrences_for_day(blocks, current)
        current += timedelta(days=1)
    return by_day


def week_days(anchor_day, week_starts_on: int = 1) -> List:
    """The seven dates of the week containing `anchor_day`.

    `week_starts_on` follows the same numbering as daysOfWeek (0 = Sunday, 1 = Monday).
    """
    anchor = parse_day_value(anchor_day)
    if anchor is None:
        return []
    offset = (sunday_weekday(anchor) - week_starts_on) % 7
    first = anchor - timedelta(days=offset)
    return [first + timedelta(days=i) for i in range(7)]


def _minutes(value) -> Optional[int]:
    parsed = parse_time_str(value)
    if parsed is None:
        return None
    return parsed.hour * 60 + parsed.minute


def placement(block, grid_origin_hour=DEFAULT_GRID_ORIGIN_HOUR,
              pixels_per_minute=DEFAULT_PIXELS_PER_HOUR / 60) -> Optional[Dict[str, float]]:
    """Vertical offset and height of a block in a grid starting at `grid_origin_hour`.

    Returns None when the block starts before the grid's first hour (it is
    suppressed, not clipped) or has no usable start/end time. A block ending
    before it starts yields a negative height.
    """
    start = _minutes(getattr(block, "start_time", None))
    end = _minutes(getattr(block, "end_time", None))
    if start is None or end is None:
        return None
    if start // 60 < grid_origin_hour:
        return None
    return {
        "top": (start - grid_origin_hour * 60) * pixels_per_minute,
        "height": (end - start) * pixels_per_minute,
    }


def _start_sort_key(block):
    return _minutes(getattr(block, "start_time", None)) or 0


def layout_day(blocks: Iterable, query_date, grid_origin_hour=DEFAULT_GRID_ORIGIN_HOUR,
               pixels_per_minute=DEFAULT_PIXELS_PER_HOUR / 60) -> List[Tuple[object, Dict[str, float]]]:
    """Occurrences on `query_date` sorted by start time, paired with their placement."""
    placed = []
    for block in sorted(occurrences_for_day(blocks, query_date), key=_start_sort_key):
        position = placement(block, grid_origin_hour, pixels_per_minute)
        if position is not None:
            placed.append((block, position))
    return placed
