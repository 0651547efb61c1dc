import re
from datetime import date, datetime, time


ALLOWED_PRIORITIES = {"low", "medium", "high"}
RECURRENCE_TYPES = {"daily", "weekly", "monthly"}

COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ["1", "true", "yes", "on"]


def normalize_priority(raw, default="medium"):
    priority = str(raw or "").strip().lower()
    return priority if priority in ALLOWED_PRIORITIES else default


def normalize_color(raw):
    """Return a lower-cased hex color or None when the value is not #RGB/#RRGGBB."""
    if not raw:
        return None
    value = str(raw).strip()
    if not COLOR_PATTERN.match(value):
        return None
    return value.lower()


def parse_time_str(val):
    """Parse 24h or am/pm strings into a time object; return None on failure."""
    if not val:
        return None
    if isinstance(val, time):
        return val
    s = str(val).strip().lower().replace(" ", "")

    pattern = r"^(?P<hour>\d{1,2})(:(?P<minute>\d{1,2}))?(:(?P<second>\d{1,2}))?(?P<ampm>a|p|am|pm)?$"
    m = re.match(pattern, s)
    if not m:
        return None
    try:
        hour = int(m.group("hour"))
        minute = int(m.group("minute") or 0)
        ampm = m.group("ampm")
        if m.group("second") is not None:
            sec_val = int(m.group("second"))
            if not (0 <= sec_val <= 59):
                return None
        if ampm:
            if not (1 <= hour <= 12):
                return None
            if ampm in ("p", "pm") and hour != 12:
                hour += 12
            if ampm in ("a", "am") and hour == 12:
                hour = 0
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            return None
        return time(hour=hour, minute=minute)
    except (TypeError, ValueError):
        return None


def format_time_str(value):
    """Render a time as the HH:MM wire format."""
    if value is None:
        return None
    return value.strftime("%H:%M")


def parse_days_of_week(raw):
    """Weekday numbers (0 = Sunday ... 6 = Saturday) from a list or comma string.

    Unparseable or out-of-range entries are dropped rather than rejected.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set)):
        values = raw
    else:
        values = str(raw).split(",")
    days = []
    for val in values:
        if isinstance(val, bool):
            continue
        try:
            day = int(str(val).strip())
        except (TypeError, ValueError):
            continue
        if 0 <= day <= 6:
            days.append(day)
    return sorted(set(days))


def days_of_week_to_string(days):
    days = parse_days_of_week(days)
    return ",".join(str(d) for d in days) if days else None


def parse_day_value(raw):
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return datetime.strptime(str(raw).strip(), "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def parse_recurrence(raw):
    """Normalize a `recurring` payload into {'type', 'endDate', 'daysOfWeek'}.

    Returns None when no rule is given. Raises ValueError for an unknown
    recurrence type or an unparseable end date.
    """
    if not raw:
        return None
    if not isinstance(raw, dict):
        raise ValueError("recurring must be an object")
    rec_type = str(raw.get("type") or "").strip().lower()
    if rec_type not in RECURRENCE_TYPES:
        raise ValueError(f"Invalid recurrence type: {raw.get('type')!r}")

    end_date = None
    if raw.get("endDate"):
        end_date = parse_day_value(raw.get("endDate"))
        if not end_date:
            raise ValueError("Invalid recurrence endDate")

    days_of_week = parse_days_of_week(raw.get("daysOfWeek")) if rec_type == "weekly" else []
    return {
        "type": rec_type,
        "endDate": end_date,
        "daysOfWeek": days_of_week,
    }
