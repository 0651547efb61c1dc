"""Per-user calendar settings: validated defaults plus JSON load/save on the user row."""
import copy
import json
import logging

from services.validation_service import parse_time_str, format_time_str


logger = logging.getLogger(__name__)

VIEWS = ("daily", "weekly")
THEMES = ("light", "dark", "system")

DEFAULT_SETTINGS = {
    "defaultView": "weekly",
    "workingHours": {"start": "09:00", "end": "17:00"},
    "weekStartsOn": 1,
    "notifications": {
        "enabled": True,
        "defaultReminder": 15,
        "soundEnabled": True,
        "browserNotifications": True,
    },
    "theme": "system",
}

MAX_REMINDER_MINUTES = 24 * 60


def default_settings():
    return copy.deepcopy(DEFAULT_SETTINGS)


def _clean_hour(raw, fallback):
    parsed = parse_time_str(raw)
    return format_time_str(parsed) if parsed else fallback


def _clean_flag(raw, fallback):
    return raw if isinstance(raw, bool) else fallback


def sanitize_settings(raw):
    """Return a complete settings dict, keeping only valid values from `raw`."""
    settings = default_settings()
    if not isinstance(raw, dict):
        return settings

    if raw.get("defaultView") in VIEWS:
        settings["defaultView"] = raw["defaultView"]
    if raw.get("theme") in THEMES:
        settings["theme"] = raw["theme"]
    week_start = raw.get("weekStartsOn")
    if week_start in (0, 1) and not isinstance(week_start, bool):
        settings["weekStartsOn"] = week_start

    hours = raw.get("workingHours")
    if isinstance(hours, dict):
        defaults = settings["workingHours"]
        settings["workingHours"] = {
            "start": _clean_hour(hours.get("start"), defaults["start"]),
            "end": _clean_hour(hours.get("end"), defaults["end"]),
        }

    notifications = raw.get("notifications")
    if isinstance(notifications, dict):
        current = settings["notifications"]
        reminder = notifications.get("defaultReminder")
        if isinstance(reminder, bool) or not isinstance(reminder, int) or not (0 <= reminder <= MAX_REMINDER_MINUTES):
            reminder = current["defaultReminder"]
        settings["notifications"] = {
            "enabled": _clean_flag(notifications.get("enabled"), current["enabled"]),
            "defaultReminder": reminder,
            "soundEnabled": _clean_flag(notifications.get("soundEnabled"), current["soundEnabled"]),
            "browserNotifications": _clean_flag(
                notifications.get("browserNotifications"), current["browserNotifications"]
            ),
        }
    return settings


def merge_settings(current, partial):
    """Overlay a partial update; nested dicts merge one level deep."""
    merged = copy.deepcopy(current)
    if not isinstance(partial, dict):
        return merged
    for key, value in partial.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def load_settings(user):
    """Load settings from the user profile, falling back to defaults."""
    if not user or not user.settings:
        return default_settings()
    try:
        data = json.loads(user.settings)
    except (TypeError, ValueError) as exc:
        logger.warning("Failed to load settings for user %s: %s", user.id, exc)
        return default_settings()
    return sanitize_settings(data)


def save_settings(user, partial):
    """Merge `partial` into the stored settings; the caller commits."""
    updated = sanitize_settings(merge_settings(load_settings(user), partial))
    user.settings = json.dumps(updated)
    return updated


def reset_settings(user):
    user.settings = json.dumps(DEFAULT_SETTINGS)
    return default_settings()
