"""Timezone-aware membership test for weekly schedules.

A schedule maps lowercase English weekday names to day entries::

    {"monday": {"enabled": true, "open": "09:00", "close": "17:00"}, ...}

Windows are half-open (``open <= local time < close``) and evaluated at
second precision in the company's local time, so DST shifts move the
window with the wall clock.
"""

from datetime import datetime, time
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from replyflow.logging_config import get_logger
from replyflow.models.channel_agent_settings import SCHEDULE_BUSINESS_HOURS, SCHEDULE_CUSTOM
from replyflow.services.clock import ensure_utc

logger = get_logger("schedule")

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
UTC = ZoneInfo("UTC")


def resolve_timezone(name: Optional[str]) -> ZoneInfo:
    if not name:
        return UTC
    if not isinstance(name, str):
        logger.warning(f"Invalid timezone {name!r}, falling back to UTC")
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # Directory names such as "America" surface as IsADirectoryError.
        logger.warning(f"Unknown timezone {name!r}, falling back to UTC")
        return UTC


def parse_clock(value) -> Optional[time]:
    """'09:00' / '09:00:30' -> time; anything else -> None."""
    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        return None
    try:
        numbers = [int(part) for part in parts]
        return time(*numbers)
    except ValueError:
        return None


def schedule_for_mode(schedule_mode: Optional[str], business_hours: Optional[dict], custom_schedule: Optional[dict]):
    if schedule_mode == SCHEDULE_BUSINESS_HOURS:
        return business_hours
    if schedule_mode == SCHEDULE_CUSTOM:
        return custom_schedule
    return None


def in_schedule(schedule: Optional[dict], timezone_name: Optional[str], now: datetime) -> bool:
    if schedule is None:
        # No schedule configured behaves like always_on.
        logger.warning("Schedule mode set without a schedule, treating as always on")
        return True
    if not isinstance(schedule, dict):
        return False

    local = ensure_utc(now).astimezone(resolve_timezone(timezone_name))
    day = schedule.get(WEEKDAYS[local.weekday()])
    if not isinstance(day, dict) or not day.get("enabled"):
        return False

    opens = parse_clock(day.get("open"))
    closes = parse_clock(day.get("close"))
    if opens is None or closes is None:
        return False

    current = local.time().replace(microsecond=0, tzinfo=None)
    return opens <= current < closes
