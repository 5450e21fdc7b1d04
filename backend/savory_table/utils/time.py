from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo


def resolve_timezone(name: str) -> Optional[tzinfo]:
    """Return the named zone, or None for the server's local zone."""
    return ZoneInfo(name) if name else None


def parse_slot_time(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def local_slot_to_utc(day: date, slot: str, tz: Optional[tzinfo]) -> datetime:
    """Interpret date + HH:MM in `tz` (server local zone when None) and return the aware UTC instant."""
    naive = datetime.combine(day, parse_slot_time(slot))
    if tz is None:
        # naive datetimes are taken as local time by astimezone
        return naive.astimezone(timezone.utc)
    return naive.replace(tzinfo=tz).astimezone(timezone.utc)


def format_long_date(day: date) -> str:
    """Sunday, June 1, 2025"""
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"
