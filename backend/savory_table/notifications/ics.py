from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from icalendar import Alarm, Calendar, Event

EVENT_DURATION = timedelta(hours=2)
REMINDER_BEFORE = timedelta(hours=24)


@dataclass(frozen=True)
class CalendarEvent:
    starts_at: datetime  # aware, UTC
    party_size: int
    customer_name: str

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + EVENT_DURATION


def guest_label(party_size: int) -> str:
    return "guest" if party_size == 1 else "guests"


def _hours_before(delta: timedelta) -> str:
    return f"-PT{int(delta.total_seconds() // 3600)}H"


def _stamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def build_reservation_ics(
    event: CalendarEvent,
    *,
    restaurant_name: str,
    restaurant_address: str,
    domain: str,
    now: datetime | None = None,
) -> str:
    """Render a single-event VCALENDAR for a confirmed reservation."""
    now = now or datetime.now(timezone.utc)

    cal = Calendar()
    cal.add("prodid", f"-//{restaurant_name}//Reservation System//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")

    vevent = Event()
    vevent.add("uid", f"{_stamp(now)}-{uuid.uuid4().hex[:9]}@{domain}")
    vevent.add("dtstamp", now.astimezone(timezone.utc))
    vevent.add("dtstart", event.starts_at.astimezone(timezone.utc))
    vevent.add("dtend", event.ends_at.astimezone(timezone.utc))
    vevent.add("summary", f"Dinner at {restaurant_name}")
    vevent.add(
        "description",
        f"Reservation for {event.party_size} {guest_label(event.party_size)} at {restaurant_name}\n\n"
        f"Reservation Name: {event.customer_name}\n\n"
        "Please arrive 10 minutes early.",
    )
    vevent.add("location", f"{restaurant_name}, {restaurant_address}")
    vevent.add("status", "CONFIRMED")
    vevent.add("sequence", 0)

    alarm = Alarm()
    alarm.add("action", "DISPLAY")
    # Exact hours, not a nominal day (-P1D).
    alarm.add("trigger", _hours_before(REMINDER_BEFORE), encode=False)
    alarm.add("description", f"Reminder: Dinner reservation at {restaurant_name} tomorrow")
    vevent.add_component(alarm)

    cal.add_component(vevent)
    return cal.to_ical().decode("utf-8")
