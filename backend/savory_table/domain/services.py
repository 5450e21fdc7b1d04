import re
from datetime import date, datetime, timedelta
from typing import Optional

from .errors import InvalidReservationError, InvalidReviewError

CAPACITY = 3
MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 8

FIRST_SLOT = "17:00"
LAST_SLOT = "22:00"
SLOT_INTERVAL = timedelta(minutes=30)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\(\d{3}\) \d{3}-\d{4}$")


def generate_time_slots() -> tuple[str, ...]:
    """Return the bookable times of day, ascending, first and last slot included."""
    current = datetime.strptime(FIRST_SLOT, "%H:%M")
    last = datetime.strptime(LAST_SLOT, "%H:%M")
    slots: list[str] = []
    while current <= last:
        slots.append(current.strftime("%H:%M"))
        current += SLOT_INTERVAL
    return tuple(slots)


TIME_SLOTS = generate_time_slots()


def has_capacity(confirmed_count: int) -> bool:
    return confirmed_count < CAPACITY


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.match(value))


def validate_reservation_fields(
    *,
    reservation_date: Optional[date],
    time: Optional[str],
    party_size: Optional[int],
    customer_name: Optional[str],
    customer_email: Optional[str],
    customer_phone: Optional[str],
) -> None:
    """
    Pure validation of a reservation request.
    Collects every problem and raises InvalidReservationError once, so callers
    can show all of them together.
    """
    problems: list[str] = []
    if reservation_date is None:
        problems.append("date is required")
    if not time:
        problems.append("time is required")
    elif time not in TIME_SLOTS:
        problems.append(f"time must be one of {', '.join(TIME_SLOTS)}")
    if party_size is None:
        problems.append("party size is required")
    elif not MIN_PARTY_SIZE <= party_size <= MAX_PARTY_SIZE:
        problems.append(f"party size must be between {MIN_PARTY_SIZE} and {MAX_PARTY_SIZE}")
    if not customer_name or not customer_name.strip():
        problems.append("name is required")
    if not customer_email or not customer_email.strip():
        problems.append("email is required")
    elif not is_valid_email(customer_email):
        problems.append("email is invalid")
    if not customer_phone or not customer_phone.strip():
        problems.append("phone is required")
    elif not is_valid_phone(customer_phone):
        problems.append("phone must look like (555) 123-4567")
    if problems:
        raise InvalidReservationError(problems)


def validate_review_fields(*, customer_name: str, rating: int, comment: str) -> None:
    problems: list[str] = []
    if not customer_name.strip():
        problems.append("name is required")
    if not 1 <= rating <= 5:
        problems.append("rating must be between 1 and 5")
    if not comment.strip():
        problems.append("comment is required")
    if problems:
        raise InvalidReviewError(problems)
