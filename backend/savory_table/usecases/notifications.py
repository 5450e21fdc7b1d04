from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Optional

from ..config import Settings
from ..domain.errors import (
    ConfigurationError,
    FormatError,
    MethodError,
    NotificationError,
    ProviderError,
    ValidationError,
)
from ..domain.results import NotificationFailed, NotificationResult, NotificationSent
from ..domain.services import is_valid_email
from ..infrastructure.mailer import Attachment, Mailer
from ..infrastructure.secrets import SecretStore
from ..models import Reservation
from ..notifications.email import (
    ConfirmationContent,
    confirmation_subject,
    encode_attachment,
    render_confirmation_html,
)
from ..notifications.ics import CalendarEvent, build_reservation_ics
from ..utils.time import format_long_date, local_slot_to_utc, parse_slot_time, resolve_timezone

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("customerName", "customerEmail", "date", "time", "partySize")
ATTACHMENT_NAME = "reservation.ics"

MailerFactory = Callable[[str], Mailer]

_pending_tasks: set[asyncio.Task[NotificationResult]] = set()


@dataclass(frozen=True)
class ConfirmationRequest:
    customer_name: str
    customer_email: str
    reservation_date: date
    time: str
    party_size: int
    customer_phone: Optional[str]
    special_requests: Optional[str]


def parse_confirmation_request(method: str, body: Any) -> ConfirmationRequest:
    """Validate an incoming confirmation call before anything external is touched."""
    if method.upper() != "POST":
        raise MethodError("Method not allowed. Use POST.")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    missing = [field for field in REQUIRED_FIELDS if not body.get(field)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    email = body["customerEmail"]
    if not isinstance(email, str) or not is_valid_email(email):
        raise FormatError("Invalid email address format")

    try:
        reservation_date = date.fromisoformat(str(body["date"]))
    except ValueError as exc:
        raise ValidationError("Invalid date, expected YYYY-MM-DD") from exc

    time = str(body["time"])
    try:
        parse_slot_time(time)
    except ValueError as exc:
        raise ValidationError("Invalid time, expected HH:MM") from exc

    raw_party_size = body["partySize"]
    if isinstance(raw_party_size, bool) or (isinstance(raw_party_size, float) and not raw_party_size.is_integer()):
        raise ValidationError("Invalid party size")
    try:
        party_size = int(raw_party_size)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid party size") from exc
    if party_size < 1:
        raise ValidationError("Invalid party size")

    phone = body.get("customerPhone")
    requests = body.get("specialRequests")
    return ConfirmationRequest(
        customer_name=str(body["customerName"]),
        customer_email=email,
        reservation_date=reservation_date,
        time=time,
        party_size=party_size,
        customer_phone=str(phone) if phone else None,
        special_requests=str(requests) if requests else None,
    )


async def _deliver_confirmation(
    request: ConfirmationRequest,
    *,
    secret_store: SecretStore,
    mailer_factory: MailerFactory,
    settings: Settings,
    now: datetime | None,
) -> NotificationSent:
    api_key = await secret_store.get_secret(settings.mail_api_key_secret)
    if not api_key:
        raise ConfigurationError("Email service not configured. Please contact support.")

    formatted_date = format_long_date(request.reservation_date)
    tz = resolve_timezone(settings.restaurant_timezone)
    event = CalendarEvent(
        starts_at=local_slot_to_utc(request.reservation_date, request.time, tz),
        party_size=request.party_size,
        customer_name=request.customer_name,
    )
    ics = build_reservation_ics(
        event,
        restaurant_name=settings.restaurant_name,
        restaurant_address=settings.restaurant_address,
        domain=settings.restaurant_domain,
        now=now,
    )
    html = render_confirmation_html(
        ConfirmationContent(
            customer_name=request.customer_name,
            formatted_date=formatted_date,
            time=request.time,
            party_size=request.party_size,
            ics=ics,
            customer_phone=request.customer_phone,
            special_requests=request.special_requests,
        ),
        restaurant_name=settings.restaurant_name,
        restaurant_address=settings.restaurant_address,
        restaurant_phone=settings.restaurant_phone,
        restaurant_email=settings.restaurant_email,
    )

    mailer = mailer_factory(api_key)
    try:
        email_id = await mailer.send(
            sender=settings.mail_from,
            to=request.customer_email,
            subject=confirmation_subject(formatted_date, request.time),
            html=html,
            attachments=[Attachment(filename=ATTACHMENT_NAME, content=encode_attachment(ics))],
        )
    except ProviderError as exc:
        logger.error("mail provider failed for %s: %s", request.customer_email, exc)
        raise ProviderError("Failed to send confirmation email. Please contact the restaurant directly.") from exc
    return NotificationSent(email_id=email_id)


async def send_reservation_confirmation(
    method: str,
    body: Any,
    *,
    secret_store: SecretStore,
    mailer_factory: MailerFactory,
    settings: Settings,
    now: datetime | None = None,
) -> NotificationResult:
    """
    Validate a confirmation request, render the email and its calendar
    attachment, and send it. Never raises: every outcome comes back as a
    NotificationSent or NotificationFailed carrying an HTTP status code.
    """
    try:
        request = parse_confirmation_request(method, body)
        return await _deliver_confirmation(
            request,
            secret_store=secret_store,
            mailer_factory=mailer_factory,
            settings=settings,
            now=now,
        )
    except NotificationError as exc:
        logger.warning("confirmation email not sent (%s): %s", exc.status_code, exc)
        return NotificationFailed(status_code=exc.status_code, error=str(exc))
    except Exception as exc:
        logger.exception("unexpected error while sending confirmation email")
        return NotificationFailed(
            status_code=500,
            error=str(exc) or "An unexpected error occurred while sending the confirmation email",
        )


def confirmation_body(reservation: Reservation) -> dict[str, Any]:
    return {
        "customerName": reservation.customer_name,
        "customerEmail": reservation.customer_email,
        "customerPhone": reservation.customer_phone,
        "date": reservation.reservation_date.isoformat(),
        "time": reservation.reservation_time,
        "partySize": reservation.party_size,
        "specialRequests": reservation.special_requests,
    }


async def _confirm_in_background(
    reservation_id: int,
    body: dict[str, Any],
    *,
    secret_store: SecretStore,
    mailer_factory: MailerFactory,
    settings: Settings,
) -> NotificationResult:
    result = await send_reservation_confirmation(
        "POST",
        body,
        secret_store=secret_store,
        mailer_factory=mailer_factory,
        settings=settings,
    )
    if isinstance(result, NotificationFailed):
        logger.warning(
            "confirmation for reservation %s failed with %s: %s",
            reservation_id,
            result.status_code,
            result.error,
        )
    else:
        logger.info("confirmation for reservation %s sent as %s", reservation_id, result.email_id)
    return result


def schedule_confirmation(
    reservation: Reservation,
    *,
    secret_store: SecretStore,
    mailer_factory: MailerFactory,
    settings: Settings,
) -> asyncio.Task[NotificationResult]:
    """Fire-and-forget the confirmation email for a committed reservation."""
    body = confirmation_body(reservation)
    task = asyncio.create_task(
        _confirm_in_background(
            reservation.id,
            body,
            secret_store=secret_store,
            mailer_factory=mailer_factory,
            settings=settings,
        )
    )
    _pending_tasks.add(task)
    task.add_done_callback(_pending_tasks.discard)
    return task
