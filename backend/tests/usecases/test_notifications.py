import base64
from datetime import date, datetime, timedelta, timezone

import pytest
from icalendar import Calendar
from savory_table.domain.results import NotificationFailed, NotificationSent
from savory_table.models import Reservation, ReservationStatus
from savory_table.usecases import notifications as uc

JANE = {
    "customerName": "Jane Doe",
    "customerEmail": "jane@x.com",
    "date": "2025-06-01",
    "time": "19:00",
    "partySize": 2,
}


async def _send(body, *, secret_store, mailer, settings, method: str = "POST"):
    return await uc.send_reservation_confirmation(
        method,
        body,
        secret_store=secret_store,
        mailer_factory=mailer.factory,
        settings=settings,
    )


def _attached_ics(mailer) -> str:
    attachment = mailer.sent[0]["attachments"][0]
    assert attachment.filename == "reservation.ics"
    return base64.b64decode(attachment.content).decode("utf-8")


@pytest.mark.asyncio
async def test_scenario_sends_email_with_utc_calendar_times(secret_store, mailer, settings) -> None:
    result = await _send(JANE, secret_store=secret_store, mailer=mailer, settings=settings)

    assert isinstance(result, NotificationSent)
    assert result.success is True
    assert result.status_code == 200
    assert result.to_body() == {
        "success": True,
        "message": "Confirmation email sent successfully",
        "emailId": "email-123",
    }
    assert mailer.api_keys == ["re_test_key"]

    ics = _attached_ics(mailer)
    # 19:00 EDT
    assert "DTSTART:20250601T230000Z" in ics
    assert "DTEND:20250602T010000Z" in ics
    event = Calendar.from_ical(ics).walk("VEVENT")[0]
    assert event.decoded("dtend") - event.decoded("dtstart") == timedelta(hours=2)


@pytest.mark.asyncio
async def test_message_fields(secret_store, mailer, settings) -> None:
    body = dict(JANE, customerPhone="(555) 123-4567", specialRequests="Birthday cake")
    await _send(body, secret_store=secret_store, mailer=mailer, settings=settings)

    sent = mailer.sent[0]
    assert sent["to"] == "jane@x.com"
    assert sent["sender"] == settings.mail_from
    assert sent["subject"] == "Reservation Confirmation - Sunday, June 1, 2025 at 19:00"
    html = sent["html"]
    assert "Dear Jane Doe," in html
    assert "2 guests" in html
    assert "(555) 123-4567" in html
    assert "Birthday cake" in html
    assert "data:text/calendar;charset=utf-8," in html


@pytest.mark.asyncio
async def test_empty_body_lists_all_missing_fields(secret_store, mailer, settings) -> None:
    result = await _send({}, secret_store=secret_store, mailer=mailer, settings=settings)

    assert isinstance(result, NotificationFailed)
    assert result.status_code == 400
    assert result.error == "Missing required fields: customerName, customerEmail, date, time, partySize"
    assert secret_store.requested == []
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_malformed_email_is_422(secret_store, mailer, settings) -> None:
    result = await _send(dict(JANE, customerEmail="not-an-email"), secret_store=secret_store, mailer=mailer, settings=settings)
    assert isinstance(result, NotificationFailed)
    assert result.status_code == 422
    assert result.error == "Invalid email address format"
    assert secret_store.requested == []


@pytest.mark.asyncio
async def test_simple_email_passes(secret_store, mailer, settings) -> None:
    result = await _send(dict(JANE, customerEmail="a@b.com"), secret_store=secret_store, mailer=mailer, settings=settings)
    assert result.success is True


@pytest.mark.asyncio
async def test_wrong_method_is_405(secret_store, mailer, settings) -> None:
    result = await _send(JANE, secret_store=secret_store, mailer=mailer, settings=settings, method="GET")
    assert result.status_code == 405
    assert result.success is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"date": "June 1st"},
        {"time": "7pm"},
        {"partySize": "two"},
        {"partySize": -1},
        {"partySize": 2.5},
        {"partySize": "2.5"},
    ],
)
async def test_unparseable_values_are_400(secret_store, mailer, settings, overrides) -> None:
    result = await _send(dict(JANE, **overrides), secret_store=secret_store, mailer=mailer, settings=settings)
    assert result.status_code == 400
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_missing_credential_is_configuration_error(empty_secret_store, mailer, settings) -> None:
    store = empty_secret_store
    result = await _send(JANE, secret_store=store, mailer=mailer, settings=settings)

    assert isinstance(result, NotificationFailed)
    assert result.status_code == 500
    assert "not configured" in result.error
    assert store.requested == ["RESEND_API_KEY"]
    assert mailer.api_keys == []


@pytest.mark.asyncio
async def test_provider_failure_tells_guest_to_call(secret_store, failing_mailer, settings) -> None:
    result = await _send(JANE, secret_store=secret_store, mailer=failing_mailer, settings=settings)
    assert isinstance(result, NotificationFailed)
    assert result.status_code == 500
    assert result.error == "Failed to send confirmation email. Please contact the restaurant directly."


@pytest.mark.asyncio
async def test_unexpected_exception_mapped_to_500_with_message(secret_store, exploding_mailer, settings) -> None:
    mailer = exploding_mailer
    result = await _send(JANE, secret_store=secret_store, mailer=mailer, settings=settings)
    assert isinstance(result, NotificationFailed)
    assert result.status_code == 500
    assert "boom" in result.error


@pytest.mark.asyncio
async def test_single_guest_is_singular(secret_store, mailer, settings) -> None:
    await _send(dict(JANE, partySize=1), secret_store=secret_store, mailer=mailer, settings=settings)
    assert "1 guest<" in mailer.sent[0]["html"]


def _reservation() -> Reservation:
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return Reservation(
        id=7,
        reservation_date=date(2025, 6, 1),
        reservation_time="19:00",
        party_size=3,
        customer_name="Jane Doe",
        customer_email="jane@x.com",
        customer_phone="(555) 123-4567",
        special_requests=None,
        status=ReservationStatus.CONFIRMED,
        created_at=now,
        updated_at=now,
    )


def test_confirmation_body_uses_wire_names() -> None:
    body = uc.confirmation_body(_reservation())
    assert body["date"] == "2025-06-01"
    assert body["time"] == "19:00"
    assert body["partySize"] == 3
    assert body["specialRequests"] is None


@pytest.mark.asyncio
async def test_scheduled_confirmation_runs_in_background(secret_store, mailer, settings) -> None:
    task = uc.schedule_confirmation(
        _reservation(),
        secret_store=secret_store,
        mailer_factory=mailer.factory,
        settings=settings,
    )
    result = await task
    assert result.success is True
    assert len(mailer.sent) == 1


@pytest.mark.asyncio
async def test_scheduled_confirmation_failure_is_only_logged(
    secret_store, failing_mailer, settings, caplog: pytest.LogCaptureFixture
) -> None:
    task = uc.schedule_confirmation(
        _reservation(),
        secret_store=secret_store,
        mailer_factory=failing_mailer.factory,
        settings=settings,
    )
    result = await task
    assert result.success is False
    assert "confirmation for reservation 7 failed" in caplog.text
