from datetime import date, datetime, timezone
from typing import Optional, Sequence

import pytest
from savory_table.config import Settings
from savory_table.domain.errors import ProviderError
from savory_table.infrastructure.mailer import Attachment
from savory_table.models import Reservation, ReservationStatus, Review


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class FakeReservationRepo:
    """In-memory ReservationRepository."""

    def __init__(self) -> None:
        self.rows: dict[int, Reservation] = {}
        self.next_id = 1
        self.count_calls = 0
        self.count_error: Optional[Exception] = None

    async def create(
        self,
        *,
        reservation_date: date,
        reservation_time: str,
        party_size: int,
        customer_name: str,
        customer_email: str,
        customer_phone: str,
        special_requests: Optional[str],
        status: ReservationStatus,
    ) -> Reservation:
        now = _utc_now_naive()
        reservation = Reservation(
            id=self.next_id,
            reservation_date=reservation_date,
            reservation_time=reservation_time,
            party_size=party_size,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            special_requests=special_requests,
            status=status,
            created_at=now,
            updated_at=now,
        )
        self.rows[reservation.id] = reservation
        self.next_id += 1
        return reservation

    async def get(self, reservation_id: int) -> Reservation | None:
        return self.rows.get(reservation_id)

    async def update(self, reservation: Reservation) -> Reservation:
        reservation.updated_at = _utc_now_naive()
        self.rows[reservation.id] = reservation
        return reservation

    async def delete(self, reservation: Reservation) -> None:
        self.rows.pop(reservation.id, None)

    async def count_by_slot(self, reservation_date: date, reservation_time: str, status: ReservationStatus) -> int:
        self.count_calls += 1
        if self.count_error is not None:
            raise self.count_error
        return sum(
            1
            for r in self.rows.values()
            if r.reservation_date == reservation_date and r.reservation_time == reservation_time and r.status == status
        )

    async def list_by_date(self, reservation_date: date | None = None) -> list[Reservation]:
        rows = [r for r in self.rows.values() if reservation_date is None or r.reservation_date == reservation_date]
        return sorted(rows, key=lambda r: (r.reservation_date, r.reservation_time, r.id))

    async def seed(
        self,
        reservation_date: date,
        reservation_time: str,
        count: int,
        status: ReservationStatus = ReservationStatus.CONFIRMED,
    ) -> None:
        for i in range(count):
            await self.create(
                reservation_date=reservation_date,
                reservation_time=reservation_time,
                party_size=2,
                customer_name=f"Guest {i}",
                customer_email=f"guest{i}@example.com",
                customer_phone="(555) 000-0000",
                special_requests=None,
                status=status,
            )


class FakeReviewRepo:
    def __init__(self) -> None:
        self.rows: list[Review] = []

    async def create(
        self,
        *,
        customer_name: str,
        rating: int,
        comment: str,
        review_date: date,
        verified: bool,
    ) -> Review:
        review = Review(
            id=len(self.rows) + 1,
            customer_name=customer_name,
            rating=rating,
            comment=comment,
            review_date=review_date,
            verified=verified,
            created_at=_utc_now_naive(),
        )
        self.rows.append(review)
        return review

    async def list_all(self) -> list[Review]:
        return list(self.rows)


class FakeSecretStore:
    def __init__(self, value: Optional[str]) -> None:
        self.value = value
        self.requested: list[str] = []

    async def get_secret(self, name: str) -> Optional[str]:
        self.requested.append(name)
        return self.value


class FakeMailer:
    def __init__(self, *, error: Optional[Exception] = None, message_id: str = "email-123") -> None:
        self.error = error
        self.message_id = message_id
        self.sent: list[dict[str, object]] = []
        self.api_keys: list[str] = []

    def factory(self, api_key: str) -> "FakeMailer":
        self.api_keys.append(api_key)
        return self

    async def send(
        self,
        *,
        sender: str,
        to: str,
        subject: str,
        html: str,
        attachments: Sequence[Attachment],
    ) -> str:
        if self.error is not None:
            raise self.error
        self.sent.append({"sender": sender, "to": to, "subject": subject, "html": html, "attachments": list(attachments)})
        return self.message_id


@pytest.fixture
def res_repo() -> FakeReservationRepo:
    return FakeReservationRepo()


@pytest.fixture
def review_repo() -> FakeReviewRepo:
    return FakeReviewRepo()


@pytest.fixture
def settings() -> Settings:
    return Settings(restaurant_timezone="America/New_York", auth_secret="testsecret")


@pytest.fixture
def secret_store() -> FakeSecretStore:
    return FakeSecretStore("re_test_key")


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def failing_mailer() -> FakeMailer:
    return FakeMailer(error=ProviderError("503 upstream"))


@pytest.fixture
def empty_secret_store() -> FakeSecretStore:
    return FakeSecretStore("")


@pytest.fixture
def exploding_mailer() -> FakeMailer:
    return FakeMailer(error=KeyError("boom"))
