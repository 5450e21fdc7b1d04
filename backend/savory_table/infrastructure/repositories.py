from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.repositories import ReservationRepository, ReviewRepository
from ..models import Reservation, ReservationStatus, Review


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SqlAlchemyReservationRepository(ReservationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

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
        self.session.add(reservation)
        await self.session.flush()
        return reservation

    async def get(self, reservation_id: int) -> Reservation | None:
        result = await self.session.scalar(select(Reservation).where(Reservation.id == reservation_id))
        return result if isinstance(result, Reservation) else None

    async def update(self, reservation: Reservation) -> Reservation:
        reservation.updated_at = _utc_now_naive()
        self.session.add(reservation)
        await self.session.flush()
        return reservation

    async def delete(self, reservation: Reservation) -> None:
        await self.session.delete(reservation)
        await self.session.flush()

    async def count_by_slot(
        self,
        reservation_date: date,
        reservation_time: str,
        status: ReservationStatus,
    ) -> int:
        stmt = select(func.count(Reservation.id)).where(
            Reservation.reservation_date == reservation_date,
            Reservation.reservation_time == reservation_time,
            Reservation.status == status,
        )
        return int(await self.session.scalar(stmt) or 0)

    async def list_by_date(self, reservation_date: date | None = None) -> list[Reservation]:
        stmt = select(Reservation).order_by(Reservation.reservation_date, Reservation.reservation_time, Reservation.id)
        if reservation_date is not None:
            stmt = stmt.where(Reservation.reservation_date == reservation_date)
        rows = await self.session.scalars(stmt)
        return list(rows.all())


class SqlAlchemyReviewRepository(ReviewRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

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
            customer_name=customer_name,
            rating=rating,
            comment=comment,
            review_date=review_date,
            verified=verified,
            created_at=_utc_now_naive(),
        )
        self.session.add(review)
        await self.session.flush()
        return review

    async def list_all(self) -> list[Review]:
        rows = await self.session.scalars(select(Review).order_by(Review.id))
        return list(rows.all())
