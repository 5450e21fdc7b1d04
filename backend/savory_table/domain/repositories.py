from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ..models import Reservation, ReservationStatus, Review


class ReservationRepository(Protocol):
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
    ) -> Reservation: ...

    async def get(self, reservation_id: int) -> Reservation | None: ...

    async def update(self, reservation: Reservation) -> Reservation: ...

    async def delete(self, reservation: Reservation) -> None: ...

    async def count_by_slot(
        self,
        reservation_date: date,
        reservation_time: str,
        status: ReservationStatus,
    ) -> int: ...

    async def list_by_date(self, reservation_date: date | None = None) -> list[Reservation]: ...


class ReviewRepository(Protocol):
    async def create(
        self,
        *,
        customer_name: str,
        rating: int,
        comment: str,
        review_date: date,
        verified: bool,
    ) -> Review: ...

    async def list_all(self) -> list[Review]: ...
