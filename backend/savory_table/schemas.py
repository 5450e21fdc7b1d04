from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import Reservation, ReservationStatus, Review


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AvailableSlots(CamelModel):
    reservation_date: date = Field(alias="date")
    slots: List[str]


class SlotCheck(CamelModel):
    reservation_date: date = Field(alias="date")
    time: str
    available: bool


class ReservationCreate(CamelModel):
    reservation_date: date = Field(alias="date")
    time: str
    party_size: int = Field(ge=1, le=8)
    customer_name: str
    customer_email: str
    customer_phone: str
    special_requests: Optional[str] = None


class ReservationUpdate(CamelModel):
    reservation_date: Optional[date] = Field(default=None, alias="date")
    time: Optional[str] = None
    party_size: Optional[int] = Field(default=None, ge=1, le=8)
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    special_requests: Optional[str] = None
    status: Optional[ReservationStatus] = None


class ReservationRead(CamelModel):
    reservation_id: int = Field(alias="id")
    reservation_date: date = Field(alias="date")
    time: str
    party_size: int
    customer_name: str
    customer_email: str
    customer_phone: str
    special_requests: Optional[str]
    status: ReservationStatus
    created_at: datetime

    @classmethod
    def from_db(cls, *, reservation: Reservation) -> "ReservationRead":
        return cls(
            reservation_id=reservation.id,
            reservation_date=reservation.reservation_date,
            time=reservation.reservation_time,
            party_size=reservation.party_size,
            customer_name=reservation.customer_name,
            customer_email=reservation.customer_email,
            customer_phone=reservation.customer_phone,
            special_requests=reservation.special_requests,
            status=reservation.status,
            created_at=reservation.created_at,
        )


class ReviewCreate(CamelModel):
    customer_name: str
    rating: int = Field(ge=1, le=5)
    comment: str


class ReviewRead(CamelModel):
    review_id: int = Field(alias="id")
    customer_name: str
    rating: int
    comment: str
    review_date: date = Field(alias="date")
    verified: bool

    @classmethod
    def from_db(cls, *, review: Review) -> "ReviewRead":
        return cls(
            review_id=review.id,
            customer_name=review.customer_name,
            rating=review.rating,
            comment=review.comment,
            review_date=review.review_date,
            verified=review.verified,
        )


class ReviewSummaryRead(CamelModel):
    average: float
    count: int
    distribution: Dict[int, int]
