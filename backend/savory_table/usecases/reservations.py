from datetime import date
from typing import Optional

from ..domain.errors import ReservationNotFoundError, SlotUnavailableError
from ..domain.repositories import ReservationRepository
from ..domain.services import validate_reservation_fields
from ..models import Reservation, ReservationStatus
from .slots import is_available


async def create_reservation(
    res_repo: ReservationRepository,
    *,
    reservation_date: date,
    time: str,
    party_size: int,
    customer_name: str,
    customer_email: str,
    customer_phone: str,
    special_requests: Optional[str] = None,
) -> Reservation:
    validate_reservation_fields(
        reservation_date=reservation_date,
        time=time,
        party_size=party_size,
        customer_name=customer_name,
        customer_email=customer_email,
        customer_phone=customer_phone,
    )

    # Slots shown to the guest may have filled up since; check again at submission.
    if not await is_available(res_repo, reservation_date, time):
        raise SlotUnavailableError("time slot is no longer available")

    return await res_repo.create(
        reservation_date=reservation_date,
        reservation_time=time,
        party_size=party_size,
        customer_name=customer_name.strip(),
        customer_email=customer_email.strip(),
        customer_phone=customer_phone,
        special_requests=special_requests or None,
        status=ReservationStatus.CONFIRMED,
    )


async def get_reservation(res_repo: ReservationRepository, *, reservation_id: int) -> Reservation | None:
    return await res_repo.get(reservation_id)


async def list_reservations(
    res_repo: ReservationRepository,
    *,
    reservation_date: date | None = None,
) -> list[Reservation]:
    return await res_repo.list_by_date(reservation_date)


async def update_reservation(
    res_repo: ReservationRepository,
    *,
    reservation_id: int,
    reservation_date: date | None = None,
    time: str | None = None,
    party_size: int | None = None,
    customer_name: str | None = None,
    customer_email: str | None = None,
    customer_phone: str | None = None,
    special_requests: str | None = None,
    status: ReservationStatus | None = None,
) -> tuple[Reservation, ReservationStatus]:
    """Apply the given changes. Returns the updated reservation and its previous status."""
    reservation = await res_repo.get(reservation_id)
    if reservation is None:
        raise ReservationNotFoundError("reservation not found")
    status_from = reservation.status

    target_date = reservation_date if reservation_date is not None else reservation.reservation_date
    target_time = time if time is not None else reservation.reservation_time
    target_status = status if status is not None else reservation.status
    validate_reservation_fields(
        reservation_date=target_date,
        time=target_time,
        party_size=party_size if party_size is not None else reservation.party_size,
        customer_name=customer_name if customer_name is not None else reservation.customer_name,
        customer_email=customer_email if customer_email is not None else reservation.customer_email,
        customer_phone=customer_phone if customer_phone is not None else reservation.customer_phone,
    )

    moving = (target_date, target_time) != (reservation.reservation_date, reservation.reservation_time)
    reconfirming = status_from != ReservationStatus.CONFIRMED
    if target_status == ReservationStatus.CONFIRMED and (moving or reconfirming):
        if not await is_available(res_repo, target_date, target_time):
            raise SlotUnavailableError("time slot is no longer available")

    reservation.reservation_date = target_date
    reservation.reservation_time = target_time
    reservation.status = target_status
    if party_size is not None:
        reservation.party_size = party_size
    if customer_name is not None:
        reservation.customer_name = customer_name.strip()
    if customer_email is not None:
        reservation.customer_email = customer_email.strip()
    if customer_phone is not None:
        reservation.customer_phone = customer_phone
    if special_requests is not None:
        reservation.special_requests = special_requests or None
    return await res_repo.update(reservation), status_from


async def cancel_reservation(
    res_repo: ReservationRepository,
    *,
    reservation_id: int,
) -> tuple[Reservation, ReservationStatus]:
    reservation = await res_repo.get(reservation_id)
    if reservation is None:
        raise ReservationNotFoundError("reservation not found")
    status_from = reservation.status
    # Idempotent: already cancelled returns as-is
    if reservation.status == ReservationStatus.CANCELLED:
        return reservation, status_from
    reservation.status = ReservationStatus.CANCELLED
    return await res_repo.update(reservation), status_from


async def delete_reservation(res_repo: ReservationRepository, *, reservation_id: int) -> Reservation:
    reservation = await res_repo.get(reservation_id)
    if reservation is None:
        raise ReservationNotFoundError("reservation not found")
    await res_repo.delete(reservation)
    return reservation
