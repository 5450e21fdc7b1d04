import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..deps import get_current_staff_id, get_mailer_factory, get_secret_store, get_session
from ..domain.errors import InvalidReservationError, ReservationNotFoundError, SlotUnavailableError
from ..infrastructure.repositories import SqlAlchemyReservationRepository
from ..infrastructure.secrets import SecretStore
from ..schemas import ReservationCreate, ReservationRead, ReservationUpdate
from ..usecases import notifications as notification_usecase
from ..usecases import reservations as reservation_usecase
from ..usecases.notifications import MailerFactory
from ..utils.audit_log import emit_audit_log

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["reservations"])


def _invalid(exc: InvalidReservationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.problems)


def _unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="This time slot is no longer available. Please choose another time.",
    )


@router.post("", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreate,
    session: AsyncSession = Depends(get_session),
    secret_store: SecretStore = Depends(get_secret_store),
    mailer_factory: MailerFactory = Depends(get_mailer_factory),
    settings: Settings = Depends(get_settings),
) -> ReservationRead:
    res_repo = SqlAlchemyReservationRepository(session)
    try:
        async with session.begin():
            reservation = await reservation_usecase.create_reservation(
                res_repo,
                reservation_date=payload.reservation_date,
                time=payload.time,
                party_size=payload.party_size,
                customer_name=payload.customer_name,
                customer_email=payload.customer_email,
                customer_phone=payload.customer_phone,
                special_requests=payload.special_requests,
            )
    except InvalidReservationError as exc:
        raise _invalid(exc)
    except SlotUnavailableError:
        raise _unavailable()
    except SQLAlchemyError as exc:
        logger.exception("failed to persist reservation")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create reservation. Please try again.",
        ) from exc

    notification_usecase.schedule_confirmation(
        reservation,
        secret_store=secret_store,
        mailer_factory=mailer_factory,
        settings=settings,
    )
    try:
        emit_audit_log(
            action="reservation.created",
            initiator="guest",
            reservation_id=reservation.id,
            reservation_date=reservation.reservation_date,
            reservation_time=reservation.reservation_time,
            party_size=reservation.party_size,
            status_from=None,
            status_to=reservation.status,
        )
    except RuntimeError:
        # The booking is committed; a lost audit line must not fail it.
        logger.exception("failed to emit audit log for reservation %s", reservation.id)
    return ReservationRead.from_db(reservation=reservation)


@router.get("/{reservation_id}", response_model=ReservationRead)
async def get_reservation(
    reservation_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
) -> ReservationRead:
    res_repo = SqlAlchemyReservationRepository(session)
    reservation = await reservation_usecase.get_reservation(res_repo, reservation_id=reservation_id)
    if reservation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
    return ReservationRead.from_db(reservation=reservation)


@router.get("", response_model=List[ReservationRead], dependencies=[Depends(get_current_staff_id)])
async def list_reservations(
    reservation_date: Optional[date] = Query(default=None, alias="date"),
    session: AsyncSession = Depends(get_session),
) -> list[ReservationRead]:
    res_repo = SqlAlchemyReservationRepository(session)
    rows = await reservation_usecase.list_reservations(res_repo, reservation_date=reservation_date)
    return [ReservationRead.from_db(reservation=r) for r in rows]


@router.patch("/{reservation_id}", response_model=ReservationRead)
async def update_reservation(
    payload: ReservationUpdate,
    reservation_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    staff_id: int = Depends(get_current_staff_id),
) -> ReservationRead:
    res_repo = SqlAlchemyReservationRepository(session)
    async with session.begin():
        try:
            updated, status_from = await reservation_usecase.update_reservation(
                res_repo,
                reservation_id=reservation_id,
                reservation_date=payload.reservation_date,
                time=payload.time,
                party_size=payload.party_size,
                customer_name=payload.customer_name,
                customer_email=payload.customer_email,
                customer_phone=payload.customer_phone,
                special_requests=payload.special_requests,
                status=payload.status,
            )
        except ReservationNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
        except InvalidReservationError as exc:
            raise _invalid(exc)
        except SlotUnavailableError:
            raise _unavailable()

        try:
            emit_audit_log(
                action="reservation.updated",
                initiator="staff",
                reservation_id=updated.id,
                reservation_date=updated.reservation_date,
                reservation_time=updated.reservation_time,
                party_size=updated.party_size,
                status_from=status_from,
                status_to=updated.status,
                extra={"staff_id": staff_id},
            )
        except RuntimeError as exc:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to write audit log") from exc

    return ReservationRead.from_db(reservation=updated)


@router.post("/{reservation_id}/cancel", response_model=ReservationRead)
async def cancel_reservation(
    reservation_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    staff_id: int = Depends(get_current_staff_id),
) -> ReservationRead:
    res_repo = SqlAlchemyReservationRepository(session)
    async with session.begin():
        try:
            updated, status_from = await reservation_usecase.cancel_reservation(res_repo, reservation_id=reservation_id)
        except ReservationNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")

        if status_from != updated.status:
            try:
                emit_audit_log(
                    action="reservation.cancelled",
                    initiator="staff",
                    reservation_id=updated.id,
                    reservation_date=updated.reservation_date,
                    reservation_time=updated.reservation_time,
                    party_size=updated.party_size,
                    status_from=status_from,
                    status_to=updated.status,
                    extra={"staff_id": staff_id},
                )
            except RuntimeError as exc:
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to write audit log") from exc

    return ReservationRead.from_db(reservation=updated)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    staff_id: int = Depends(get_current_staff_id),
) -> Response:
    res_repo = SqlAlchemyReservationRepository(session)
    async with session.begin():
        try:
            deleted = await reservation_usecase.delete_reservation(res_repo, reservation_id=reservation_id)
        except ReservationNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")

        try:
            emit_audit_log(
                action="reservation.deleted",
                initiator="staff",
                reservation_id=deleted.id,
                reservation_date=deleted.reservation_date,
                reservation_time=deleted.reservation_time,
                party_size=deleted.party_size,
                status_from=deleted.status,
                status_to=None,
                extra={"staff_id": staff_id},
            )
        except RuntimeError as exc:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to write audit log") from exc

    return Response(status_code=status.HTTP_204_NO_CONTENT)
