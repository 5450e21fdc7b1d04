from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_session
from ..domain.services import TIME_SLOTS
from ..infrastructure.repositories import SqlAlchemyReservationRepository
from ..schemas import AvailableSlots, SlotCheck
from ..usecases import slots as slot_usecase

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/slots", response_model=AvailableSlots)
async def list_available_slots(
    reservation_date: date = Query(..., alias="date", description="Reservation date (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_session),
) -> AvailableSlots:
    res_repo = SqlAlchemyReservationRepository(session)
    slots = await slot_usecase.list_available_slots(res_repo, reservation_date)
    return AvailableSlots(reservation_date=reservation_date, slots=slots)


@router.get("/check", response_model=SlotCheck)
async def check_slot(
    reservation_date: date = Query(..., alias="date"),
    time: str = Query(..., description="Slot time (HH:MM)"),
    session: AsyncSession = Depends(get_session),
) -> SlotCheck:
    if time not in TIME_SLOTS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="time is not a bookable slot")
    res_repo = SqlAlchemyReservationRepository(session)
    available = await slot_usecase.is_available(res_repo, reservation_date, time)
    return SlotCheck(reservation_date=reservation_date, time=time, available=available)
