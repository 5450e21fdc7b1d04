import logging
from datetime import date
from typing import AsyncIterator, List

from ..domain.repositories import ReservationRepository
from ..domain.services import TIME_SLOTS, has_capacity
from ..models import ReservationStatus

logger = logging.getLogger(__name__)


async def is_available(res_repo: ReservationRepository, reservation_date: date, time: str) -> bool:
    """
    True while fewer than CAPACITY confirmed reservations share (date, time).
    A failed store read reports the slot as available (fail open).
    """
    try:
        confirmed = await res_repo.count_by_slot(reservation_date, time, ReservationStatus.CONFIRMED)
    except Exception:
        logger.warning("availability lookup failed for %s %s; treating slot as available", reservation_date, time, exc_info=True)
        return True
    return has_capacity(confirmed)


async def iter_available_slots(res_repo: ReservationRepository, reservation_date: date) -> AsyncIterator[str]:
    for time in TIME_SLOTS:
        if await is_available(res_repo, reservation_date, time):
            yield time


async def list_available_slots(res_repo: ReservationRepository, reservation_date: date) -> List[str]:
    return [time async for time in iter_available_slots(res_repo, reservation_date)]
