from datetime import date

import pytest
from savory_table.domain.services import TIME_SLOTS
from savory_table.models import ReservationStatus
from savory_table.usecases import slots as uc

DAY = date(2025, 6, 1)


@pytest.mark.asyncio
async def test_every_slot_open_on_empty_day(res_repo) -> None:
    assert await uc.list_available_slots(res_repo, DAY) == list(TIME_SLOTS)


@pytest.mark.asyncio
async def test_slot_closes_at_three_confirmed(res_repo) -> None:
    await res_repo.seed(DAY, "19:00", 2)
    assert await uc.is_available(res_repo, DAY, "19:00") is True
    await res_repo.seed(DAY, "19:00", 1)
    assert await uc.is_available(res_repo, DAY, "19:00") is False


@pytest.mark.asyncio
async def test_cancelled_bookings_do_not_count(res_repo) -> None:
    await res_repo.seed(DAY, "19:00", 3, status=ReservationStatus.CANCELLED)
    await res_repo.seed(DAY, "19:00", 2)
    assert await uc.is_available(res_repo, DAY, "19:00") is True


@pytest.mark.asyncio
async def test_other_dates_do_not_count(res_repo) -> None:
    await res_repo.seed(date(2025, 6, 2), "19:00", 3)
    assert await uc.is_available(res_repo, DAY, "19:00") is True


@pytest.mark.asyncio
async def test_available_slots_are_ordered_subset_reconfirmed(res_repo) -> None:
    await res_repo.seed(DAY, "17:30", 3)
    await res_repo.seed(DAY, "21:00", 3)
    await res_repo.seed(DAY, "20:00", 2)

    slots = await uc.list_available_slots(res_repo, DAY)

    assert "17:30" not in slots and "21:00" not in slots
    assert "20:00" in slots
    assert len(slots) == 9
    assert slots == [s for s in TIME_SLOTS if s in slots]
    for slot in slots:
        assert await uc.is_available(res_repo, DAY, slot)


@pytest.mark.asyncio
async def test_available_slots_idempotent_without_writes(res_repo) -> None:
    await res_repo.seed(DAY, "18:00", 3)
    first = await uc.list_available_slots(res_repo, DAY)
    second = await uc.list_available_slots(res_repo, DAY)
    assert first == second


@pytest.mark.asyncio
async def test_iteration_recomputes_each_time(res_repo) -> None:
    first = [s async for s in uc.iter_available_slots(res_repo, DAY)]
    await res_repo.seed(DAY, "22:00", 3)
    second = [s async for s in uc.iter_available_slots(res_repo, DAY)]
    assert "22:00" in first
    assert "22:00" not in second


@pytest.mark.asyncio
async def test_store_failure_fails_open(res_repo, caplog: pytest.LogCaptureFixture) -> None:
    await res_repo.seed(DAY, "19:00", 3)
    res_repo.count_error = RuntimeError("store unreachable")
    assert await uc.is_available(res_repo, DAY, "19:00") is True
    assert "treating slot as available" in caplog.text
