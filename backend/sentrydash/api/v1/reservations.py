from __future__ import annotations

from fastapi import APIRouter

from sentrydash.api.deps import ReservationCoordinatorDep
from sentrydash.schemas import ReservationRequest, ReservationResult

router = APIRouter()


@router.post("/reserve", response_model=ReservationResult, summary="Reserve a room for a course")
async def reserve_room(
    payload: ReservationRequest,
    coordinator: ReservationCoordinatorDep,
) -> ReservationResult:
    return await coordinator.reserve(payload)
