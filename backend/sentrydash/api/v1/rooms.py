from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query

from sentrydash.api.deps import OccupancyServiceDep, RoomStoreDep
from sentrydash.schemas import RoomState

router = APIRouter()


@router.get("/rooms", response_model=List[RoomState], summary="List rooms")
async def list_rooms(
    store: RoomStoreDep,
    type: Optional[str] = Query(default=None, description="Room type, e.g. theory or lab"),
    block: Optional[str] = Query(default=None),
    min_capacity: Optional[int] = Query(default=None, alias="minCapacity", ge=1),
    over_capacity: bool = Query(default=False, alias="overCapacity"),
) -> List[RoomState]:
    filters = {"type": type, "block": block, "min_capacity": min_capacity}
    names = [name for name, value in filters.items() if value is not None]
    if over_capacity:
        names.append("over_capacity")
    if not names:
        return await store.query_all()
    return await store.query(" and ".join(names), filters)


@router.get("/room/{room_id}", response_model=RoomState, summary="Get room by id")
async def get_room(room_id: str, occupancy: OccupancyServiceDep) -> RoomState:
    return await occupancy.get_room(room_id)


@router.get(
    "/teacher/{teacher_id}/reservations",
    response_model=List[RoomState],
    summary="Rooms with an upcoming reservation by a teacher",
)
async def list_teacher_reservations(teacher_id: str, store: RoomStoreDep) -> List[RoomState]:
    return await store.query("reserved_by", {"reserved_by": teacher_id})
