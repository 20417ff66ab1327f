from typing import Union

from fastapi import APIRouter, Request

from sentrydash.api.deps import OccupancyServiceDep
from sentrydash.core.config import settings
from sentrydash.core.errors import ValidationError
from sentrydash.core.limiter import limiter
from sentrydash.schemas import EntryRequest, NoOverflowRead, RoomState, SuggestionRead, SuggestRequest
from sentrydash.services.ledger import parse_entry

router = APIRouter()


@router.post("/entry", response_model=RoomState, summary="Record an entry or exit")
@limiter.limit(settings.ENTRY_RATE_LIMIT)
async def record_entry(
    request: Request,
    payload: EntryRequest,
    occupancy: OccupancyServiceDep,
) -> RoomState:
    room_id, event = parse_entry(payload)
    return await occupancy.record(room_id, event)


@router.post(
    "/suggest",
    response_model=Union[SuggestionRead, NoOverflowRead],
    summary="Suggest an alternate room for overflow",
)
async def suggest_room(
    payload: SuggestRequest,
    occupancy: OccupancyServiceDep,
) -> Union[SuggestionRead, NoOverflowRead]:
    if not payload.room_id:
        raise ValidationError("Missing roomId")
    return await occupancy.suggest(payload.room_id)
