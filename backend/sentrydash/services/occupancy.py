"""Read-modify-write of rooms under compare-and-swap.

Each attempt reads the room, runs the ledger and writes the result
conditioned on the version it read. A concurrent commit in between makes the
write fail with StaleVersionError and the whole cycle is retried with
exponential backoff. When attempts run out the StaleVersionError (a
ConflictError) reaches the caller.
"""

from __future__ import annotations

import logging
from typing import Optional

from sentrydash.core.async_utils import retry_async
from sentrydash.core.config import Settings, settings as default_settings
from sentrydash.core.errors import NotFoundError, StaleVersionError
from sentrydash.schemas import NoOverflowRead, RoomState, SuggestionRead
from sentrydash.services import ledger, planner
from sentrydash.services.ledger import OccupancyEvent
from sentrydash.stores import RoomStore

logger = logging.getLogger(__name__)


class OccupancyService:
    def __init__(self, store: RoomStore, settings: Optional[Settings] = None) -> None:
        self.store = store
        settings = settings or default_settings
        self._record_with_retry = retry_async(
            max_attempts=settings.CAS_MAX_ATTEMPTS,
            delay=settings.CAS_INITIAL_DELAY_SECONDS,
            backoff=settings.CAS_BACKOFF,
            exceptions=(StaleVersionError,),
        )(self._record_once)

    async def get_room(self, room_id: str) -> RoomState:
        room = await self.store.get(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found", room_id=room_id)
        return room

    async def record(self, room_id: str, event: OccupancyEvent) -> RoomState:
        """Apply ``event`` to the room and persist it; returns the stored room."""
        room = await self._record_with_retry(room_id, event)
        logger.info(
            f"Recorded {type(event).__name__.lower()} on {room_id}: "
            f"count={room.current_count}/{room.capacity} version={room.version}"
        )
        return room

    async def _record_once(self, room_id: str, event: OccupancyEvent) -> RoomState:
        room = await self.get_room(room_id)
        outcome = ledger.apply(room, event)
        if not outcome.applied:
            return room

        stored = await self.store.replace(outcome.room, expected_version=room.version)
        if stored.is_over_capacity and not room.is_over_capacity:
            logger.warning(
                f"Capacity exceeded in {room_id}: {stored.current_count}/{stored.capacity}"
            )
        return stored

    async def suggest(self, room_id: str) -> SuggestionRead | NoOverflowRead:
        """Nearest room able to absorb the source room's overflow."""
        source = await self.get_room(room_id)
        needed = planner.overflow(source)
        if needed == 0:
            return NoOverflowRead(room=source)

        rooms = await self.store.query_all()
        # The scan may have seen a newer version of the source; rank against it.
        suggestion = planner.suggest(rooms, room_id, needed)
        logger.info(
            f"Suggestion for {room_id}: overflow={needed} "
            f"suggestion={suggestion.id if suggestion else 'none'}"
        )
        return SuggestionRead(overflow=needed, suggestion=suggestion)
