"""Reservation coordinator.

Stamps a reservation onto a room, flags the people currently inside who are
not enrolled in the reserved course and proposes a fallback room.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, Optional

from sentrydash.core.async_utils import gather_with_errors
from sentrydash.core.errors import ValidationError
from sentrydash.schemas import (
    NonEnrolledOccupant,
    ProfileRead,
    Reservation,
    ReservationRequest,
    ReservationResult,
    RoomState,
)
from sentrydash.services import planner
from sentrydash.services.ledger import Reserve
from sentrydash.services.occupancy import OccupancyService

logger = logging.getLogger(__name__)

RosterLookup = Callable[[str], Awaitable[Optional[ProfileRead]]]

RESERVATION_FIELDS = ("course", "section", "teacher_id", "start_time")


def validate_reservation(payload: ReservationRequest) -> tuple[str, Reservation]:
    """Check that the room id and all four reservation fields are present."""
    if not payload.room_id:
        raise ValidationError("Missing roomId")
    missing = [name for name in RESERVATION_FIELDS if not getattr(payload, name)]
    if missing:
        raise ValidationError(
            "Missing reservation fields: " + ", ".join(_camel(name) for name in missing)
        )
    return payload.room_id, Reservation(
        course=payload.course,
        section=payload.section,
        teacher_id=payload.teacher_id,
        start_time=payload.start_time,
    )


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


async def find_non_enrolled(
    occupant_ids: Iterable[str],
    course: str,
    roster_lookup: RosterLookup,
) -> list[NonEnrolledOccupant]:
    """Occupants whose roster entry does not list ``course``.

    Lookups run concurrently. An occupant whose lookup fails or finds nothing
    is left out: their enrollment is unknown, not assumed.
    """
    occupant_ids = list(occupant_ids)
    results = await gather_with_errors(*(roster_lookup(oid) for oid in occupant_ids))

    non_enrolled: list[NonEnrolledOccupant] = []
    for occupant_id, result in zip(occupant_ids, results):
        if isinstance(result, Exception):
            logger.warning(f"Roster lookup failed for {occupant_id}: {result}")
            continue
        if isinstance(result, BaseException):
            raise result
        if result is None:
            logger.info(f"No roster entry for occupant {occupant_id}")
            continue
        if course not in result.courses_enrolled:
            non_enrolled.append(
                NonEnrolledOccupant(id=result.id, name=result.name, email=result.email)
            )
    return non_enrolled


async def build_reservation_result(
    room: RoomState,
    rooms: Iterable[RoomState],
    reservation: Reservation,
    roster_lookup: RosterLookup,
) -> ReservationResult:
    """Non-enrolled occupants and a relief room for an already stored reservation."""
    non_enrolled = await find_non_enrolled(room.occupants, reservation.course, roster_lookup)
    suggestion = planner.suggest(rooms, room.id, min_available=0)
    return ReservationResult(
        room_id=room.id,
        reservation=reservation,
        non_enrolled=non_enrolled,
        suggestion=suggestion,
    )


class ReservationCoordinator:
    def __init__(self, occupancy: OccupancyService, roster_lookup: RosterLookup) -> None:
        self.occupancy = occupancy
        self.roster_lookup = roster_lookup

    async def reserve(self, payload: ReservationRequest) -> ReservationResult:
        room_id, reservation = validate_reservation(payload)
        room = await self.occupancy.record(room_id, Reserve(reservation))
        rooms = await self.occupancy.store.query_all()

        result = await build_reservation_result(room, rooms, reservation, self.roster_lookup)
        logger.info(
            f"Reservation stored on {room_id} for {reservation.course}/{reservation.section} "
            f"by {reservation.teacher_id}: non_enrolled={len(result.non_enrolled)} "
            f"suggestion={result.suggestion.id if result.suggestion else 'none'}"
        )
        return result
