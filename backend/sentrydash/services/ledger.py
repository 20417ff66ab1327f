"""Occupancy ledger: applies entry, exit and reservation events to a room.

``apply`` is a pure function of (room snapshot, event). It never touches a
store; callers persist the returned room with a conditional write.

A room counts people in one of two modes (see ``CountingMode``):

* RAW: anonymous events move a bare counter.
* ROSTER: events carry an occupant id, the room keeps the id set and
  ``current_count`` is always its size.

The mode is fixed by the first event that changes the room and every later
event must match it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from sentrydash.core.errors import ValidationError
from sentrydash.schemas import CountingMode, EntryAction, EntryRequest, Reservation, RoomState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Enter:
    occupant_id: Optional[str] = None


@dataclass(frozen=True)
class Exit:
    occupant_id: Optional[str] = None


@dataclass(frozen=True)
class Reserve:
    reservation: Reservation


OccupancyEvent = Union[Enter, Exit, Reserve]


@dataclass(frozen=True)
class LedgerOutcome:
    """Next room state and whether it differs from the input."""

    room: RoomState
    applied: bool


def parse_entry(payload: EntryRequest) -> tuple[str, OccupancyEvent]:
    """Turn an entry request into ``(room_id, event)``."""
    if not payload.room_id or not payload.action:
        raise ValidationError("Missing roomId or action")

    occupant_id = payload.user_id or None
    if payload.action == EntryAction.ENTER.value:
        return payload.room_id, Enter(occupant_id)
    if payload.action == EntryAction.EXIT.value:
        return payload.room_id, Exit(occupant_id)
    raise ValidationError("Invalid action. Use 'enter' or 'exit'.")


def effective_mode(room: RoomState) -> Optional[CountingMode]:
    """Counting mode of ``room``, inferring it for rooms seeded without one."""
    if room.counting_mode is not None:
        return room.counting_mode
    if room.occupants:
        return CountingMode.ROSTER
    if room.current_count > 0:
        return CountingMode.RAW
    return None


def _resolve_mode(room: RoomState, occupant_id: Optional[str]) -> CountingMode:
    requested = CountingMode.ROSTER if occupant_id else CountingMode.RAW
    current = effective_mode(room)
    if current is None or current is requested:
        return requested
    if current is CountingMode.RAW:
        raise ValidationError(
            f"Room {room.id} counts anonymously; userId is not accepted", room_id=room.id
        )
    raise ValidationError(
        f"Room {room.id} tracks occupants by id; userId is required", room_id=room.id
    )


def apply(room: RoomState, event: OccupancyEvent) -> LedgerOutcome:
    if isinstance(event, Reserve):
        return _apply_reserve(room, event)
    if not isinstance(event, (Enter, Exit)):
        raise ValidationError(f"Unsupported event: {type(event).__name__}")

    mode = _resolve_mode(room, event.occupant_id)
    if mode is CountingMode.RAW:
        return _apply_raw(room, event)
    return _apply_roster(room, event)


def _apply_raw(room: RoomState, event: Union[Enter, Exit]) -> LedgerOutcome:
    if isinstance(event, Enter):
        next_count = room.current_count + 1
    else:
        next_count = max(0, room.current_count - 1)

    if next_count == room.current_count:
        logger.debug(f"{room.id}: exit ignored, room already empty")
        return LedgerOutcome(room, applied=False)

    next_room = room.model_copy(
        update={"current_count": next_count, "counting_mode": CountingMode.RAW}
    )
    return LedgerOutcome(next_room, applied=True)


def _apply_roster(room: RoomState, event: Union[Enter, Exit]) -> LedgerOutcome:
    occupant_id = event.occupant_id
    present = occupant_id in room.occupants

    if isinstance(event, Enter):
        if present:
            logger.debug(f"{room.id}: {occupant_id} already inside")
            return LedgerOutcome(room, applied=False)
        occupants = [*room.occupants, occupant_id]
    else:
        if not present:
            logger.debug(f"{room.id}: {occupant_id} not inside, exit ignored")
            return LedgerOutcome(room, applied=False)
        occupants = [o for o in room.occupants if o != occupant_id]

    next_room = room.model_copy(
        update={
            "occupants": occupants,
            "current_count": len(occupants),
            "counting_mode": CountingMode.ROSTER,
        }
    )
    return LedgerOutcome(next_room, applied=True)


def _apply_reserve(room: RoomState, event: Reserve) -> LedgerOutcome:
    reservation = event.reservation
    missing = [
        name
        for name in ("course", "section", "teacher_id", "start_time")
        if not getattr(reservation, name)
    ]
    if missing:
        raise ValidationError(f"Reservation is missing {', '.join(missing)}")

    if room.upcoming_reservation == reservation:
        return LedgerOutcome(room, applied=False)
    next_room = room.model_copy(update={"upcoming_reservation": reservation})
    return LedgerOutcome(next_room, applied=True)
