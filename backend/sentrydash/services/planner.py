"""Relocation planner.

Ranks the other rooms by straight-line distance from a source room and keeps
those with enough free seats. Rooms without coordinates sit at the origin.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional

from sentrydash.core.errors import NotFoundError, ValidationError
from sentrydash.schemas import RoomCandidate, RoomState


def overflow(room: RoomState) -> int:
    """Headcount above capacity that needs to be relocated."""
    return max(0, room.current_count - room.capacity)


def available(room: RoomState) -> int:
    return max(0, room.capacity - room.current_count)


def distance(a: RoomState, b: RoomState) -> float:
    ax, ay = (a.location.x, a.location.y) if a.location else (0.0, 0.0)
    bx, by = (b.location.x, b.location.y) if b.location else (0.0, 0.0)
    return math.hypot(ax - bx, ay - by)


def rank_candidates(
    rooms: Iterable[RoomState],
    source_id: str,
    min_available: int,
) -> list[RoomCandidate]:
    """Rooms other than the source that can take ``min_available`` people, nearest first.

    A room with no free seat never qualifies, so ``min_available=0`` means
    "any room with spare capacity". Equal distances keep input order.
    """
    if min_available < 0:
        raise ValidationError("min_available must not be negative")

    rooms = list(rooms)
    source = next((room for room in rooms if room.id == source_id), None)
    if source is None:
        raise NotFoundError(f"Source room {source_id} not found")

    threshold = max(min_available, 1)
    candidates = [
        RoomCandidate(
            **room.model_dump(),
            available=available(room),
            distance=distance(source, room),
        )
        for room in rooms
        if room.id != source_id and available(room) >= threshold
    ]
    # list.sort is stable: first-seen wins on ties.
    candidates.sort(key=lambda candidate: candidate.distance)
    return candidates


def suggest(
    rooms: Iterable[RoomState],
    source_id: str,
    min_available: int,
) -> Optional[RoomCandidate]:
    candidates = rank_candidates(rooms, source_id, min_available)
    return candidates[0] if candidates else None
