"""Store contracts consumed by the occupancy core.

Stores are asynchronous; their calls are the only suspension points of a
request. Room writes that follow a read go through ``replace``, which only
commits when the stored version still matches the version that was read.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol

from sentrydash.core.errors import ValidationError
from sentrydash.schemas import ProfileRead, RoomState

# Named filters accepted by RoomStore.query. Each takes its parameter under
# the same name; "over_capacity" takes none.
ROOM_PREDICATES = ("min_capacity", "type", "block", "over_capacity", "reserved_by")


class RoomStore(Protocol):
    async def get(self, room_id: str) -> Optional[RoomState]:
        ...

    async def upsert(self, room: RoomState) -> RoomState:
        ...

    async def replace(self, room: RoomState, expected_version: int) -> RoomState:
        """Write ``room`` only if the stored version equals ``expected_version``.

        Raises StaleVersionError on mismatch and NotFoundError if the room is gone.
        Returns the stored state carrying the new version.
        """
        ...

    async def query_all(self) -> list[RoomState]:
        ...

    async def query(self, predicate: str, params: Optional[Mapping[str, Any]] = None) -> list[RoomState]:
        ...

    async def ping(self) -> None:
        ...


class RosterStore(Protocol):
    async def get(self, profile_id: str) -> Optional[ProfileRead]:
        ...

    async def find_by_email(self, email: str) -> Optional[ProfileRead]:
        ...

    async def query_by_course(self, course: str) -> list[ProfileRead]:
        ...

    async def upsert(self, profile: ProfileRead) -> ProfileRead:
        ...


def parse_predicate(predicate: str, params: Optional[Mapping[str, Any]]) -> list[tuple[str, Any]]:
    """Split ``"type and min_capacity"`` into ``[(name, param), ...]``.

    Raises ValidationError for unknown names or missing parameters.
    """
    params = params or {}
    clauses: list[tuple[str, Any]] = []
    for raw in predicate.split(" and "):
        name = raw.strip()
        if name not in ROOM_PREDICATES:
            raise ValidationError(f"Unknown room filter: {name!r}")
        if name == "over_capacity":
            clauses.append((name, None))
            continue
        if params.get(name) is None:
            raise ValidationError(f"Missing parameter for room filter {name!r}")
        clauses.append((name, params[name]))
    return clauses


def _matches(name: str, value: Any) -> Callable[[RoomState], bool]:
    if name == "min_capacity":
        return lambda room: room.capacity >= int(value)
    if name == "type":
        return lambda room: room.type == value
    if name == "block":
        return lambda room: room.block == value
    if name == "over_capacity":
        return lambda room: room.is_over_capacity
    return lambda room: (
        room.upcoming_reservation is not None and room.upcoming_reservation.teacher_id == value
    )


def filter_rooms(rooms: list[RoomState], predicate: str, params: Optional[Mapping[str, Any]]) -> list[RoomState]:
    checks = [_matches(name, value) for name, value in parse_predicate(predicate, params)]
    return [room for room in rooms if all(check(room) for check in checks)]
