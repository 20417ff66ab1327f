from __future__ import annotations

from sentrydash.core.config import Settings

from .base import ROOM_PREDICATES, RoomStore, RosterStore, filter_rooms, parse_predicate
from .memory import InMemoryRoomStore, InMemoryRosterStore
from .sql import SqlRoomStore, SqlRosterStore


def build_stores(settings: Settings) -> tuple[RoomStore, RosterStore]:
    """Construct the room and roster stores selected by STORE_BACKEND."""
    if settings.STORE_BACKEND == "memory":
        return InMemoryRoomStore(), InMemoryRosterStore()
    timeout = settings.STORE_TIMEOUT_SECONDS
    return SqlRoomStore(timeout=timeout), SqlRosterStore(timeout=timeout)


__all__ = [
    "ROOM_PREDICATES",
    "InMemoryRoomStore",
    "InMemoryRosterStore",
    "RoomStore",
    "RosterStore",
    "SqlRoomStore",
    "SqlRosterStore",
    "build_stores",
    "filter_rooms",
    "parse_predicate",
]
