"""Process-local stores with the same contracts as the SQL ones.

Every call yields to the event loop before touching state, so concurrent
requests interleave between a read and the write that follows it, exactly
where they would against a remote store.
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Mapping, Optional

from sentrydash.core.errors import ConflictError, NotFoundError, StaleVersionError
from sentrydash.schemas import ProfileRead, RoomState

from .base import filter_rooms


class InMemoryRoomStore:
    def __init__(self, rooms: Iterable[RoomState] = (), latency: float = 0.0) -> None:
        self._rooms: dict[str, RoomState] = {room.id: room.model_copy(deep=True) for room in rooms}
        self._latency = latency
        self.write_count = 0

    async def _yield(self) -> None:
        await asyncio.sleep(self._latency)

    async def get(self, room_id: str) -> Optional[RoomState]:
        await self._yield()
        room = self._rooms.get(room_id)
        return room.model_copy(deep=True) if room else None

    async def upsert(self, room: RoomState) -> RoomState:
        await self._yield()
        current = self._rooms.get(room.id)
        version = current.version + 1 if current else room.version
        stored = room.model_copy(update={"version": version}, deep=True)
        self._rooms[room.id] = stored
        self.write_count += 1
        return stored.model_copy(deep=True)

    async def replace(self, room: RoomState, expected_version: int) -> RoomState:
        await self._yield()
        current = self._rooms.get(room.id)
        if current is None:
            raise NotFoundError(f"Room {room.id} not found")
        if current.version != expected_version:
            raise StaleVersionError(room.id, expected_version, current.version)
        stored = room.model_copy(update={"version": expected_version + 1}, deep=True)
        self._rooms[room.id] = stored
        self.write_count += 1
        return stored.model_copy(deep=True)

    async def query_all(self) -> list[RoomState]:
        await self._yield()
        return [self._rooms[room_id].model_copy(deep=True) for room_id in sorted(self._rooms)]

    async def query(self, predicate: str, params: Optional[Mapping[str, Any]] = None) -> list[RoomState]:
        return filter_rooms(await self.query_all(), predicate, params)

    async def ping(self) -> None:
        await self._yield()


class InMemoryRosterStore:
    def __init__(self, profiles: Iterable[ProfileRead] = ()) -> None:
        self._profiles: dict[str, ProfileRead] = {profile.id: profile for profile in profiles}

    async def get(self, profile_id: str) -> Optional[ProfileRead]:
        await asyncio.sleep(0)
        return self._profiles.get(profile_id)

    async def find_by_email(self, email: str) -> Optional[ProfileRead]:
        await asyncio.sleep(0)
        email = email.lower()
        for profile in self._profiles.values():
            if profile.email.lower() == email:
                return profile
        return None

    async def query_by_course(self, course: str) -> list[ProfileRead]:
        await asyncio.sleep(0)
        return [
            self._profiles[profile_id]
            for profile_id in sorted(self._profiles)
            if course in self._profiles[profile_id].courses_enrolled
        ]

    async def upsert(self, profile: ProfileRead) -> ProfileRead:
        await asyncio.sleep(0)
        for other in self._profiles.values():
            if other.id != profile.id and other.email.lower() == profile.email.lower():
                raise ConflictError(f"Email {profile.email} already belongs to {other.id}")
        self._profiles[profile.id] = profile
        return profile
