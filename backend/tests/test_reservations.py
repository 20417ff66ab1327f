import asyncio
import time

import pytest

from conftest import make_room
from sentrydash.core.cache import RedisCache, profile_cache_key
from sentrydash.core.errors import NotFoundError, ValidationError
from sentrydash.schemas import ProfileRead, Reservation, ReservationRequest
from sentrydash.services.occupancy import OccupancyService
from sentrydash.services.reservations import (
    ReservationCoordinator,
    build_reservation_result,
    find_non_enrolled,
    validate_reservation,
)
from sentrydash.services.roster import CachedRosterLookup
from sentrydash.stores import InMemoryRoomStore, InMemoryRosterStore

CS101 = Reservation(course="CS101", section="A", teacher_id="t1", start_time="2026-10-19T09:00")


def request_for(room_id="B201", **overrides):
    values = {
        "room_id": room_id,
        "course": "CS101",
        "section": "A",
        "teacher_id": "t1",
        "start_time": "2026-10-19T09:00",
    }
    values.update(overrides)
    return ReservationRequest(**values)


def lookup_from(roster_store):
    async def lookup(profile_id):
        return await roster_store.get(profile_id)

    return lookup


async def test_scenario_non_enrolled_occupant(roster_store):
    non_enrolled = await find_non_enrolled(["s1", "s2"], "CS101", lookup_from(roster_store))

    assert [(o.id, o.name, o.email) for o in non_enrolled] == [
        ("s2", "Ravi Menon", "ravi.menon@campus.edu")
    ]


async def test_failed_lookup_is_skipped(roster_store):
    async def flaky(profile_id):
        if profile_id == "s2":
            raise ConnectionError("roster store timed out")
        return await roster_store.get(profile_id)

    non_enrolled = await find_non_enrolled(["s1", "s2"], "MATH201", flaky)

    # s1 is not in MATH201; s2's status is unknown and must not be guessed.
    assert [o.id for o in non_enrolled] == ["s1"]


async def test_unknown_occupant_is_skipped(roster_store):
    non_enrolled = await find_non_enrolled(["ghost", "s2"], "CS101", lookup_from(roster_store))

    assert [o.id for o in non_enrolled] == ["s2"]


async def test_result_always_proposes_relief_room(roster_store):
    room = make_room("B201", capacity=40, current_count=2, occupants=["s1", "s2"], location=(0, 0))
    rooms = [
        room,
        make_room("FULL", capacity=10, current_count=10, location=(1, 0)),
        make_room("OPEN", capacity=10, current_count=3, location=(2, 0)),
    ]

    result = await build_reservation_result(room, rooms, CS101, lookup_from(roster_store))

    assert result.suggestion.id == "OPEN"
    assert result.reservation == CS101
    assert result.room_id == "B201"


async def test_result_without_candidates(roster_store):
    room = make_room("B201", occupants=["s1"], current_count=1)

    result = await build_reservation_result(room, [room], CS101, lookup_from(roster_store))

    assert result.suggestion is None
    assert result.non_enrolled == []


def test_validate_reservation_requires_all_fields():
    with pytest.raises(ValidationError, match="teacherId, startTime"):
        validate_reservation(request_for(teacher_id=None, start_time=""))

    with pytest.raises(ValidationError, match="Missing roomId"):
        validate_reservation(request_for(room_id=None))

    room_id, reservation = validate_reservation(request_for())
    assert room_id == "B201"
    assert reservation.course == "CS101"


async def test_coordinator_persists_reservation(campus_rooms, roster_store, fast_settings):
    room_store = InMemoryRoomStore(campus_rooms)
    coordinator = ReservationCoordinator(
        OccupancyService(room_store, fast_settings), lookup_from(roster_store)
    )

    result = await coordinator.reserve(request_for("B201"))

    stored = await room_store.get("B201")
    assert stored.upcoming_reservation == result.reservation
    assert stored.occupants == ["s1", "s2"]
    assert [o.id for o in result.non_enrolled] == ["s2"]
    assert result.suggestion is not None
    assert result.suggestion.id != "B201"


async def test_coordinator_unknown_room(roster_store, fast_settings):
    coordinator = ReservationCoordinator(
        OccupancyService(InMemoryRoomStore(), fast_settings), lookup_from(roster_store)
    )

    with pytest.raises(NotFoundError):
        await coordinator.reserve(request_for("NOPE"))


async def test_cached_lookup_reads_through(profiles):
    store = InMemoryRosterStore(profiles)
    cache = RedisCache("")
    lookup = CachedRosterLookup(store, cache)

    first = await lookup("s1")
    assert cache.get(profile_cache_key("s1"))["email"] == "lena.fischer@campus.edu"

    # A later roster change is not seen until the entry is dropped.
    await store.upsert(first.model_copy(update={"courses_enrolled": []}))
    assert (await lookup("s1")).courses_enrolled == ["CS101"]

    cache.delete(profile_cache_key("s1"))
    assert (await lookup("s1")).courses_enrolled == []


async def test_cached_lookup_does_not_cache_misses(profiles):
    store = InMemoryRosterStore(profiles)
    cache = RedisCache("")
    lookup = CachedRosterLookup(store, cache)

    assert await lookup("s9") is None
    await store.upsert(ProfileRead(id="s9", name="New", email="new@campus.edu"))
    assert (await lookup("s9")).name == "New"


class HungCache(RedisCache):
    def get(self, key):
        time.sleep(0.5)
        return None


async def test_hung_cache_does_not_block_other_requests(profiles):
    lookup = CachedRosterLookup(InMemoryRosterStore(profiles), HungCache(""), timeout=0.05)
    ticks = []

    async def other_request():
        for _ in range(3):
            ticks.append(time.perf_counter())
            await asyncio.sleep(0.01)

    started = time.perf_counter()
    profile, _ = await asyncio.gather(lookup("s1"), other_request())

    assert profile.id == "s1"
    assert time.perf_counter() - started < 0.4
    assert ticks[-1] - started < 0.2
