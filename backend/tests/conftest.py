import logging
import os

# Must be set before sentrydash.core.config builds its settings.
os.environ["STORE_BACKEND"] = "memory"
os.environ["REDIS_CACHE_URL"] = ""
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from sentrydash.api.deps import get_room_store, get_roster_store, reset_stores
from sentrydash.core.cache import reset_cache
from sentrydash.core.config import Settings
from sentrydash.main import app
from sentrydash.schemas import Location, ProfileRead, RoomState
from sentrydash.stores import InMemoryRoomStore, InMemoryRosterStore

logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def make_room(room_id: str = "A101", **overrides) -> RoomState:
    values = {
        "id": room_id,
        "name": f"Room {room_id}",
        "type": "theory",
        "capacity": 30,
        "current_count": 0,
        "block": room_id[0],
    }
    values.update(overrides)
    if isinstance(values.get("location"), tuple):
        x, y = values["location"]
        values["location"] = Location(x=x, y=y)
    return RoomState(**values)


@pytest.fixture
def fast_settings():
    """Settings with a retry budget large enough for concurrency tests and no backoff sleep."""
    return Settings(CAS_MAX_ATTEMPTS=50, CAS_INITIAL_DELAY_SECONDS=0.0, CAS_BACKOFF=1.0)


@pytest.fixture
def campus_rooms():
    return [
        make_room("A101", capacity=30, current_count=29, location=(0, 0), counting_mode="raw"),
        make_room("A102", capacity=20, current_count=5, location=(12, 0), counting_mode="raw"),
        make_room(
            "B201",
            type="lab",
            capacity=40,
            current_count=2,
            occupants=["s1", "s2"],
            counting_mode="roster",
            location=(30, 40),
        ),
        make_room("C301", capacity=60, current_count=0, location=(80, 10)),
    ]


@pytest.fixture
def profiles():
    return [
        ProfileRead(
            id="t1",
            name="Amara Okafor",
            email="amara.okafor@campus.edu",
            role="teacher",
            courses_enrolled=["CS101"],
        ),
        ProfileRead(
            id="s1",
            name="Lena Fischer",
            email="lena.fischer@campus.edu",
            courses_enrolled=["CS101"],
        ),
        ProfileRead(
            id="s2",
            name="Ravi Menon",
            email="ravi.menon@campus.edu",
            courses_enrolled=["MATH201"],
        ),
    ]


@pytest.fixture
def room_store(campus_rooms):
    return InMemoryRoomStore(campus_rooms)


@pytest.fixture
def roster_store(profiles):
    return InMemoryRosterStore(profiles)


@pytest.fixture
def client(room_store, roster_store):
    reset_cache()
    app.dependency_overrides[get_room_store] = lambda: room_store
    app.dependency_overrides[get_roster_store] = lambda: roster_store
    yield TestClient(app)
    app.dependency_overrides.clear()
    reset_cache()
    reset_stores()
