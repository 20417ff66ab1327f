"""SQLModel-backed stores.

Sessions are blocking, so every operation runs in a worker thread
under the configured store timeout.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, TypeVar

from sqlalchemy import text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from sentrydash.core.async_utils import run_blocking
from sentrydash.core.config import settings
from sentrydash.core.errors import ConflictError, DependencyError, NotFoundError, StaleVersionError
from sentrydash.db import get_engine
from sentrydash.models import Profile, Room
from sentrydash.schemas import CountingMode, Location, ProfileRead, Reservation, RoomState

from .base import parse_predicate

logger = logging.getLogger(__name__)

T = TypeVar("T")


def room_to_state(row: Room) -> RoomState:
    location = None
    if row.location_x is not None or row.location_y is not None:
        location = Location(x=row.location_x or 0.0, y=row.location_y or 0.0)
    return RoomState(
        id=row.id,
        name=row.name,
        type=row.type,
        capacity=row.capacity,
        current_count=row.current_count,
        occupants=list(row.occupants or []),
        counting_mode=CountingMode(row.counting_mode) if row.counting_mode else None,
        location=location,
        block=row.block,
        internet_available=row.internet_available,
        smart_board=row.smart_board,
        upcoming_reservation=(
            Reservation.model_validate(row.upcoming_reservation) if row.upcoming_reservation else None
        ),
        schedule=list(row.schedule or []),
        version=row.version,
    )


def state_to_values(room: RoomState) -> dict[str, Any]:
    """Column values for ``room``, without the key, version and timestamps."""
    return {
        "name": room.name,
        "type": room.type,
        "capacity": room.capacity,
        "current_count": room.current_count,
        "occupants": list(room.occupants),
        "counting_mode": room.counting_mode.value if room.counting_mode else None,
        "location_x": room.location.x if room.location else None,
        "location_y": room.location.y if room.location else None,
        "block": room.block,
        "internet_available": room.internet_available,
        "smart_board": room.smart_board,
        "upcoming_reservation": (
            room.upcoming_reservation.model_dump(by_alias=True) if room.upcoming_reservation else None
        ),
        "schedule": list(room.schedule),
    }


def profile_to_read(row: Profile) -> ProfileRead:
    return ProfileRead(
        id=row.id,
        name=row.name,
        email=row.email,
        role=row.role,
        courses_enrolled=list(row.courses_enrolled or []),
        department=row.department,
    )


class _SqlStore:
    def __init__(self, engine: Optional[Engine] = None, timeout: Optional[float] = None) -> None:
        self._engine = engine
        self._timeout = timeout if timeout is not None else settings.STORE_TIMEOUT_SECONDS

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = get_engine()
        return self._engine

    async def _run(self, operation: str, func: Callable[..., T], *args) -> T:
        try:
            return await run_blocking(func, *args, timeout=self._timeout, operation=operation)
        except IntegrityError as exc:
            raise ConflictError(f"{operation} violates a uniqueness constraint") from exc
        except SQLAlchemyError as exc:
            logger.error(f"{operation} failed: {exc}")
            raise DependencyError(f"Store unavailable during {operation}", operation=operation) from exc


class SqlRoomStore(_SqlStore):
    async def get(self, room_id: str) -> Optional[RoomState]:
        return await self._run("room get", self._get, room_id)

    async def upsert(self, room: RoomState) -> RoomState:
        return await self._run("room upsert", self._upsert, room)

    async def replace(self, room: RoomState, expected_version: int) -> RoomState:
        return await self._run("room replace", self._replace, room, expected_version)

    async def query_all(self) -> list[RoomState]:
        return await self._run("room scan", self._query_all)

    async def query(self, predicate: str, params: Optional[Mapping[str, Any]] = None) -> list[RoomState]:
        clauses = parse_predicate(predicate, params)
        return await self._run("room query", self._query, clauses)

    async def ping(self) -> None:
        await self._run("room ping", self._ping)

    def _get(self, room_id: str) -> Optional[RoomState]:
        with Session(self.engine) as session:
            row = session.get(Room, room_id)
            return room_to_state(row) if row else None

    def _upsert(self, room: RoomState) -> RoomState:
        with Session(self.engine) as session:
            row = session.get(Room, room.id)
            values = state_to_values(room)
            if row is None:
                row = Room(id=room.id, version=room.version, **values)
            else:
                for field, value in values.items():
                    setattr(row, field, value)
                row.version += 1
                row.touch()
            session.add(row)
            session.commit()
            session.refresh(row)
            return room_to_state(row)

    def _replace(self, room: RoomState, expected_version: int) -> RoomState:
        with Session(self.engine) as session:
            statement = (
                update(Room)
                .where(Room.id == room.id, Room.version == expected_version)
                .values(
                    **state_to_values(room),
                    version=expected_version + 1,
                    updated_at=datetime.now(timezone.utc),
                )
            )
            result = session.execute(statement)
            session.commit()
            if result.rowcount == 0:
                current = session.get(Room, room.id)
                if current is None:
                    raise NotFoundError(f"Room {room.id} not found")
                raise StaleVersionError(room.id, expected_version, current.version)
            row = session.get(Room, room.id, populate_existing=True)
            return room_to_state(row)

    def _query_all(self) -> list[RoomState]:
        with Session(self.engine) as session:
            rows = session.exec(select(Room).order_by(Room.id)).all()
            return [room_to_state(row) for row in rows]

    def _query(self, clauses: list[tuple[str, Any]]) -> list[RoomState]:
        statement = select(Room)
        for name, value in clauses:
            if name == "min_capacity":
                statement = statement.where(Room.capacity >= int(value))
            elif name == "type":
                statement = statement.where(Room.type == value)
            elif name == "block":
                statement = statement.where(Room.block == value)
            elif name == "over_capacity":
                statement = statement.where(Room.current_count > Room.capacity)
            elif name == "reserved_by":
                statement = statement.where(
                    Room.upcoming_reservation["teacherId"].as_string() == value
                )
        with Session(self.engine) as session:
            rows = session.exec(statement.order_by(Room.id)).all()
            return [room_to_state(row) for row in rows]

    def _ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))


class SqlRosterStore(_SqlStore):
    async def get(self, profile_id: str) -> Optional[ProfileRead]:
        return await self._run("profile get", self._get, profile_id)

    async def find_by_email(self, email: str) -> Optional[ProfileRead]:
        return await self._run("profile lookup", self._find_by_email, email.lower())

    async def query_by_course(self, course: str) -> list[ProfileRead]:
        return await self._run("profile course query", self._query_by_course, course)

    async def upsert(self, profile: ProfileRead) -> ProfileRead:
        return await self._run("profile upsert", self._upsert, profile)

    def _get(self, profile_id: str) -> Optional[ProfileRead]:
        with Session(self.engine) as session:
            row = session.get(Profile, profile_id)
            return profile_to_read(row) if row else None

    def _find_by_email(self, email: str) -> Optional[ProfileRead]:
        with Session(self.engine) as session:
            row = session.exec(select(Profile).where(Profile.email == email)).one_or_none()
            return profile_to_read(row) if row else None

    def _query_by_course(self, course: str) -> list[ProfileRead]:
        # JSON membership is not portable across dialects; filter after the scan.
        with Session(self.engine) as session:
            rows = session.exec(select(Profile).order_by(Profile.id)).all()
            return [profile_to_read(row) for row in rows if course in (row.courses_enrolled or [])]

    def _upsert(self, profile: ProfileRead) -> ProfileRead:
        with Session(self.engine) as session:
            row = session.get(Profile, profile.id)
            if row is None:
                row = Profile(id=profile.id, email=profile.email.lower(), name=profile.name)
            row.email = profile.email.lower()
            row.name = profile.name
            row.role = profile.role.value
            row.courses_enrolled = list(profile.courses_enrolled)
            row.department = profile.department
            session.add(row)
            session.commit()
            session.refresh(row)
            return profile_to_read(row)
