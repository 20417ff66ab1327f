from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import Field

from .base import CamelModel


class RoomType(str, Enum):
    THEORY = "theory"
    LAB = "lab"


class CountingMode(str, Enum):
    """How a room counts people.

    RAW rooms keep a bare counter fed by anonymous events. ROSTER rooms keep
    the set of occupant ids and derive the count from it.
    """

    RAW = "raw"
    ROSTER = "roster"


class Location(CamelModel):
    x: float = 0.0
    y: float = 0.0


class Reservation(CamelModel):
    course: str = Field(min_length=1)
    section: str = Field(min_length=1)
    teacher_id: str = Field(min_length=1)
    start_time: str = Field(min_length=1)


class RoomState(CamelModel):
    """Snapshot of a room as read from (or about to be written to) a store."""

    id: str = Field(min_length=1)
    name: str
    # Open set; "theory" and "lab" are the known values.
    type: str = RoomType.THEORY.value
    capacity: int = Field(gt=0)
    current_count: int = Field(default=0, ge=0)
    occupants: list[str] = Field(default_factory=list)
    counting_mode: Optional[CountingMode] = None
    location: Optional[Location] = None
    block: Optional[str] = None
    internet_available: bool = False
    smart_board: bool = False
    upcoming_reservation: Optional[Reservation] = None
    schedule: list[dict[str, Any]] = Field(default_factory=list)
    version: int = Field(default=0, ge=0)

    @property
    def is_over_capacity(self) -> bool:
        return self.current_count > self.capacity


class RoomCandidate(RoomState):
    """A relocation candidate: the room plus its free seats and distance from the source."""

    available: int = Field(ge=0)
    distance: float = Field(ge=0)


class SuggestRequest(CamelModel):
    room_id: Optional[str] = None


class SuggestionRead(CamelModel):
    overflow: int
    suggestion: Optional[RoomCandidate] = None


class NoOverflowRead(CamelModel):
    message: str = "No overflow detected"
    room: RoomState
