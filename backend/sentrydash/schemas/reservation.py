from __future__ import annotations

from typing import Optional

from .base import CamelModel
from .room import Reservation, RoomCandidate


class ReservationRequest(CamelModel):
    room_id: Optional[str] = None
    course: Optional[str] = None
    section: Optional[str] = None
    teacher_id: Optional[str] = None
    start_time: Optional[str] = None


class NonEnrolledOccupant(CamelModel):
    id: str
    name: str
    email: str


class ReservationResult(CamelModel):
    message: str = "Reservation stored"
    room_id: str
    reservation: Reservation
    non_enrolled: list[NonEnrolledOccupant] = []
    suggestion: Optional[RoomCandidate] = None
