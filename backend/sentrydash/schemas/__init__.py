from .base import CamelModel
from .occupancy import EntryAction, EntryRequest
from .reservation import NonEnrolledOccupant, ReservationRequest, ReservationResult
from .room import (
    CountingMode,
    Location,
    NoOverflowRead,
    Reservation,
    RoomCandidate,
    RoomState,
    RoomType,
    SuggestionRead,
    SuggestRequest,
)
from .roster import LoginRequest, LoginResponse, ProfileRead, Role

__all__ = [
    "CamelModel",
    "CountingMode",
    "EntryAction",
    "EntryRequest",
    "Location",
    "LoginRequest",
    "LoginResponse",
    "NoOverflowRead",
    "NonEnrolledOccupant",
    "ProfileRead",
    "Reservation",
    "ReservationRequest",
    "ReservationResult",
    "Role",
    "RoomCandidate",
    "RoomState",
    "RoomType",
    "SuggestionRead",
    "SuggestRequest",
]
