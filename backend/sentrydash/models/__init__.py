from .profile import Profile
from .room import Room

__all__ = [
    "Profile",
    "Room",
]
