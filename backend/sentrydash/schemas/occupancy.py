from __future__ import annotations

from enum import Enum
from typing import Optional

from .base import CamelModel


class EntryAction(str, Enum):
    ENTER = "enter"
    EXIT = "exit"


class EntryRequest(CamelModel):
    # Missing values are reported by ledger.parse_entry.
    room_id: Optional[str] = None
    action: Optional[str] = None
    user_id: Optional[str] = None
