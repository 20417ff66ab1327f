from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel


class Room(SQLModel, table=True):
    """Physical room whose occupancy is tracked."""

    __tablename__ = "rooms"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(max_length=255)
    type: str = Field(default="theory", max_length=50, index=True)
    capacity: int = Field(ge=1)
    current_count: int = Field(default=0, ge=0)
    occupants: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    counting_mode: Optional[str] = Field(default=None, max_length=20)
    location_x: Optional[float] = Field(default=None)
    location_y: Optional[float] = Field(default=None)
    block: Optional[str] = Field(default=None, max_length=50, index=True)
    internet_available: bool = Field(default=False)
    smart_board: bool = Field(default=False)
    upcoming_reservation: Optional[dict] = Field(
        default=None, sa_column=Column(JSON, nullable=True)
    )
    schedule: list[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # Bumped on every committed write; conditional updates compare against it.
    version: int = Field(default=0, nullable=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)
