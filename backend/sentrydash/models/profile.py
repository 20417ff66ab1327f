from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel


class Profile(SQLModel, table=True):
    """Roster record for a teacher or a student."""

    __tablename__ = "profiles"

    id: str = Field(primary_key=True, max_length=64)
    email: str = Field(index=True, unique=True, max_length=255)
    name: str = Field(max_length=255)
    role: str = Field(default="student", max_length=20)
    courses_enrolled: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    department: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)
