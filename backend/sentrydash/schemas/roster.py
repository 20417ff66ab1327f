from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .base import CamelModel


class Role(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"


class ProfileRead(CamelModel):
    id: str
    name: str
    email: str
    role: Role = Role.STUDENT
    # For teachers this holds the courses they teach.
    courses_enrolled: list[str] = Field(default_factory=list)
    department: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr


class LoginResponse(CamelModel):
    role: Role
    profile: ProfileRead
