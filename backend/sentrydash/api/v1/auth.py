from __future__ import annotations

from fastapi import APIRouter

from sentrydash.api.deps import RosterStoreDep
from sentrydash.core.errors import NotFoundError
from sentrydash.schemas import LoginRequest, LoginResponse

router = APIRouter()


@router.post("/login", response_model=LoginResponse, summary="Identify a teacher or student by email")
async def login(payload: LoginRequest, roster: RosterStoreDep) -> LoginResponse:
    email = payload.email.lower()
    profile = await roster.find_by_email(email)
    if profile is None:
        raise NotFoundError(f"No teacher or student registered with {email}")
    return LoginResponse(role=profile.role, profile=profile)
