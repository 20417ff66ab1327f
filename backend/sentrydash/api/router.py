from fastapi import APIRouter

from sentrydash.api.v1 import auth, occupancy, reservations, rooms


api_router = APIRouter()
api_router.include_router(rooms.router, tags=["rooms"])
api_router.include_router(occupancy.router, tags=["occupancy"])
api_router.include_router(reservations.router, tags=["reservations"])
api_router.include_router(auth.router, tags=["auth"])
