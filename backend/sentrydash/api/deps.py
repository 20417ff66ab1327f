"""Request dependencies.

Stores are created once per process on first use and shared by every
request. ``reset_stores`` tears them down (tests, shutdown).
"""

from __future__ import annotations

import threading
from typing import Annotated, Optional

from fastapi import Depends

from sentrydash.core.cache import get_cache
from sentrydash.core.config import settings
from sentrydash.db import dispose_engine
from sentrydash.services.occupancy import OccupancyService
from sentrydash.services.reservations import ReservationCoordinator
from sentrydash.services.roster import CachedRosterLookup
from sentrydash.stores import RoomStore, RosterStore, build_stores

_stores: Optional[tuple[RoomStore, RosterStore]] = None
_stores_lock = threading.Lock()


def _get_stores() -> tuple[RoomStore, RosterStore]:
    global _stores
    if _stores is None:
        with _stores_lock:
            if _stores is None:
                _stores = build_stores(settings)
    return _stores


def get_room_store() -> RoomStore:
    return _get_stores()[0]


def get_roster_store() -> RosterStore:
    return _get_stores()[1]


def reset_stores() -> None:
    global _stores
    with _stores_lock:
        _stores = None
    dispose_engine()


RoomStoreDep = Annotated[RoomStore, Depends(get_room_store)]
RosterStoreDep = Annotated[RosterStore, Depends(get_roster_store)]


def get_occupancy_service(store: RoomStoreDep) -> OccupancyService:
    return OccupancyService(store, settings)


OccupancyServiceDep = Annotated[OccupancyService, Depends(get_occupancy_service)]


def get_reservation_coordinator(
    occupancy: OccupancyServiceDep,
    roster: RosterStoreDep,
) -> ReservationCoordinator:
    lookup = CachedRosterLookup(
        roster,
        get_cache(),
        ttl=settings.ROSTER_CACHE_TTL_SECONDS,
        timeout=settings.CACHE_TIMEOUT_SECONDS,
    )
    return ReservationCoordinator(occupancy, lookup)


ReservationCoordinatorDep = Annotated[ReservationCoordinator, Depends(get_reservation_coordinator)]
