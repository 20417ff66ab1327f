"""
Load rooms, teachers and students from a JSON file.

Usage:
    python -m sentrydash.scripts.seed [path/to/seed.json]

The file holds {"rooms": [...], "profiles": [...]} in the API's camelCase
shape. A bare list is read as rooms. Rooms that already exist are left
untouched; profiles are upserted.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import sys
from pathlib import Path

from sentrydash.core.cache import get_cache, profile_cache_key
from sentrydash.core.config import settings
from sentrydash.core.log_config import configure_logging
from sentrydash.db import dispose_engine, init_db
from sentrydash.schemas import ProfileRead, RoomState
from sentrydash.stores import RoomStore, RosterStore, SqlRoomStore, SqlRosterStore

logger = logging.getLogger(__name__)

DEFAULT_SEED_FILE = Path(__file__).resolve().parents[2] / "data" / "seed.json"


def _room_id_from_name(name: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "-", name).strip("-")
    return slug.upper() or "ROOM"


def load_seed(path: Path) -> tuple[list[RoomState], list[ProfileRead]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        data = {"rooms": data}
    if not isinstance(data, dict):
        raise ValueError("Seed file must be a list of rooms or an object with 'rooms'/'profiles'")

    rooms = []
    for raw in data.get("rooms", []):
        if not raw.get("id"):
            raw = {**raw, "id": _room_id_from_name(str(raw.get("name", "")))}
        rooms.append(RoomState.model_validate(raw))
    profiles = [ProfileRead.model_validate(raw) for raw in data.get("profiles", [])]
    return rooms, profiles


async def seed(
    rooms: list[RoomState],
    profiles: list[ProfileRead],
    room_store: RoomStore,
    roster_store: RosterStore,
) -> tuple[int, int]:
    """Insert missing rooms and upsert profiles; returns (rooms created, profiles written)."""
    created = 0
    for room in rooms:
        if await room_store.get(room.id) is not None:
            logger.info(f"  [SKIP] {room.id} already exists")
            continue
        await room_store.upsert(room)
        created += 1
        logger.info(f"  [OK] {room.id} {room.name}")

    cache = get_cache()
    for profile in profiles:
        await roster_store.upsert(profile)
        cache.delete(profile_cache_key(profile.id))
        logger.info(f"  [OK] {profile.role.value} {profile.email}")

    return created, len(profiles)


def main(argv: list[str] | None = None) -> int:
    configure_logging(settings.LOG_LEVEL)
    argv = sys.argv[1:] if argv is None else argv
    path = Path(argv[0]) if argv else DEFAULT_SEED_FILE
    if not path.exists():
        logger.error(f"Seed file not found: {path}")
        return 1

    rooms, profiles = load_seed(path)
    init_db()
    try:
        created, written = asyncio.run(seed(rooms, profiles, SqlRoomStore(), SqlRosterStore()))
    finally:
        dispose_engine()
    logger.info(f"Seed complete: {created} rooms created, {written} profiles written")
    return 0


if __name__ == "__main__":
    sys.exit(main())
