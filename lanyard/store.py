"""Redis-backed access to events and their registrations."""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as redis

from lanyard.config import settings
from lanyard.models import EventRecord, Registration

CONFIRMED_STATUS = "confirmed"

_pool: redis.ConnectionPool | None = None


def get_pool() -> redis.ConnectionPool:
    global _pool
    if _pool is None:
        _pool = redis.ConnectionPool.from_url(settings.redis_url, decode_responses=True)
    return _pool


def get_redis() -> redis.Redis:
    return redis.Redis(connection_pool=get_pool())


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.aclose()
        _pool = None


def _event_key(event_id: str) -> str:
    return f"event:{event_id}"


def _registrations_key(event_id: str) -> str:
    return f"event:{event_id}:registrations"


def _load_registration(user_id: str, raw: str) -> Registration:
    registration = Registration.model_validate_json(raw)
    return registration.model_copy(update={"user_id": user_id})


class RegistrationStore:
    """Reads and writes event documents as the web client stores them."""

    # --- Events ---

    async def get_event(self, event_id: str) -> EventRecord | None:
        r = get_redis()
        raw = await r.get(_event_key(event_id))
        if raw:
            return EventRecord.model_validate({**json.loads(raw), "id": event_id})
        return None

    async def save_event(self, event_id: str, data: dict[str, Any]) -> None:
        r = get_redis()
        await r.set(_event_key(event_id), json.dumps(data))

    # --- Registrations ---

    async def get_registrations(self, event_id: str, *, confirmed_only: bool = False) -> list[Registration]:
        """All registrations for an event, ordered by user id."""
        r = get_redis()
        raw_map = await r.hgetall(_registrations_key(event_id))
        registrations = [_load_registration(uid, raw) for uid, raw in sorted(raw_map.items())]
        if confirmed_only:
            registrations = [reg for reg in registrations if reg.status == CONFIRMED_STATUS]
        return registrations

    async def get_raw_registrations(self, event_id: str) -> dict[str, dict[str, Any]]:
        """Stored documents as plain dicts, keyed by user id."""
        r = get_redis()
        raw_map = await r.hgetall(_registrations_key(event_id))
        return {uid: json.loads(raw) for uid, raw in sorted(raw_map.items())}

    async def get_registration(self, event_id: str, user_id: str) -> Registration | None:
        r = get_redis()
        raw = await r.hget(_registrations_key(event_id), user_id)
        if raw:
            return _load_registration(user_id, raw)
        return None

    async def save_registration(self, event_id: str, user_id: str, data: dict[str, Any]) -> None:
        r = get_redis()
        await r.hset(_registrations_key(event_id), user_id, json.dumps(data))

    async def update_registration(self, event_id: str, user_id: str, fields: dict[str, Any]) -> bool:
        """Merge ``fields`` into a stored registration. False if it does not exist."""
        r = get_redis()
        raw = await r.hget(_registrations_key(event_id), user_id)
        if not raw:
            return False
        document = json.loads(raw)
        document.update(fields)
        await r.hset(_registrations_key(event_id), user_id, json.dumps(document))
        return True


# Global instance
store = RegistrationStore()
