"""Load an event export (event + registrations) into Redis."""

from __future__ import annotations

import asyncio
import json
import sys

import redis.asyncio as aioredis

from lanyard.config import settings


async def load_data(
    export_path: str = "data/event_export.json",
    redis_url: str = "redis://localhost:6379",
) -> str:
    """Write the event document and every registration. Returns the event id."""
    with open(export_path) as f:
        export = json.load(f)

    event = dict(export["event"])
    event_id = event.pop("id")
    registrations = export.get("registrations", {})

    r = aioredis.from_url(redis_url, decode_responses=True)

    await r.set(f"event:{event_id}", json.dumps(event))
    print(f"Loaded event {event_id} ({event.get('name') or event.get('title') or 'untitled'})")

    print(f"Loading {len(registrations)} registrations...")
    pipe = r.pipeline()
    for user_id, registration in registrations.items():
        pipe.hset(f"event:{event_id}:registrations", user_id, json.dumps(registration))
    await pipe.execute()
    confirmed = sum(1 for reg in registrations.values() if reg.get("status") == "confirmed")
    print(f"  Loaded {len(registrations)} registrations ({confirmed} confirmed)")

    await r.aclose()
    return event_id


async def _check_existing(redis_url: str, event_id: str) -> bool:
    """Check if registrations already exist in Redis. Returns True if safe to proceed."""
    r = aioredis.from_url(redis_url, decode_responses=True)
    count = await r.hlen(f"event:{event_id}:registrations")
    await r.aclose()

    if count == 0:
        return True

    print(f"Found {count} existing registrations in Redis for '{event_id}'.")
    print("  [w] Wipe existing data and reload")
    print("  [r] Run anyway (overwrite/merge)")
    print("  [x] Exit")
    choice = input("  > ").strip().lower()

    if choice == "w":
        r = aioredis.from_url(redis_url, decode_responses=True)
        keys = [f"event:{event_id}"]
        async for key in r.scan_iter(f"event:{event_id}:*"):
            keys.append(key)
        await r.delete(*keys)
        await r.aclose()
        print(f"  Wiped {len(keys)} keys")
        return True
    elif choice == "r":
        return True
    else:
        print("  Exiting.")
        return False


def main():
    export_path = sys.argv[1] if len(sys.argv) > 1 else "data/event_export.json"
    redis_url = sys.argv[2] if len(sys.argv) > 2 else settings.redis_url

    with open(export_path) as f:
        event_id = json.load(f)["event"]["id"]

    if not asyncio.run(_check_existing(redis_url, event_id)):
        return
    asyncio.run(load_data(export_path, redis_url=redis_url))


if __name__ == "__main__":
    main()
