"""Generate a fake event export (event + registrations) for development testing."""

from __future__ import annotations

import json
import random
import uuid
from pathlib import Path

FIRST_NAMES = [
    "alice", "Ben", "CARLOS", "Dana", "emily", "Frank", "Grace", "Henry",
    "Iris", "Jack", "Kim", "Leo", "Maya", "Noah", "Olivia", "Pablo",
    "Quinn", "Rosa", "Sam", "Tara", "Uma", "Victor", "Wendy", "Xavier",
    "Yuki", "Zara", "Maximiliana-Josephine", "Bartholomew",
]

LAST_NAMES = [
    "Anderson", "Brooks", "chen", "Diaz", "Evans", "Fischer", "Garcia",
    "Hughes", "Ito", "Johnson", "Kowalski", "Lopez", "Martin", "Nguyen",
    "O'Brien", "Patel", "Rossi", "Schmidt", "Tanaka", "Vargas",
    "Featherstonehaugh-Worthington",
]

COMPANIES = [
    "acme corp", "Vineyard Ventures", "GRIND LABS", "Cellar & Co", "",
    "Napa Capital", "tannin analytics", "Barrel Works", "",
]

TICKET_TYPES = [
    "General Admission", "General Admission", "General Admission",
    "Speaker Pass", "Sponsor Booth", "VIP Table", "Staff", "",
]

TAGS = [[], [], [], ["vip"], ["organizer"], ["sponsor", "early-bird"], ["volunteer-staff"]]

STATUSES = ["confirmed", "confirmed", "confirmed", "pending", "waitlisted"]

CONNECT_BASE = "https://winengrind.com"


def _qr_code_url(user_id: str, event_id: str) -> str:
    """Mostly canonical URLs, with the corruption patterns seen in real data mixed in."""
    roll = random.random()
    if roll < 0.7:
        return f"{CONNECT_BASE}/connect?to={user_id}&event={event_id}"
    if roll < 0.8:
        return ""
    if roll < 0.9:
        return f"https://api.example.com/qr?key=sk-{uuid.uuid4().hex[:16]}"
    return f"{CONNECT_BASE}/connect?user={user_id}"


def generate_registrations(event_id: str, count: int = 30) -> dict[str, dict]:
    registrations = {}

    for i in range(count):
        first = FIRST_NAMES[i % len(FIRST_NAMES)]
        last = random.choice(LAST_NAMES)
        user_id = uuid.uuid4().hex[:20]
        handle = f"{first.lower()}-{last.lower()}"[:30]

        registrations[user_id] = {
            "name": f"{first} {last}",
            "work": random.choice(COMPANIES),
            "linkedinUsername": random.choice([
                handle,
                f"https://www.linkedin.com/in/{handle}",
                f"linkedin.com/in/{handle}",
                "",
            ]),
            "email": f"{first.lower()}.{last.lower()}@test.com",
            "status": random.choice(STATUSES),
            "ticket_type": random.choice(TICKET_TYPES),
            "tags": random.choice(TAGS),
            "qrCodeUrl": _qr_code_url(user_id, event_id),
        }

    # One explicit role so the override path shows up in previews
    first_id = next(iter(registrations))
    registrations[first_id]["role"] = "organizer"
    return registrations


def seed(
    event_id: str = "spring-tasting-2026",
    registration_count: int = 30,
    output_dir: str = "data",
) -> None:
    """Write data/event_export.json."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    print(f"Generating {registration_count} fake registrations for {event_id}...")
    export = {
        "event": {
            "id": event_id,
            "name": "Wine & Grind Spring Tasting",
            "date": "2026-04-18",
            "location": "Napa, CA",
        },
        "registrations": generate_registrations(event_id, registration_count),
    }
    with open(out / "event_export.json", "w") as f:
        json.dump(export, f, indent=2)
    print(f"  → {out / 'event_export.json'}")


if __name__ == "__main__":
    seed()
