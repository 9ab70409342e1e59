"""Shared test fixtures: fakeredis, test clients, seeding and sample images."""

from __future__ import annotations

import json
import re
from io import BytesIO
from unittest.mock import patch

import fakeredis.aioredis
import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

from lanyard.assets import AssetCache
from lanyard.config import settings

EVENT_ID = "spring-tasting"

BACKGROUND_URL = "https://cdn.test/hero.jpg"
LOGO_URL = "https://cdn.test/logo.png"


@pytest.fixture(autouse=True)
def _test_settings():
    """Ensure test-safe settings for every test."""
    original_env = settings.environment
    original_base = settings.connect_base_url
    settings.environment = "development"
    settings.connect_base_url = "https://winengrind.com"
    yield
    settings.environment = original_env
    settings.connect_base_url = original_base


def image_bytes(image_format: str = "PNG", size: tuple[int, int] = (40, 20), color: str = "red") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return image_bytes("JPEG", size=(120, 80), color="navy")


@pytest.fixture
def gif_bytes() -> bytes:
    return image_bytes("GIF")


@pytest.fixture
def fake_redis():
    """Fresh fakeredis instance per test."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest_asyncio.fixture
async def redis_store(fake_redis):
    """Route every store call to fakeredis."""
    with patch("lanyard.store.get_redis", return_value=fake_redis):
        yield fake_redis
    await fake_redis.flushall()


@pytest.fixture
def remote_images(png_bytes, jpeg_bytes) -> dict[str, tuple[int, bytes]]:
    """URL → (status, body) served by the mocked HTTP client. Tests may edit it."""
    return {
        BACKGROUND_URL: (200, jpeg_bytes),
        LOGO_URL: (200, png_bytes),
    }


@pytest.fixture
def asset_cache(tmp_path):
    return AssetCache(tmp_path)


def _mock_http_client(remote_images: dict[str, tuple[int, bytes]]) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        status, body = remote_images.get(str(request.url), (404, b"not found"))
        return httpx.Response(status, content=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest_asyncio.fixture
async def app_state(redis_store, asset_cache, remote_images):
    """The app with store, asset cache and HTTP client wired to test doubles.

    ASGITransport does not run the lifespan, so app.state is filled here.
    """
    from lanyard.main import app

    http_client = _mock_http_client(remote_images)
    app.state.asset_cache = asset_cache
    app.state.http_client = http_client
    yield app
    await http_client.aclose()


@pytest_asyncio.fixture
async def client(app_state):
    """FastAPI async test client backed by fakeredis."""
    async with AsyncClient(transport=ASGITransport(app=app_state), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def lenient_client(app_state):
    """Client that receives 500 responses instead of re-raised app exceptions."""
    transport = ASGITransport(app=app_state, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def make_registration(i: int, **overrides) -> dict:
    registration = {
        "name": f"test person {i}",
        "work": f"company {i}",
        "linkedinUsername": f"person-{i}",
        "email": f"person{i}@test.com",
        "status": "confirmed",
        "ticket_type": "General Admission",
        "qrCodeUrl": f"https://winengrind.com/connect?to=user-{i:03d}&event={EVENT_ID}",
    }
    registration.update(overrides)
    return registration


async def seed_event(
    fake_redis,
    event_id: str = EVENT_ID,
    registrations: dict[str, dict] | None = None,
    count: int = 5,
    event: dict | None = None,
) -> dict[str, dict]:
    """Seed an event and its registrations into fakeredis. Returns the registrations."""
    if event is None:
        event = {"name": "Spring Tasting", "date": "2026-04-18"}
    await fake_redis.set(f"event:{event_id}", json.dumps(event))

    if registrations is None:
        registrations = {f"user-{i:03d}": make_registration(i) for i in range(count)}
    for user_id, data in registrations.items():
        await fake_redis.hset(f"event:{event_id}:registrations", user_id, json.dumps(data))
    return registrations


def count_pdf_pages(pdf: bytes) -> int:
    return len(re.findall(rb"/Type /Page[^s]", pdf))
