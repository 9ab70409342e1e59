"""Tests for the web API: badge PDFs, QR cleanup and the preview page."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from lanyard.config import settings
from tests.conftest import (
    BACKGROUND_URL,
    EVENT_ID,
    LOGO_URL,
    count_pdf_pages,
    make_registration,
    seed_event,
)

pytestmark = pytest.mark.asyncio

ENHANCED = "/api/event-badges-enhanced"


def enhanced_params(**overrides) -> dict:
    params = {"eventId": EVENT_ID, "backgroundImageUrl": BACKGROUND_URL, "logoUrl": LOGO_URL}
    params.update(overrides)
    return {key: value for key, value in params.items() if value is not None}


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class TestHealth:
    async def test_health_check(self, client):
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


# ---------------------------------------------------------------------------
# Badges with local assets
# ---------------------------------------------------------------------------


class TestEventBadges:
    async def test_sheet_pdf(self, client, redis_store):
        await seed_event(redis_store, count=5)
        resp = await client.get(f"/api/events/{EVENT_ID}/badges.pdf")

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.headers["content-disposition"] == f'attachment; filename="badges-{EVENT_ID}.pdf"'
        assert resp.content.startswith(b"%PDF")
        assert count_pdf_pages(resp.content) == 2

    async def test_single_mode(self, client, redis_store):
        await seed_event(redis_store, count=3)
        resp = await client.get(f"/api/events/{EVENT_ID}/badges.pdf", params={"mode": "single"})
        assert resp.status_code == 200
        assert count_pdf_pages(resp.content) == 3

    async def test_only_confirmed_registrations(self, client, redis_store):
        await seed_event(
            redis_store,
            registrations={
                "u1": make_registration(1),
                "u2": make_registration(2, status="pending"),
                "u3": make_registration(3, status="waitlisted"),
            },
        )
        resp = await client.get(f"/api/events/{EVENT_ID}/badges.pdf", params={"mode": "single"})
        assert count_pdf_pages(resp.content) == 1

    async def test_local_assets_used(self, client, redis_store, asset_cache, png_bytes, jpeg_bytes):
        (asset_cache.assets_dir / "logo.png").write_bytes(png_bytes)
        (asset_cache.assets_dir / "event-hero.jpg").write_bytes(jpeg_bytes)
        await seed_event(redis_store, count=1)

        resp = await client.get(f"/api/events/{EVENT_ID}/badges.pdf")
        assert resp.status_code == 200
        assert b"/XObject" in resp.content

    async def test_unknown_event(self, client, redis_store):
        resp = await client.get("/api/events/nope/badges.pdf")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Event not found: nope"}

    async def test_no_confirmed_registrations(self, client, redis_store):
        await seed_event(redis_store, registrations={"u1": make_registration(1, status="pending")})
        resp = await client.get(f"/api/events/{EVENT_ID}/badges.pdf")
        assert resp.status_code == 404
        assert resp.json()["success"] is False

    async def test_bad_mode(self, client, redis_store):
        resp = await client.get(f"/api/events/{EVENT_ID}/badges.pdf", params={"mode": "poster"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert "mode" in resp.json()["error"]

    async def test_bad_header_color(self, client, redis_store):
        resp = await client.get(f"/api/events/{EVENT_ID}/badges.pdf", params={"headerColor": "red"})
        assert resp.status_code == 400

    async def test_corrupt_local_logo(self, client, redis_store, asset_cache, gif_bytes):
        (asset_cache.assets_dir / "logo.png").write_bytes(gif_bytes)
        await seed_event(redis_store, count=1)

        resp = await client.get(f"/api/events/{EVENT_ID}/badges.pdf")
        assert resp.status_code == 400
        assert "logo" in resp.json()["error"]


# ---------------------------------------------------------------------------
# Badges with caller-supplied theme
# ---------------------------------------------------------------------------


class TestEnhancedBadges:
    async def test_themed_pdf(self, client, redis_store):
        await seed_event(redis_store, count=5)
        resp = await client.get(ENHANCED, params=enhanced_params(overlayOpacity=40, headerColor="#0E7490"))

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.headers["content-disposition"] == f'attachment; filename="badges-{EVENT_ID}.pdf"'
        assert count_pdf_pages(resp.content) == 2

    async def test_includes_unconfirmed(self, client, redis_store):
        await seed_event(
            redis_store,
            registrations={"u1": make_registration(1), "u2": make_registration(2, status="pending")},
        )
        resp = await client.get(ENHANCED, params=enhanced_params(mode="single"))
        assert count_pdf_pages(resp.content) == 2

    @pytest.mark.parametrize("missing", ["eventId", "backgroundImageUrl", "logoUrl"])
    async def test_missing_params(self, client, redis_store, missing):
        resp = await client.get(ENHANCED, params=enhanced_params(**{missing: None}))
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert missing in body["error"]

    async def test_opacity_out_of_range(self, client, redis_store):
        await seed_event(redis_store, count=1)
        resp = await client.get(ENHANCED, params=enhanced_params(overlayOpacity=150))
        assert resp.status_code == 400

    async def test_unknown_event(self, client, redis_store):
        resp = await client.get(ENHANCED, params=enhanced_params(eventId="nope"))
        assert resp.status_code == 404

    async def test_not_found_beats_asset_failure(self, client, redis_store, remote_images):
        remote_images.pop(LOGO_URL)
        resp = await client.get(ENHANCED, params=enhanced_params(eventId="nope"))
        assert resp.status_code == 404

    async def test_no_registrations(self, client, redis_store):
        await seed_event(redis_store, registrations={})
        resp = await client.get(ENHANCED, params=enhanced_params())
        assert resp.status_code == 404
        assert "No registrations" in resp.json()["error"]

    async def test_logo_fetch_failure(self, client, redis_store, remote_images):
        await seed_event(redis_store, count=1)
        remote_images[LOGO_URL] = (500, b"")
        resp = await client.get(ENHANCED, params=enhanced_params())
        assert resp.status_code == 400
        assert resp.json()["error"] == f"Could not fetch logo from {LOGO_URL}: HTTP 500"

    async def test_unsupported_background(self, client, redis_store, remote_images, gif_bytes):
        await seed_event(redis_store, count=1)
        remote_images[BACKGROUND_URL] = (200, gif_bytes)
        resp = await client.get(ENHANCED, params=enhanced_params())
        assert resp.status_code == 400
        assert "background image" in resp.json()["error"]
        assert "PNG or JPEG" in resp.json()["error"]


# ---------------------------------------------------------------------------
# Unexpected errors
# ---------------------------------------------------------------------------


class TestServerErrors:
    async def test_render_failure_is_500_with_details(self, lenient_client, redis_store):
        await seed_event(redis_store, count=1)
        with patch("lanyard.routes.badges_api.render", side_effect=RuntimeError("canvas exploded")):
            resp = await lenient_client.get(f"/api/events/{EVENT_ID}/badges.pdf")

        assert resp.status_code == 500
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "Failed to generate badges PDF"
        assert body["details"] == "canvas exploded"
        assert body["trace"]

    async def test_production_hides_details(self, lenient_client, redis_store):
        settings.environment = "production"
        await seed_event(redis_store, count=1)
        with patch("lanyard.routes.badges_api.render", side_effect=RuntimeError("canvas exploded")):
            resp = await lenient_client.get(f"/api/events/{EVENT_ID}/badges.pdf")

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "Failed to generate badges PDF"}

    async def test_non_badge_route_failure_message(self, lenient_client, redis_store):
        with patch("lanyard.routes.admin_api.cleanup_event", side_effect=RuntimeError("store gone")):
            resp = await lenient_client.post("/api/admin/cleanup-qr", json={"eventId": EVENT_ID})

        assert resp.status_code == 500
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "Internal server error"
        assert body["details"] == "store gone"

    async def test_enhanced_failure_message(self, lenient_client, redis_store):
        await seed_event(redis_store, count=1)
        with patch("lanyard.routes.badges_api.render", side_effect=RuntimeError("canvas exploded")):
            resp = await lenient_client.get(ENHANCED, params=enhanced_params())

        assert resp.status_code == 500
        assert resp.json()["error"] == "Failed to generate badges PDF"


# ---------------------------------------------------------------------------
# QR cleanup
# ---------------------------------------------------------------------------


class TestCleanupQr:
    async def test_dry_run_by_default(self, client, redis_store):
        await seed_event(
            redis_store,
            registrations={
                "user-001": make_registration(1),
                "u-key": make_registration(2, qrCodeUrl="https://x.test/?k=sk-1"),
            },
        )
        resp = await client.post("/api/admin/cleanup-qr", json={"eventId": EVENT_ID})

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["dryRun"] is True
        assert data["summary"] == {"total": 2, "corrupted": 1, "cleaned": 0, "alreadyCorrect": 1}
        corrupted = data["details"]["corrupted"][0]
        assert corrupted["userId"] == "u-key"
        assert corrupted["currentQrUrl"] == "https://x.test/?k=sk-1"
        assert "alreadyCorrect" in data["details"]

        stored = json.loads(await redis_store.hget(f"event:{EVENT_ID}:registrations", "u-key"))
        assert "sk-" in stored["qrCodeUrl"]

    async def test_apply(self, client, redis_store):
        await seed_event(redis_store, registrations={"u-key": make_registration(2, qrCodeUrl="")})
        resp = await client.post("/api/admin/cleanup-qr", json={"eventId": EVENT_ID, "dryRun": False})

        assert resp.json()["summary"]["cleaned"] == 1
        stored = json.loads(await redis_store.hget(f"event:{EVENT_ID}:registrations", "u-key"))
        assert stored["qrCodeUrl"] == f"https://winengrind.com/connect?to=u-key&event={EVENT_ID}"
        assert stored["checkInCode"] == f"{EVENT_ID}-u-key"

    async def test_non_string_fields(self, client, redis_store):
        await seed_event(redis_store, registrations={"u1": {"name": 42, "qrCodeUrl": 12345}})
        resp = await client.post("/api/admin/cleanup-qr", json={"eventId": EVENT_ID})

        assert resp.status_code == 200
        corrupted = resp.json()["details"]["corrupted"][0]
        assert corrupted["userName"] == "42"
        assert corrupted["currentQrUrl"] == "12345"

    async def test_missing_event_id(self, client, redis_store):
        resp = await client.post("/api/admin/cleanup-qr", json={})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Missing eventId parameter"}


# ---------------------------------------------------------------------------
# Preview page
# ---------------------------------------------------------------------------


class TestPreviewPage:
    async def test_preview(self, client, redis_store):
        await seed_event(redis_store, count=2)
        resp = await client.get(f"/admin/events/{EVENT_ID}/badges/user-001/preview")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "Test Person 1" in resp.text
        assert "Spring Tasting" in resp.text
        assert 'class="badge"' in resp.text
        assert "90×133.5mm" in resp.text

    async def test_preview_with_theme(self, client, redis_store):
        await seed_event(redis_store, count=1)
        resp = await client.get(
            f"/admin/events/{EVENT_ID}/badges/user-000/preview",
            params={"logoUrl": LOGO_URL, "headerColor": "#0E7490"},
        )
        assert resp.status_code == 200
        assert LOGO_URL in resp.text
        assert "#0E7490" in resp.text

    async def test_unknown_attendee(self, client, redis_store):
        await seed_event(redis_store, count=1)
        resp = await client.get(f"/admin/events/{EVENT_ID}/badges/ghost/preview")
        assert resp.status_code == 404
