"""Badge PDF routes: local-asset badges and caller-themed badges."""

from __future__ import annotations

import asyncio
import logging

import httpx
from fastapi import APIRouter, Query, Request
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from lanyard.assets import AssetCache, RenderTheme, decode_image, decode_optional, fetch_image
from lanyard.config import settings
from lanyard.errors import InvalidRequestError, NotFoundError
from lanyard.models import EventRecord, Registration, RenderMode, Theme
from lanyard.projection import project
from lanyard.rendering.pdf import render
from lanyard.store import store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


def _asset_cache(request: Request) -> AssetCache:
    return request.app.state.asset_cache


def _http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def _pdf_response(pdf: bytes, event_id: str) -> Response:
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="badges-{event_id}.pdf"'},
    )


def _require_found(event_id: str, event: EventRecord | None, registrations: list[Registration]) -> EventRecord:
    if event is None:
        raise NotFoundError(f"Event not found: {event_id}")
    if not registrations:
        raise NotFoundError(f"No registrations found for event: {event_id}")
    return event


async def _render_pdf(
    event: EventRecord,
    registrations: list[Registration],
    theme: RenderTheme,
    mode: RenderMode,
) -> bytes:
    attendees = [project(reg, event.id) for reg in registrations]
    logger.info("Generating %s badges for %d attendees of event %s", mode, len(attendees), event.id)
    return await run_in_threadpool(render, mode, event, attendees, theme)


# --- Routes ---


@router.get("/events/{event_id}/badges.pdf")
async def event_badges(
    request: Request,
    event_id: str,
    mode: RenderMode = RenderMode.SHEET,
    overlay_opacity: int = Query(settings.default_overlay_opacity, alias="overlayOpacity", ge=0, le=100),
    header_color: str = Query(settings.default_header_color, alias="headerColor", pattern=HEX_COLOR),
):
    """Badges for confirmed registrations, themed with the local brand assets."""
    event, registrations = await asyncio.gather(
        store.get_event(event_id),
        store.get_registrations(event_id, confirmed_only=True),
    )
    event = _require_found(event_id, event, registrations)

    cache = _asset_cache(request)
    theme = RenderTheme.from_theme(
        Theme(overlay_opacity=overlay_opacity, header_color=header_color),
        wordmark=settings.brand_wordmark,
        background=decode_optional(cache.background(), "background image"),
        logo=decode_optional(cache.logo(), "logo"),
    )

    pdf = await _render_pdf(event, registrations, theme, mode)
    return _pdf_response(pdf, event_id)


@router.get("/event-badges-enhanced")
async def event_badges_enhanced(
    request: Request,
    event_id: str | None = Query(None, alias="eventId"),
    background_image_url: str | None = Query(None, alias="backgroundImageUrl"),
    logo_url: str | None = Query(None, alias="logoUrl"),
    overlay_opacity: int = Query(settings.default_overlay_opacity, alias="overlayOpacity", ge=0, le=100),
    header_color: str = Query(settings.default_header_color, alias="headerColor", pattern=HEX_COLOR),
    mode: RenderMode = RenderMode.SHEET,
):
    """Badges for every registration, themed with caller-supplied images."""
    missing = [
        name
        for name, value in (
            ("eventId", event_id),
            ("backgroundImageUrl", background_image_url),
            ("logoUrl", logo_url),
        )
        if not value
    ]
    if missing:
        raise InvalidRequestError(f"Missing required parameters: {', '.join(missing)}")

    client = _http_client(request)
    event, registrations, background_bytes, logo_bytes = await asyncio.gather(
        store.get_event(event_id),
        store.get_registrations(event_id),
        fetch_image(client, background_image_url, "background image"),
        fetch_image(client, logo_url, "logo"),
        return_exceptions=True,
    )

    # Store failures first, then not-found, then asset failures
    for result in (event, registrations):
        if isinstance(result, BaseException):
            raise result
    event = _require_found(event_id, event, registrations)
    for result in (background_bytes, logo_bytes):
        if isinstance(result, BaseException):
            raise result

    theme = RenderTheme.from_theme(
        Theme(
            background_image_url=background_image_url,
            logo_url=logo_url,
            overlay_opacity=overlay_opacity,
            header_color=header_color,
        ),
        wordmark=settings.brand_wordmark,
        background=decode_image(background_bytes, "background image"),
        logo=decode_image(logo_bytes, "logo"),
    )

    pdf = await _render_pdf(event, registrations, theme, mode)
    return _pdf_response(pdf, event_id)
