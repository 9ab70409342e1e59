"""HTML view routes: badge preview."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from lanyard.config import settings
from lanyard.errors import NotFoundError
from lanyard.layout import get_layout
from lanyard.models import Theme
from lanyard.preview import TEMPLATES_DIR, render_preview
from lanyard.projection import project
from lanyard.routes.badges_api import HEX_COLOR
from lanyard.store import store

router = APIRouter()

templates = Jinja2Templates(directory=TEMPLATES_DIR)


@router.get("/admin/events/{event_id}/badges/{user_id}/preview", response_class=HTMLResponse)
async def badge_preview(
    request: Request,
    event_id: str,
    user_id: str,
    background_image_url: str | None = Query(None, alias="backgroundImageUrl"),
    logo_url: str | None = Query(None, alias="logoUrl"),
    overlay_opacity: int = Query(settings.default_overlay_opacity, alias="overlayOpacity", ge=0, le=100),
    header_color: str = Query(settings.default_header_color, alias="headerColor", pattern=HEX_COLOR),
):
    event = await store.get_event(event_id)
    if event is None:
        raise NotFoundError(f"Event not found: {event_id}")
    registration = await store.get_registration(event_id, user_id)
    if registration is None:
        raise NotFoundError(f"Registration not found: {user_id}")

    spec = get_layout()
    theme = Theme(
        background_image_url=background_image_url,
        logo_url=logo_url,
        overlay_opacity=overlay_opacity,
        header_color=header_color,
    )
    attendee = project(registration, event_id)

    response = templates.TemplateResponse(
        request,
        "preview_page.html",
        {
            "event": event,
            "attendee": attendee,
            "badge": render_preview(attendee, theme, wordmark=settings.brand_wordmark, spec=spec),
            "size_label": f"{spec.badge.width_mm:g}×{spec.badge.height_mm:g}mm",
            "layout_version": spec.version,
        },
    )
    response.headers["Cache-Control"] = "no-store"
    return response
