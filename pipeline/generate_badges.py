"""Generate printable badge PDFs from an event export, without the web service."""

from __future__ import annotations

import json
import sys

from lanyard.assets import AssetCache, RenderTheme, decode_optional
from lanyard.config import settings
from lanyard.models import EventRecord, Registration, RenderMode, Theme
from lanyard.projection import project
from lanyard.rendering.pdf import render


def generate_badges(
    export_path: str = "data/event_export.json",
    output_path: str | None = None,
    mode: RenderMode = RenderMode.SHEET,
    confirmed_only: bool = True,
) -> str:
    """Render badges for the export's registrations with the local brand assets."""
    with open(export_path) as f:
        export = json.load(f)

    event = EventRecord.model_validate(export["event"])
    registrations = [
        Registration.model_validate(data).model_copy(update={"user_id": user_id})
        for user_id, data in sorted(export.get("registrations", {}).items())
    ]
    if confirmed_only:
        registrations = [reg for reg in registrations if reg.status == "confirmed"]
    if not registrations:
        print(f"No registrations to render for {event.id}")
        return ""

    attendees = [project(reg, event.id) for reg in registrations]

    cache = AssetCache(settings.assets_dir)
    theme = RenderTheme.from_theme(
        Theme(overlay_opacity=settings.default_overlay_opacity, header_color=settings.default_header_color),
        wordmark=settings.brand_wordmark,
        background=decode_optional(cache.background(), "background image"),
        logo=decode_optional(cache.logo(), "logo"),
    )

    pdf = render(mode, event, attendees, theme)
    output_path = output_path or f"badges-{event.id}.pdf"
    with open(output_path, "wb") as f:
        f.write(pdf)

    print(f"Generated {len(attendees)} badges ({mode}) → {output_path}")
    return output_path


if __name__ == "__main__":
    export_path = sys.argv[1] if len(sys.argv) > 1 else "data/event_export.json"
    mode = RenderMode(sys.argv[2]) if len(sys.argv) > 2 else RenderMode.SHEET

    generate_badges(export_path, mode=mode)
