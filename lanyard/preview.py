"""HTML preview of a single badge, geometrically identical to the PDF.

Every offset, size and font size comes from the same ``lanyard.layout``
helpers the PDF painter uses, multiplied by ``MM_TO_UNITS`` (one CSS px per
PDF point). Nothing here defines a layout number of its own.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from lanyard import layout as geo
from lanyard.layout import (
    BACKGROUND_PHOTO_OPACITY,
    BRAND_COLORS,
    TYPOGRAPHY,
    Box,
    LayoutSpec,
    get_layout,
    mm_to_units,
)
from lanyard.models import ProjectedAttendee, Theme
from lanyard.projection import role_chip_label
from lanyard.rendering.badge import LOGO_PLACEHOLDER_TEXT, QR_PLACEHOLDER_TEXT
from lanyard.rendering.qr import make_qr_data_uri

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(enabled_extensions=("html",)),
)


def _px(mm: float) -> float:
    return round(mm_to_units(mm), 3)


def _box_px(box: Box) -> dict[str, float]:
    return {"left": _px(box.x), "top": _px(box.y), "width": _px(box.width), "height": _px(box.height)}


def preview_geometry(attendee: ProjectedAttendee, spec: LayoutSpec | None = None) -> dict[str, Any]:
    """Pixel geometry of one badge: layout millimeters times the shared ratio."""
    spec = spec or get_layout()
    name_size = geo.fit_name(attendee.display_name, spec)
    block = geo.text_block(
        name_size,
        has_company=attendee.company is not None,
        has_linkedin=attendee.linkedin_handle is not None,
        spec=spec,
    )
    label = role_chip_label(attendee.role)
    chip_font = geo.role_chip_font_size(attendee.display_name)
    chip = geo.role_chip_box(geo.role_chip_width_mm(label, chip_font, spec), spec)
    content = geo.content_box(spec)
    wordmark = geo.wordmark_position(spec)

    def line(text_line: geo.TextLine | None) -> dict[str, float] | None:
        if text_line is None:
            return None
        return {"left": _px(content.x), "top": _px(text_line.top), "font_size": text_line.size}

    return {
        "layout_version": spec.version,
        "badge": _box_px(geo.badge_box(spec)),
        "header": _box_px(geo.header_box(spec)),
        "logo": _box_px(geo.logo_box(spec)),
        "wordmark": {"left": _px(wordmark.x), "top": _px(wordmark.y), "font_size": TYPOGRAPHY.header},
        "name": line(block.name),
        "company": line(block.company),
        "linkedin": line(block.linkedin),
        "role_chip": {
            **_box_px(chip),
            "radius": _px(spec.role_chip.radius_mm),
            "font_size": chip_font,
        },
        "qr_tile": _box_px(geo.qr_tile_box(spec)),
        "qr_code": _box_px(geo.qr_code_box(spec)),
    }


def render_preview(
    attendee: ProjectedAttendee,
    theme: Theme | None = None,
    *,
    wordmark: str,
    spec: LayoutSpec | None = None,
) -> Markup:
    """HTML fragment for one badge."""
    spec = spec or get_layout()
    theme = theme or Theme()
    geometry = preview_geometry(attendee, spec)

    try:
        qr_src = make_qr_data_uri(attendee.qr_payload, spec.qr.quiet_zone_modules)
    except Exception:
        logger.warning("Preview QR generation failed for user %s", attendee.user_id, exc_info=True)
        qr_src = None

    template = _env.get_template("badge_preview.html")
    return Markup(
        template.render(
            attendee=attendee,
            theme=theme,
            g=geometry,
            role_label=role_chip_label(attendee.role),
            wordmark=wordmark,
            logo_placeholder=LOGO_PLACEHOLDER_TEXT,
            qr_src=qr_src,
            colors=BRAND_COLORS,
            fonts=TYPOGRAPHY,
            background_opacity=BACKGROUND_PHOTO_OPACITY,
            qr_placeholder=QR_PLACEHOLDER_TEXT,
        )
    )
