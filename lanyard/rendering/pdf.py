"""Badge PDF renderers: 4-up A4 sheets with crop marks, and one badge per page."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from io import BytesIO

from reportlab.pdfgen.canvas import Canvas

from lanyard.assets import RenderTheme
from lanyard.layout import LayoutSpec, Position, get_layout, mm_to_units
from lanyard.models import BadgePage, EventRecord, Placement, ProjectedAttendee, RenderMode
from lanyard.rendering.badge import BadgePainter

logger = logging.getLogger(__name__)


def paginate(
    attendees: Sequence[ProjectedAttendee],
    mode: RenderMode,
    spec: LayoutSpec | None = None,
) -> list[BadgePage]:
    """Assign attendees to pages and slots, preserving input order."""
    spec = spec or get_layout()

    if mode == RenderMode.SINGLE:
        return [
            BadgePage(
                index=i,
                width_mm=spec.badge.width_mm,
                height_mm=spec.badge.height_mm,
                placements=[Placement(position=Position(0, 0), attendee=attendee)],
                crop_marks=False,
            )
            for i, attendee in enumerate(attendees)
        ]

    per_page = spec.slots_per_page
    pages = []
    for start in range(0, len(attendees), per_page):
        group = attendees[start : start + per_page]
        pages.append(
            BadgePage(
                index=start // per_page,
                width_mm=spec.page.width_mm,
                height_mm=spec.page.height_mm,
                placements=[
                    Placement(position=position, attendee=attendee)
                    for position, attendee in zip(spec.positions, group)
                ],
                crop_marks=True,
            )
        )
    return pages


def render_pages(
    pages: Sequence[BadgePage],
    theme: RenderTheme,
    *,
    event: EventRecord | None = None,
    spec: LayoutSpec | None = None,
) -> bytes:
    spec = spec or get_layout()
    buffer = BytesIO()
    c = Canvas(buffer)
    if event is not None:
        c.setTitle(f"{event.display_name} badges")
    c.setCreator("lanyard")

    for page in pages:
        c.setPageSize((mm_to_units(page.width_mm), mm_to_units(page.height_mm)))
        painter = BadgePainter(c, page.height_mm, spec, theme)
        for placement in page.placements:
            painter.draw(placement.attendee, placement.position, with_crop_marks=page.crop_marks)
        c.showPage()

    c.save()
    return buffer.getvalue()


def render_sheet(
    event: EventRecord | None,
    attendees: Sequence[ProjectedAttendee],
    theme: RenderTheme,
    *,
    spec: LayoutSpec | None = None,
) -> bytes:
    """Four badges per A4 page at the grid positions, with crop marks."""
    pages = paginate(attendees, RenderMode.SHEET, spec)
    logger.info("Rendering %d attendees on %d sheet pages", len(attendees), len(pages))
    return render_pages(pages, theme, event=event, spec=spec)


def render_single(
    event: EventRecord | None,
    attendees: Sequence[ProjectedAttendee],
    theme: RenderTheme,
    *,
    spec: LayoutSpec | None = None,
) -> bytes:
    """One badge per page; the page is exactly the badge size."""
    pages = paginate(attendees, RenderMode.SINGLE, spec)
    logger.info("Rendering %d single-badge pages", len(pages))
    return render_pages(pages, theme, event=event, spec=spec)


def render(
    mode: RenderMode,
    event: EventRecord | None,
    attendees: Sequence[ProjectedAttendee],
    theme: RenderTheme,
    *,
    spec: LayoutSpec | None = None,
) -> bytes:
    renderer = render_single if mode == RenderMode.SINGLE else render_sheet
    return renderer(event, attendees, theme, spec=spec)
