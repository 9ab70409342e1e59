"""Draw one badge onto a reportlab canvas.

The painter works in badge-local millimeters with a top-left origin, taken
from ``lanyard.layout``; ``BadgePainter`` converts each box to PDF points and
flips it against the page height at the moment it is drawn.
"""

from __future__ import annotations

import logging

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from lanyard import layout as geo
from lanyard.assets import DecodedImage, RenderTheme
from lanyard.layout import (
    BACKGROUND_PHOTO_OPACITY,
    BRAND_COLORS,
    TYPOGRAPHY,
    Box,
    LayoutSpec,
    Position,
    mm_to_units,
    units_to_mm,
)
from lanyard.models import ProjectedAttendee
from lanyard.projection import role_chip_label
from lanyard.rendering.qr import make_qr_image

logger = logging.getLogger(__name__)

QR_PLACEHOLDER_TEXT = "QR unavailable"
LOGO_PLACEHOLDER_TEXT = "W&G"


class BadgePainter:
    """Draws badges onto one page of a canvas."""

    def __init__(self, canvas: Canvas, page_height_mm: float, spec: LayoutSpec, theme: RenderTheme):
        self.canvas = canvas
        self.page_height_mm = page_height_mm
        self.spec = spec
        self.theme = theme

    # --- coordinate helpers ---

    def _rect(self, box: Box, origin: Position) -> tuple[float, float, float, float]:
        placed = box.offset(origin)
        return (
            mm_to_units(placed.x),
            mm_to_units(geo.to_pdf_y(placed.y, placed.height, self.page_height_mm)),
            mm_to_units(placed.width),
            mm_to_units(placed.height),
        )

    def _point(self, x_mm: float, y_mm: float, origin: Position) -> tuple[float, float]:
        return (
            mm_to_units(origin.x + x_mm),
            mm_to_units(self.page_height_mm - (origin.y + y_mm)),
        )

    # --- layers, back to front ---

    def draw(self, attendee: ProjectedAttendee, origin: Position, *, with_crop_marks: bool) -> None:
        self._draw_background(origin)
        self._draw_header(origin)
        self._draw_text(attendee, origin)
        self._draw_role_chip(attendee, origin)
        self._draw_qr(attendee, origin)
        if with_crop_marks:
            self._draw_crop_marks(origin)

    def _draw_background(self, origin: Position) -> None:
        c = self.canvas
        badge = geo.badge_box(self.spec)
        x, y, w, h = self._rect(badge, origin)

        c.setFillColor(colors.HexColor(BRAND_COLORS["light"]))
        c.rect(x, y, w, h, stroke=0, fill=1)

        if self.theme.background is not None:
            self._draw_cover_image(self.theme.background, (x, y, w, h))

        c.saveState()
        c.setFillColor(colors.black)
        c.setFillAlpha(self.theme.overlay_opacity / 100)
        c.rect(x, y, w, h, stroke=0, fill=1)
        c.restoreState()

    def _draw_cover_image(self, image: DecodedImage, rect: tuple[float, float, float, float]) -> None:
        """Scale to cover the badge, centered, clipped to the badge box."""
        c = self.canvas
        x, y, w, h = rect
        scale = max(w / image.width, h / image.height)
        draw_w, draw_h = image.width * scale, image.height * scale

        c.saveState()
        clip = c.beginPath()
        clip.rect(x, y, w, h)
        c.clipPath(clip, stroke=0, fill=0)
        c.setFillAlpha(BACKGROUND_PHOTO_OPACITY)
        c.drawImage(
            image.reader,
            x + (w - draw_w) / 2,
            y + (h - draw_h) / 2,
            width=draw_w,
            height=draw_h,
            mask="auto",
        )
        c.restoreState()

    def _draw_header(self, origin: Position) -> None:
        c = self.canvas
        c.setFillColor(colors.HexColor(self.theme.header_color))
        c.rect(*self._rect(geo.header_box(self.spec), origin), stroke=0, fill=1)

        logo_x, logo_y, logo_w, logo_h = self._rect(geo.logo_box(self.spec), origin)
        if self.theme.logo is not None:
            c.drawImage(
                self.theme.logo.reader,
                logo_x,
                logo_y,
                width=logo_w,
                height=logo_h,
                preserveAspectRatio=True,
                anchor="c",
                mask="auto",
            )
        else:
            c.saveState()
            c.setFillColor(colors.white)
            c.setFillAlpha(0.2)
            c.roundRect(logo_x, logo_y, logo_w, logo_h, mm_to_units(1), stroke=0, fill=1)
            c.restoreState()
            c.setFillColor(colors.white)
            c.setFont(TYPOGRAPHY.font_bold, TYPOGRAPHY.placeholder)
            c.drawCentredString(
                logo_x + logo_w / 2, logo_y + logo_h / 2 - TYPOGRAPHY.placeholder * 0.35, LOGO_PLACEHOLDER_TEXT
            )

        mark = geo.wordmark_position(self.spec)
        baseline = mark.y + units_to_mm(TYPOGRAPHY.header) * geo.BASELINE_RATIO
        c.setFillColor(colors.white)
        c.setFont(TYPOGRAPHY.font_bold, TYPOGRAPHY.header)
        c.drawString(*self._point(mark.x, baseline, origin), self.theme.wordmark)

    def _draw_text(self, attendee: ProjectedAttendee, origin: Position) -> None:
        c = self.canvas
        left = geo.content_box(self.spec).x
        name_size = geo.fit_name(attendee.display_name, self.spec)
        block = geo.text_block(
            name_size,
            has_company=attendee.company is not None,
            has_linkedin=attendee.linkedin_handle is not None,
            spec=self.spec,
        )

        c.setFillColor(colors.HexColor(BRAND_COLORS["charcoal"]))
        c.setFont(TYPOGRAPHY.font_bold, block.name.size)
        c.drawString(*self._point(left, block.name.baseline, origin), attendee.display_name)

        if block.company is not None:
            c.setFont(TYPOGRAPHY.font, block.company.size)
            c.drawString(*self._point(left, block.company.baseline, origin), attendee.company)

        if block.linkedin is not None:
            c.setFillColor(colors.HexColor(BRAND_COLORS["muted_text"]))
            c.setFont(TYPOGRAPHY.font, block.linkedin.size)
            c.drawString(*self._point(left, block.linkedin.baseline, origin), attendee.linkedin_handle)

    def _draw_role_chip(self, attendee: ProjectedAttendee, origin: Position) -> None:
        c = self.canvas
        label = role_chip_label(attendee.role)
        font_size = geo.role_chip_font_size(attendee.display_name)
        chip = geo.role_chip_box(geo.role_chip_width_mm(label, font_size, self.spec), self.spec)
        x, y, w, h = self._rect(chip, origin)

        c.setFillColor(colors.HexColor(self.theme.header_color))
        c.roundRect(x, y, w, h, mm_to_units(self.spec.role_chip.radius_mm), stroke=0, fill=1)
        c.setFillColor(colors.white)
        c.setFont(TYPOGRAPHY.font_bold, font_size)
        c.drawCentredString(x + w / 2, y + h / 2 - font_size * 0.35, label)

    def _draw_qr(self, attendee: ProjectedAttendee, origin: Position) -> None:
        c = self.canvas
        c.setFillColor(colors.white)
        c.rect(*self._rect(geo.qr_tile_box(self.spec), origin), stroke=0, fill=1)

        code_x, code_y, code_w, code_h = self._rect(geo.qr_code_box(self.spec), origin)
        try:
            image = make_qr_image(attendee.qr_payload, self.spec.qr.quiet_zone_modules)
        except Exception:
            logger.warning("QR generation failed for user %s, drawing placeholder", attendee.user_id, exc_info=True)
            c.setStrokeColor(colors.HexColor(BRAND_COLORS["muted_text"]))
            c.setLineWidth(0.5)
            c.setDash(2, 2)
            c.rect(code_x, code_y, code_w, code_h, stroke=1, fill=0)
            c.setDash()
            c.setFillColor(colors.HexColor(BRAND_COLORS["muted_text"]))
            c.setFont(TYPOGRAPHY.font, TYPOGRAPHY.placeholder)
            c.drawCentredString(code_x + code_w / 2, code_y + code_h / 2, QR_PLACEHOLDER_TEXT)
            return

        c.drawImage(ImageReader(image), code_x, code_y, width=code_w, height=code_h)

    def _draw_crop_marks(self, origin: Position) -> None:
        c = self.canvas
        c.setStrokeColor(colors.black)
        c.setLineWidth(mm_to_units(self.spec.crop_marks.thickness_mm))
        # Crop marks are computed in page coordinates already
        page = Position(0, 0)
        for mark in geo.crop_marks(origin, self.spec):
            c.line(*self._point(mark.x1, mark.y1, page), *self._point(mark.x2, mark.y2, page))
