"""Badge layout model: millimeter geometry shared by the PDF and HTML renderers.

All geometry here is expressed in millimeters with a top-left origin, the way a
designer measures a printed sheet. The PDF renderer flips to reportlab's
bottom-left origin at draw time (see ``to_pdf_y``); the HTML preview uses the
values directly as CSS offsets. Neither renderer defines layout numbers of its
own.
"""

from __future__ import annotations

import math
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, model_validator

# PDF points per millimeter (72 / 25.4). The preview uses the same ratio for px.
MM_TO_UNITS = 2.83465

# Estimated glyph advance as a fraction of the font size.
CHAR_WIDTH_RATIO = 0.6

# Baseline sits this far down a line box, as a fraction of the font size.
BASELINE_RATIO = 0.8


def mm_to_units(mm: float) -> float:
    return mm * MM_TO_UNITS


def units_to_mm(units: float) -> float:
    return units / MM_TO_UNITS


# --- Brand ---

BRAND_COLORS = {
    "wine": "#7A1E1E",
    "charcoal": "#11151A",
    "light": "#F7F5F3",
    "muted_text": "#4B5563",
    "white": "#FFFFFF",
    "black": "#000000",
}

ROLE_COLORS = {
    "organizer": "#7A1E1E",
    "speaker": "#C27803",
    "sponsor": "#0E7490",
    "vip": "#6D28D9",
    "staff": "#374151",
    "attendee": "#475569",
}


class Typography(BaseModel):
    model_config = ConfigDict(frozen=True)

    name_max: float = 44
    name_min: float = 26
    name_step: float = 2
    company: float = 18
    linkedin: float = 13
    header: float = 16
    role_chip: float = 14
    role_chip_reduced: float = 12
    # Names longer than this get the reduced chip font
    long_name_chars: int = 15
    placeholder: float = 8
    font: str = "Helvetica"
    font_bold: str = "Helvetica-Bold"


TYPOGRAPHY = Typography()

BACKGROUND_PHOTO_OPACITY = 0.15
DEFAULT_OVERLAY_OPACITY = 25


# --- Geometry value types ---


class Position(NamedTuple):
    x: float
    y: float


class Segment(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float


class Box(NamedTuple):
    """Axis-aligned rectangle, top-left origin, millimeters."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def offset(self, origin: Position) -> Box:
        return Box(self.x + origin.x, self.y + origin.y, self.width, self.height)


# --- Layout spec ---


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True)


class PageSpec(_Section):
    width_mm: float
    height_mm: float
    margin_mm: float


class GridSpec(_Section):
    cols: int
    rows: int
    gutter_mm: float


class BadgeSpec(_Section):
    width_mm: float
    height_mm: float
    padding_mm: float


class HeaderSpec(_Section):
    height_mm: float
    logo_width_mm: float
    logo_height_mm: float


class RoleChipSpec(_Section):
    height_mm: float
    padding_h_mm: float
    radius_mm: float
    # Gap between the chip and the QR tile it sits on
    margin_top_mm: float
    margin_right_mm: float


class QrSpec(_Section):
    tile_size_mm: float
    code_size_mm: float
    padding_mm: float
    margin_mm: float
    quiet_zone_modules: int


class ContentSpec(_Section):
    name_top_mm: float
    company_gap_mm: float
    linkedin_gap_mm: float


class CropMarkSpec(_Section):
    length_mm: float
    offset_mm: float
    thickness_mm: float


class LayoutSpec(_Section):
    version: str
    page: PageSpec
    grid: GridSpec
    badge: BadgeSpec
    positions: tuple[Position, ...]
    header: HeaderSpec
    role_chip: RoleChipSpec
    qr: QrSpec
    content: ContentSpec
    crop_marks: CropMarkSpec

    @property
    def slots_per_page(self) -> int:
        return self.grid.cols * self.grid.rows

    @model_validator(mode="after")
    def _check_tiling(self) -> LayoutSpec:
        page, grid, badge = self.page, self.grid, self.badge
        tiled_width = badge.width_mm * grid.cols + grid.gutter_mm * (grid.cols - 1) + 2 * page.margin_mm
        tiled_height = badge.height_mm * grid.rows + grid.gutter_mm * (grid.rows - 1) + 2 * page.margin_mm
        if not math.isclose(tiled_width, page.width_mm, abs_tol=1e-9):
            raise ValueError(
                f"grid width {tiled_width}mm does not tile page width {page.width_mm}mm"
            )
        if not math.isclose(tiled_height, page.height_mm, abs_tol=1e-9):
            raise ValueError(
                f"grid height {tiled_height}mm does not tile page height {page.height_mm}mm"
            )
        if tuple(self.positions) != tuple(compute_grid_positions(self)):
            raise ValueError("positions do not match the grid computed from page, grid and badge")
        return self


def compute_grid_positions(spec: LayoutSpec) -> list[Position]:
    """Badge slot origins in row-major order (top row left-to-right first)."""
    step_x = spec.badge.width_mm + spec.grid.gutter_mm
    step_y = spec.badge.height_mm + spec.grid.gutter_mm
    return [
        Position(spec.page.margin_mm + col * step_x, spec.page.margin_mm + row * step_y)
        for row in range(spec.grid.rows)
        for col in range(spec.grid.cols)
    ]


LAYOUT = LayoutSpec(
    version="2024.2",
    page=PageSpec(width_mm=210, height_mm=297, margin_mm=10),
    grid=GridSpec(cols=2, rows=2, gutter_mm=10),
    badge=BadgeSpec(width_mm=90, height_mm=133.5, padding_mm=6),
    positions=(
        Position(10, 10),  # top-left
        Position(110, 10),  # top-right
        Position(10, 153.5),  # bottom-left
        Position(110, 153.5),  # bottom-right
    ),
    header=HeaderSpec(height_mm=13, logo_width_mm=12, logo_height_mm=9),
    role_chip=RoleChipSpec(
        height_mm=10, padding_h_mm=4, radius_mm=3, margin_top_mm=2, margin_right_mm=6
    ),
    qr=QrSpec(tile_size_mm=38, code_size_mm=32, padding_mm=3, margin_mm=8, quiet_zone_modules=4),
    content=ContentSpec(name_top_mm=28, company_gap_mm=4, linkedin_gap_mm=3),
    crop_marks=CropMarkSpec(length_mm=5, offset_mm=2, thickness_mm=0.18),
)


def get_layout() -> LayoutSpec:
    """The layout every renderer resolves at render time."""
    return LAYOUT


# --- Text fitting ---


def estimate_text_width(text: str, font_size: float, char_width_ratio: float = CHAR_WIDTH_RATIO) -> float:
    return len(text) * char_width_ratio * font_size


def fit_text(
    text: str,
    max_width_units: float,
    max_size: float,
    min_size: float,
    step_size: float,
    char_width_ratio: float = CHAR_WIDTH_RATIO,
) -> float:
    """Largest font size in [min_size, max_size] whose estimated width fits.

    Walks down from ``max_size`` in ``step_size`` decrements. Returns
    ``min_size`` when nothing fits; the text may then overflow.
    """
    if step_size <= 0:
        raise ValueError("step_size must be positive")
    size = max_size
    while size >= min_size:
        if estimate_text_width(text, size, char_width_ratio) <= max_width_units:
            return size
        size -= step_size
    return min_size


# --- Badge-local geometry (top-left origin, mm) ---


def crop_marks(origin: Position, spec: LayoutSpec = LAYOUT) -> list[Segment]:
    """Eight short strokes, one horizontal and one vertical per badge corner.

    Each stroke starts ``offset_mm`` outside the corner and runs
    ``length_mm`` further out, so none touches the badge rectangle.
    """
    width, height = spec.badge.width_mm, spec.badge.height_mm
    offset, length = spec.crop_marks.offset_mm, spec.crop_marks.length_mm
    corners = [
        (origin.x, origin.y, -1, -1),
        (origin.x + width, origin.y, 1, -1),
        (origin.x, origin.y + height, -1, 1),
        (origin.x + width, origin.y + height, 1, 1),
    ]

    marks: list[Segment] = []
    for cx, cy, dx, dy in corners:
        y = cy + dy * offset
        marks.append(Segment(cx + dx * offset, y, cx + dx * (offset + length), y))
        x = cx + dx * offset
        marks.append(Segment(x, cy + dy * offset, x, cy + dy * (offset + length)))
    return marks


def badge_box(spec: LayoutSpec = LAYOUT) -> Box:
    return Box(0, 0, spec.badge.width_mm, spec.badge.height_mm)


def header_box(spec: LayoutSpec = LAYOUT) -> Box:
    return Box(0, 0, spec.badge.width_mm, spec.header.height_mm)


def logo_box(spec: LayoutSpec = LAYOUT) -> Box:
    header = spec.header
    return Box(
        spec.badge.padding_mm,
        (header.height_mm - header.logo_height_mm) / 2,
        header.logo_width_mm,
        header.logo_height_mm,
    )


def wordmark_position(spec: LayoutSpec = LAYOUT, font_size: float = TYPOGRAPHY.header) -> Position:
    """Left edge and top of the wordmark line box, vertically centered in the header."""
    logo = logo_box(spec)
    size_mm = units_to_mm(font_size)
    return Position(logo.right + spec.badge.padding_mm / 2, (spec.header.height_mm - size_mm) / 2)


def qr_tile_box(spec: LayoutSpec = LAYOUT) -> Box:
    qr = spec.qr
    return Box(
        spec.badge.width_mm - qr.tile_size_mm - qr.margin_mm,
        spec.badge.height_mm - qr.tile_size_mm - qr.margin_mm,
        qr.tile_size_mm,
        qr.tile_size_mm,
    )


def qr_code_box(spec: LayoutSpec = LAYOUT) -> Box:
    tile = qr_tile_box(spec)
    return Box(tile.x + spec.qr.padding_mm, tile.y + spec.qr.padding_mm, spec.qr.code_size_mm, spec.qr.code_size_mm)


def role_chip_font_size(display_name: str, typography: Typography = TYPOGRAPHY) -> float:
    if len(display_name) > typography.long_name_chars:
        return typography.role_chip_reduced
    return typography.role_chip


def role_chip_width_mm(label: str, font_size: float, spec: LayoutSpec = LAYOUT) -> float:
    return units_to_mm(estimate_text_width(label, font_size)) + 2 * spec.role_chip.padding_h_mm


def role_chip_box(chip_width_mm: float, spec: LayoutSpec = LAYOUT) -> Box:
    """Right-aligned chip resting just above the QR tile."""
    chip = spec.role_chip
    tile = qr_tile_box(spec)
    return Box(
        spec.badge.width_mm - chip.margin_right_mm - chip_width_mm,
        tile.y - chip.margin_top_mm - chip.height_mm,
        chip_width_mm,
        chip.height_mm,
    )


def content_box(spec: LayoutSpec = LAYOUT) -> Box:
    """Text column: inside the padding, from the name line down to the role chip."""
    padding = spec.badge.padding_mm
    top = spec.content.name_top_mm
    chip_top = qr_tile_box(spec).y - spec.role_chip.margin_top_mm - spec.role_chip.height_mm
    return Box(padding, top, spec.badge.width_mm - 2 * padding, chip_top - top)


def max_text_width_mm(spec: LayoutSpec = LAYOUT) -> float:
    return content_box(spec).width


class TextLine(NamedTuple):
    """One line of badge text: top of its line box and font size in units."""

    top: float
    size: float

    @property
    def baseline(self) -> float:
        return self.top + units_to_mm(self.size) * BASELINE_RATIO


class TextBlock(NamedTuple):
    name: TextLine
    company: TextLine | None
    linkedin: TextLine | None


def text_block(
    name_size: float,
    has_company: bool,
    has_linkedin: bool,
    spec: LayoutSpec = LAYOUT,
    typography: Typography = TYPOGRAPHY,
) -> TextBlock:
    """Stack name, company and LinkedIn lines; absent lines take no space."""
    content = spec.content
    name = TextLine(content.name_top_mm, name_size)
    cursor = name.top + units_to_mm(name.size)

    company = None
    if has_company:
        company = TextLine(cursor + content.company_gap_mm, typography.company)
        cursor = company.top + units_to_mm(company.size)

    linkedin = None
    if has_linkedin:
        linkedin = TextLine(cursor + content.linkedin_gap_mm, typography.linkedin)

    return TextBlock(name, company, linkedin)


def fit_name(display_name: str, spec: LayoutSpec = LAYOUT, typography: Typography = TYPOGRAPHY) -> float:
    return fit_text(
        display_name,
        mm_to_units(max_text_width_mm(spec)),
        typography.name_max,
        typography.name_min,
        typography.name_step,
    )


def to_pdf_y(top_mm: float, height_mm: float, page_height_mm: float) -> float:
    """Bottom edge of a top-left-origin box, measured from the page bottom."""
    return page_height_mm - top_mm - height_mm
