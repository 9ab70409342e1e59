from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lanyard.layout import BRAND_COLORS, DEFAULT_OVERLAY_OPACITY, ROLE_COLORS, Position


class RoleCategory(StrEnum):
    # Declaration order is the precedence used when inferring a role
    ORGANIZER = "organizer"
    SPEAKER = "speaker"
    SPONSOR = "sponsor"
    VIP = "vip"
    STAFF = "staff"
    ATTENDEE = "attendee"

    @property
    def color(self) -> str:
        return ROLE_COLORS[self.value]


class RenderMode(StrEnum):
    SHEET = "sheet"
    SINGLE = "single"


class Registration(BaseModel):
    """A registration record as the web client stores it (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field("", alias="userId")
    name: str = ""
    work: str = ""
    linkedin_username: str = Field("", alias="linkedinUsername")
    email: str = ""
    status: str = ""

    role: str = ""
    ticket_type: str = ""
    tags: list[str] = []

    qr_code_url: str = Field("", alias="qrCodeUrl")
    ticket_url: str = ""

    @field_validator(
        "user_id", "name", "work", "linkedin_username", "email", "status",
        "role", "ticket_type", "qr_code_url", "ticket_url",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple, set)):
            return []
        return [str(tag) for tag in value if tag is not None]


class EventRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    title: str = ""
    date: str | None = None
    location: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @property
    def display_name(self) -> str:
        return self.name or self.title or "Wine & Grind Event"


class Theme(BaseModel):
    """Caller-supplied look of a badge run."""

    background_image_url: str | None = None
    logo_url: str | None = None
    overlay_opacity: int = Field(DEFAULT_OVERLAY_OPACITY, ge=0, le=100)
    header_color: str = Field(BRAND_COLORS["wine"], pattern=r"^#[0-9A-Fa-f]{6}$")


class ProjectedAttendee(BaseModel):
    """Render-ready view of a registration. Built per render, never stored."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    display_name: str
    company: str | None = None
    linkedin_handle: str | None = None
    role: RoleCategory = RoleCategory.ATTENDEE
    qr_payload: str


class Placement(BaseModel):
    position: Position
    attendee: ProjectedAttendee


class BadgePage(BaseModel):
    index: int
    width_mm: float
    height_mm: float
    placements: list[Placement]
    crop_marks: bool = True
