"""Project raw registrations into the normalized shape the renderers draw."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from lanyard.config import settings
from lanyard.models import ProjectedAttendee, Registration, RoleCategory

logger = logging.getLogger(__name__)

RoleStrategy = Callable[[Registration], RoleCategory]

GUEST_NAME = "Guest"
LINKEDIN_PATH = "linkedin.com/in/"
_LINKEDIN_PREFIX = re.compile(r"^(?:https?://)?(?:www\.)?linkedin\.com/(?:in/)?", re.IGNORECASE)

# Fragments that mean a secret leaked into a stored QR URL
CREDENTIAL_MARKERS = ("sk-", "API_KEY")

_ROLE_VALUES = frozenset(category.value for category in RoleCategory)


# --- Text formatting ---


def format_name(text: str) -> str:
    """Title-case each whitespace-separated word, joined by single spaces."""
    return " ".join(word[0].title() + word[1:].lower() for word in text.split())


def format_company(text: str) -> str:
    text = text.strip()
    if not text:
        return ""
    return text[0].title() + text[1:].lower()


def normalize_linkedin(value: str) -> str | None:
    """Reduce a LinkedIn URL or bare handle to ``linkedin.com/in/<handle>``."""
    handle = _LINKEDIN_PREFIX.sub("", value.strip())
    if not handle:
        return None
    return f"{LINKEDIN_PATH}{handle}"


def role_chip_label(role: RoleCategory) -> str:
    return role.value.upper()


# --- Roles ---


def _match_role(text: str) -> RoleCategory | None:
    lowered = text.lower()
    for category in RoleCategory:
        if category.value in lowered:
            return category
    return None


def substring_role(registration: Registration) -> RoleCategory:
    """Explicit role, else first category named inside ticket_type, else inside a tag.

    Substring matching is loose ("staffing" reads as staff) but existing
    registrations depend on it.
    """
    explicit = registration.role.strip().lower()
    if explicit in _ROLE_VALUES:
        return RoleCategory(explicit)

    if registration.ticket_type:
        matched = _match_role(registration.ticket_type)
        if matched:
            return matched

    for tag in registration.tags:
        matched = _match_role(tag)
        if matched:
            return matched

    return RoleCategory.ATTENDEE


def exact_role(registration: Registration) -> RoleCategory:
    """Like ``substring_role`` but ticket types and tags must name a category exactly."""
    candidates = [registration.role, registration.ticket_type, *registration.tags]
    for candidate in candidates:
        value = candidate.strip().lower()
        if value in _ROLE_VALUES:
            return RoleCategory(value)
    return RoleCategory.ATTENDEE


# --- QR payloads ---


def connect_url(user_id: str, event_id: str, base_url: str | None = None) -> str:
    base = (base_url or settings.connect_base_url).rstrip("/")
    return f"{base}/connect?to={user_id}&event={event_id}"


def is_credential_bearing(url: str) -> bool:
    return any(marker in url for marker in CREDENTIAL_MARKERS)


def is_corrupted_qr_url(url: str | None, base_url: str | None = None) -> bool:
    """Union of every corruption rule seen in stored registrations.

    Missing, carrying a credential fragment, or not a connect URL on our
    own domain.
    """
    if not url:
        return True
    if is_credential_bearing(url):
        return True
    base = (base_url or settings.connect_base_url).rstrip("/")
    return not url.startswith(f"{base}/connect")


def resolve_qr_payload(registration: Registration, event_id: str, base_url: str | None = None) -> str:
    """Stored QR URL, then ticket URL, then the generated connect URL.

    Stored values carrying a credential fragment are skipped.
    """
    for candidate in (registration.qr_code_url, registration.ticket_url):
        candidate = candidate.strip()
        if not candidate:
            continue
        if is_credential_bearing(candidate):
            logger.warning(
                "Skipping credential-bearing QR URL for user %s in event %s",
                registration.user_id,
                event_id,
            )
            continue
        return candidate
    return connect_url(registration.user_id, event_id, base_url)


# --- Projection ---


def project(
    raw: Registration | Mapping[str, Any],
    event_id: str,
    *,
    user_id: str | None = None,
    role_strategy: RoleStrategy = substring_role,
    base_url: str | None = None,
) -> ProjectedAttendee:
    """Build the render-ready view of one registration. Never raises on bad data."""
    if isinstance(raw, Registration):
        registration = raw
    else:
        try:
            registration = Registration.model_validate(dict(raw))
        except (ValidationError, TypeError, ValueError):
            logger.warning("Unreadable registration %s in event %s, rendering as guest", user_id, event_id)
            registration = Registration()

    if user_id is not None:
        registration = registration.model_copy(update={"user_id": user_id})

    company = format_company(registration.work)
    linkedin = normalize_linkedin(registration.linkedin_username)

    return ProjectedAttendee(
        user_id=registration.user_id,
        display_name=format_name(registration.name) or GUEST_NAME,
        company=company or None,
        linkedin_handle=linkedin,
        role=role_strategy(registration),
        qr_payload=resolve_qr_payload(registration, event_id, base_url),
    )
