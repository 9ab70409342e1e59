"""Find and rewrite corrupted QR URLs stored on registrations."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from lanyard.models import Registration
from lanyard.projection import connect_url, is_corrupted_qr_url
from lanyard.store import RegistrationStore, store as default_store

logger = logging.getLogger(__name__)

DIFFERENT_FORMAT_NOTE = "Different format but not API key"


class CleanupEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    user_name: str
    current_qr_url: str | None = None
    expected_qr_url: str | None = None
    note: str | None = None


class CleanupReport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_id: str
    dry_run: bool = True
    total: int = 0
    corrupted: list[CleanupEntry] = Field(default_factory=list)
    already_correct: list[CleanupEntry] = Field(default_factory=list)
    cleaned: list[CleanupEntry] = Field(default_factory=list)

    def summary(self) -> dict[str, int]:
        return {
            "total": self.total,
            "corrupted": len(self.corrupted),
            "cleaned": len(self.cleaned),
            "alreadyCorrect": len(self.already_correct),
        }


def _read_document(user_id: str, document: Any) -> Registration:
    """Stored document as a Registration, with the same coercion rendering applies."""
    try:
        return Registration.model_validate(dict(document))
    except (ValidationError, TypeError, ValueError):
        logger.warning("Unreadable registration %s, auditing it as empty", user_id)
        return Registration()


def check_in_code(event_id: str, user_id: str) -> str:
    return f"{event_id}-{user_id}"


def audit_registrations(
    event_id: str,
    registrations: Mapping[str, Mapping[str, Any]],
    connect_base: str | None = None,
) -> CleanupReport:
    """Classify each stored QR URL without touching anything.

    ``registrations`` maps user id to the stored document. URLs on our connect
    path that still differ from the canonical one are reported as corrupted
    with a note.
    """
    report = CleanupReport(event_id=event_id, total=len(registrations))

    for user_id, document in registrations.items():
        registration = _read_document(user_id, document)
        current = registration.qr_code_url or None
        expected = connect_url(user_id, event_id, connect_base)
        user_name = registration.name or "Unknown"

        if is_corrupted_qr_url(current, connect_base):
            report.corrupted.append(
                CleanupEntry(
                    user_id=user_id,
                    user_name=user_name,
                    current_qr_url=current,
                    expected_qr_url=expected,
                )
            )
        elif current == expected:
            report.already_correct.append(CleanupEntry(user_id=user_id, user_name=user_name))
        else:
            report.corrupted.append(
                CleanupEntry(
                    user_id=user_id,
                    user_name=user_name,
                    current_qr_url=current,
                    expected_qr_url=expected,
                    note=DIFFERENT_FORMAT_NOTE,
                )
            )

    return report


async def cleanup_event(
    event_id: str,
    *,
    dry_run: bool = True,
    registration_store: RegistrationStore | None = None,
    connect_base: str | None = None,
) -> CleanupReport:
    """Audit an event's registrations and, unless ``dry_run``, fix them in place."""
    registration_store = registration_store or default_store
    documents = await registration_store.get_raw_registrations(event_id)
    logger.info("QR cleanup for event %s: %d registrations (dry_run=%s)", event_id, len(documents), dry_run)

    report = audit_registrations(event_id, documents, connect_base)
    report.dry_run = dry_run

    if dry_run:
        logger.info("QR cleanup dry run for event %s: %s", event_id, report.summary())
        return report

    fixed_at = datetime.now(timezone.utc).isoformat()
    for entry in report.corrupted:
        updated = await registration_store.update_registration(
            event_id,
            entry.user_id,
            {
                "qrCodeUrl": entry.expected_qr_url,
                "checkInCode": check_in_code(event_id, entry.user_id),
                "qrFixedAt": fixed_at,
            },
        )
        if updated:
            report.cleaned.append(CleanupEntry(user_id=entry.user_id, user_name=entry.user_name))

    logger.info("QR cleanup applied for event %s: %s", event_id, report.summary())
    return report
