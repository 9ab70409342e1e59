"""Admin API routes: registration QR maintenance."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from lanyard.cleanup import cleanup_event
from lanyard.errors import InvalidRequestError

router = APIRouter(prefix="/api/admin")


# --- Request models ---


class CleanupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: str | None = Field(None, alias="eventId")
    dry_run: bool = Field(True, alias="dryRun")


# --- Routes ---


@router.post("/cleanup-qr")
async def cleanup_qr(request: CleanupRequest):
    if not request.event_id:
        raise InvalidRequestError("Missing eventId parameter")

    report = await cleanup_event(request.event_id, dry_run=request.dry_run)
    return {
        "success": True,
        "eventId": report.event_id,
        "dryRun": report.dry_run,
        "summary": report.summary(),
        "details": report.model_dump(by_alias=True, exclude={"event_id", "dry_run"}),
    }
