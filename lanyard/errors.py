"""Exception taxonomy for the badge service.

Every caller-facing failure is a ``BadgeError`` carrying the HTTP status the
API should answer with. Handlers in ``lanyard.main`` render them as
``{"success": false, "error": detail}``.
"""

from __future__ import annotations


class BadgeError(Exception):
    status_code = 500

    def __init__(self, detail: str, *, status_code: int | None = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(BadgeError):
    status_code = 400


class NotFoundError(BadgeError):
    status_code = 404


class AssetFetchError(BadgeError):
    """A caller-supplied image URL could not be downloaded."""

    status_code = 400


class UnsupportedImageError(BadgeError):
    """Image bytes are neither PNG nor JPEG."""

    status_code = 400
