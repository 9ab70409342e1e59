"""QR code images for badge tiles."""

from __future__ import annotations

import base64
from io import BytesIO

import qrcode
from PIL.Image import Image
from qrcode.constants import ERROR_CORRECT_H


def make_qr_image(payload: str, quiet_zone: int) -> Image:
    """Black-on-white QR as a PIL image. Raises if the payload cannot be encoded."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_H,
        box_size=10,
        border=quiet_zone,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").get_image()


def make_qr_data_uri(payload: str, quiet_zone: int) -> str:
    """Same image as the PDF tile, as a PNG data URI for the HTML preview."""
    buffer = BytesIO()
    make_qr_image(payload, quiet_zone).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
