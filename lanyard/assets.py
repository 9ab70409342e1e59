"""Logo and background images: local read-once cache, remote fetch, decoding."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

import httpx
from PIL import Image, UnidentifiedImageError
from reportlab.lib.utils import ImageReader

from lanyard.errors import AssetFetchError, UnsupportedImageError
from lanyard.models import Theme

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("PNG", "JPEG")

LOGO_CANDIDATES = ("logo.png", "logo.jpg", "logo.jpeg")
BACKGROUND_CANDIDATES = ("event-hero.jpg", "default-event-bg.jpg", "event-hero.png")


@dataclass(frozen=True)
class DecodedImage:
    reader: ImageReader
    width: int
    height: int
    format: str


@dataclass(frozen=True)
class RenderTheme:
    """Everything a renderer needs besides the attendees."""

    header_color: str
    overlay_opacity: int
    wordmark: str
    background: DecodedImage | None = None
    logo: DecodedImage | None = None

    @classmethod
    def from_theme(
        cls,
        theme: Theme,
        *,
        wordmark: str,
        background: DecodedImage | None = None,
        logo: DecodedImage | None = None,
    ) -> RenderTheme:
        return cls(
            header_color=theme.header_color,
            overlay_opacity=theme.overlay_opacity,
            wordmark=wordmark,
            background=background,
            logo=logo,
        )


def decode_image(data: bytes, label: str) -> DecodedImage:
    """Decode PNG or JPEG bytes. Anything else is a caller-facing error."""
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            image_format = img.format
            width, height = img.size
    except (UnidentifiedImageError, OSError) as exc:
        raise UnsupportedImageError(
            f"Could not decode {label} as a supported raster format (PNG or JPEG)"
        ) from exc

    if image_format not in SUPPORTED_FORMATS:
        raise UnsupportedImageError(
            f"Could not decode {label}: {image_format} is not a supported raster format (PNG or JPEG)"
        )
    return DecodedImage(ImageReader(BytesIO(data)), width, height, image_format)


def decode_optional(data: bytes | None, label: str) -> DecodedImage | None:
    return decode_image(data, label) if data is not None else None


async def fetch_image(client: httpx.AsyncClient, url: str, label: str) -> bytes:
    try:
        response = await client.get(url, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise AssetFetchError(
            f"Could not fetch {label} from {url}: HTTP {exc.response.status_code}"
        ) from exc
    except httpx.HTTPError as exc:
        raise AssetFetchError(f"Could not fetch {label} from {url}: {exc}") from exc

    logger.info("Fetched %s (%d bytes) from %s", label, len(response.content), url)
    return response.content


class AssetCache:
    """Local brand assets, read from disk at most once per cache instance.

    The app builds one in its lifespan and keeps it on ``app.state``; tests
    build their own around a temporary directory.
    """

    def __init__(self, assets_dir: Path | str) -> None:
        self.assets_dir = Path(assets_dir)
        self._entries: dict[str, bytes | None] = {}

    def logo(self) -> bytes | None:
        return self._load("logo", LOGO_CANDIDATES)

    def background(self) -> bytes | None:
        return self._load("background", BACKGROUND_CANDIDATES)

    def _load(self, key: str, candidates: tuple[str, ...]) -> bytes | None:
        if key in self._entries:
            return self._entries[key]

        data = None
        for name in candidates:
            path = self.assets_dir / name
            if not path.is_file():
                continue
            data = path.read_bytes()
            logger.info("Loaded %s asset: %s", key, path)
            break
        else:
            logger.warning("No %s asset found in %s, rendering without it", key, self.assets_dir)

        self._entries[key] = data
        return data
