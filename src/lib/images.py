"""Screenshot fetching and media type detection for AI provider attachments."""

import asyncio
import base64
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

import aiohttp

from lib.errors import NetworkError


class MediaType(str, Enum):
    PNG = "image/png"
    JPEG = "image/jpeg"
    WEBP = "image/webp"
    GIF = "image/gif"


_CONTENT_TYPES = [
    ("image/png", MediaType.PNG),
    ("image/jpeg", MediaType.JPEG),
    ("image/jpg", MediaType.JPEG),
    ("image/webp", MediaType.WEBP),
    ("image/gif", MediaType.GIF),
]

_EXTENSIONS = {
    ".png": MediaType.PNG,
    ".webp": MediaType.WEBP,
    ".gif": MediaType.GIF,
    ".jpg": MediaType.JPEG,
    ".jpeg": MediaType.JPEG,
}


def classify_media_type(content_type: Optional[str], url: str = "") -> MediaType:
    """
    Detect the image media type.

    A recognized Content-Type header wins, then the URL path extension, then JPEG.
    """
    if content_type:
        header = content_type.lower()
        for marker, media_type in _CONTENT_TYPES:
            if marker in header:
                return media_type

    extension = os.path.splitext(urlparse(url or "").path)[1].lower()
    return _EXTENSIONS.get(extension, MediaType.JPEG)


@dataclass
class FetchedImage:
    url: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def media_type(self) -> MediaType:
        return classify_media_type(self.content_type, self.url)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


class ImageFetcher:
    """Async HTTP image downloader."""

    def __init__(self, timeout: float = 30):
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> FetchedImage:
        """Download an image; raises NetworkError on any failure."""
        if not self.session:
            self.session = aiohttp.ClientSession(timeout=self.timeout)

        try:
            async with self.session.get(url) as response:
                if response.status != 200:
                    raise NetworkError(f"Failed to fetch image {url}: HTTP {response.status}")
                data = await response.read()
                return FetchedImage(url=url, data=data, content_type=response.headers.get("Content-Type"))
        except aiohttp.ClientError as e:
            raise NetworkError(f"Failed to fetch image {url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Timed out fetching image {url}") from e
