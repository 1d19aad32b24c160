import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import aiohttp

from lib.errors import NetworkError, NotFoundError

logger = logging.getLogger(__name__)

LOOKUP_URL = "https://itunes.apple.com/lookup"
SEARCH_URL = "https://itunes.apple.com/search"


@dataclass
class AppProfile:
    title: str
    description: str
    genres: List[str] = field(default_factory=list)
    screenshots: List[str] = field(default_factory=list)
    app_id: Optional[str] = None

    def __repr__(self):
        return f"AppProfile(title='{self.title}', app_id='{self.app_id}', screenshots={len(self.screenshots)})"


@dataclass
class SimilarApp:
    app_id: str
    title: str


class AppStoreScraper:
    """Async App Store catalog client for app metadata and similar apps"""

    def __init__(self, country: str = "us", timeout: float = 30):
        self.country = country
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

    async def _get_json(self, url: str, params: dict) -> dict:
        if not self.session:
            self.session = aiohttp.ClientSession(timeout=self.timeout)

        try:
            async with self.session.get(url, params=params) as response:
                if response.status == 404:
                    raise NotFoundError(f"App not found ({params})")
                if response.status != 200:
                    raise NetworkError(f"HTTP {response.status}: {await response.text()}")

                # iTunes answers with text/javascript
                return await response.json(content_type=None)
        except aiohttp.ClientError as ce:
            raise NetworkError(f"Cannot connect to store: {ce}") from ce
        except asyncio.TimeoutError as te:
            raise NetworkError(f"Store request timed out: {url}") from te
        except json.JSONDecodeError as je:
            raise NetworkError("Could not parse app store response") from je

    async def fetch_app(self, app_id) -> AppProfile:
        """
        Retrieve title, description, genres and screenshots for an app

        :param app_id:  Numeric App Store track ID

        :return AppProfile:  Metadata used for keyword generation
        """
        result = await self._get_json(
            LOOKUP_URL,
            {"id": str(app_id), "country": self.country, "entity": "software"}
        )

        apps = [item for item in result.get("results", []) if item.get("trackId")]
        if not result.get("resultCount") or not apps:
            raise NotFoundError(f"App not found: {app_id}")

        app_info = apps[0]
        screenshots = app_info.get("screenshotUrls") or app_info.get("ipadScreenshotUrls") or []

        return AppProfile(
            title=app_info.get("trackName", ""),
            description=app_info.get("description", ""),
            genres=app_info.get("genres", []),
            screenshots=list(screenshots),
            app_id=str(app_info["trackId"]),
        )

    async def fetch_similar(self, app_id, num: int = 10, title: Optional[str] = None) -> List[SimilarApp]:
        """
        Retrieve apps similar to the given one

        Apps returned by a store search for the app's own title, excluding the app itself.

        :param app_id:  Numeric App Store track ID
        :param int num:  Maximum number of similar apps to return
        :param str title:  The app's title when already known; skips the extra lookup

        :return list:  Ordered list of SimilarApp entries
        """
        if title is None:
            title = (await self.fetch_app(app_id)).title
        if not title:
            return []

        result = await self._get_json(
            SEARCH_URL,
            {"term": title, "country": self.country, "entity": "software", "limit": num + 1}
        )

        similar = []
        for item in result.get("results", []):
            track_id = str(item.get("trackId", ""))
            if not track_id or track_id == str(app_id):
                continue
            similar.append(SimilarApp(app_id=track_id, title=item.get("trackName", "")))

        logger.info(f"Found {len(similar[:num])} similar apps for {title} ({app_id})")
        return similar[:num]
