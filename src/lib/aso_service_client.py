"""HTTP client for the keyword metrics service."""

import asyncio
import json
import logging
from typing import Dict, Optional, Protocol

import aiohttp

from lib.errors import ScoringError

logger = logging.getLogger(__name__)


class KeywordLookup(Protocol):
    async def lookup(self, keyword: str, platform: str) -> Dict:
        """Return {"traffic": {"score": 0-10}, "difficulty": {"score": 0-10}} for a keyword."""
        ...


class ASOServiceClient:
    """HTTP client for the keyword metrics microservice."""

    def __init__(self, base_url: str = "http://localhost:8001", timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self.session

    async def close(self):
        """Close the HTTP session."""
        if self.session and not self.session.closed:
            await self.session.close()

    async def health_check(self) -> Dict:
        """Check service health."""
        session = await self._get_session()

        try:
            async with session.get(f"{self.base_url}/health") as response:
                if response.status == 200:
                    return await response.json()
                return {"status": "unhealthy", "error": f"HTTP {response.status}"}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return {"status": "unhealthy", "error": str(e)}

    async def lookup(self, keyword: str, platform: str = "itunes") -> Dict:
        """Fetch raw traffic and difficulty scores (0-10 scale) for one keyword."""
        session = await self._get_session()
        payload = {"keyword": keyword, "platform": platform}

        try:
            async with session.post(f"{self.base_url}/analyze-keyword", json=payload) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise ScoringError(f"Keyword service error for '{keyword}': HTTP {response.status} - {error_text}")
                data = await response.json()
        except asyncio.TimeoutError as e:
            raise ScoringError(f"Keyword service timed out for '{keyword}'") from e
        except aiohttp.ClientError as e:
            raise ScoringError(f"Keyword service request failed for '{keyword}': {e}") from e
        except json.JSONDecodeError as e:
            raise ScoringError(f"Keyword service returned invalid JSON for '{keyword}'") from e

        if not isinstance(data, dict):
            raise ScoringError(f"Unexpected keyword service response for '{keyword}': {data!r}")
        return data
