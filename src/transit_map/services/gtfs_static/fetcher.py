"""Feed resource fetcher with retry, for remote URLs or a local data directory."""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx

from transit_map.logging import get_logger

logger = get_logger(__name__)

# Default settings
DEFAULT_TIMEOUT_SEC = 30
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE = 2.0


class FetchError(Exception):
    """Raised when a feed resource cannot be read."""


class ResourceFetcher:
    """Fetches the raw text of GTFS resources."""

    def __init__(
        self,
        timeout_sec: int = DEFAULT_TIMEOUT_SEC,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
    ) -> None:
        self.timeout_sec = timeout_sec
        self.max_retries = max_retries
        self.backoff_base = backoff_base

    async def fetch_text(self, location: str) -> str:
        """Read a resource from an ``http(s)://`` URL or a filesystem path."""
        if location.startswith(("http://", "https://")):
            return await self.fetch_remote(location)
        return self.fetch_local(location)

    async def fetch_remote(self, url: str) -> str:
        """Download a resource with retry + exponential backoff.

        Raises:
            FetchError: If all retries exhausted.
        """
        last_error: Exception | None = None
        for attempt in range(self.max_retries):
            try:
                logger.info(
                    "Fetching GTFS resource",
                    url=url,
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                )
                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout_sec),
                    follow_redirects=True,
                ) as client:
                    response = await client.get(url)
                    response.raise_for_status()
                    text = response.text

                logger.info("GTFS resource downloaded", url=url, size_chars=len(text))
                return text

            except (httpx.HTTPStatusError, httpx.RequestError) as exc:
                last_error = exc
                if attempt < self.max_retries - 1:
                    delay = self.backoff_base ** (attempt + 1)
                    logger.warning(
                        "Fetch attempt failed, retrying",
                        url=url,
                        attempt=attempt + 1,
                        delay_sec=delay,
                        error=str(exc),
                    )
                    await asyncio.sleep(delay)

        msg = f"Failed to fetch {url} after {self.max_retries} attempts"
        raise FetchError(msg) from last_error

    def fetch_local(self, path: str | Path) -> str:
        """Read a resource from the local filesystem.

        Raises:
            FetchError: If the file does not exist or cannot be decoded.
        """
        path = Path(path)
        if not path.is_file():
            msg = f"Local GTFS resource not found: {path}"
            raise FetchError(msg)

        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Could not read local GTFS resource: {path}"
            raise FetchError(msg) from exc

        logger.info("GTFS resource loaded from local file", path=str(path), size_chars=len(text))
        return text
