"""EndpointResolver — finds the live stream URL embedded in the source page.

The stream endpoint rotates, so it is never configured: the source page is
fetched and the first quoted ``wss://`` URL in its body is used.

Every failure (transport error, non-200 status, no URL in the body) ends
the attempt and schedules the next one after a fixed delay.  resolve()
never raises for these; it keeps trying until it has a URL.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

WEBSOCKET_URL_PATTERN = re.compile(r'"(wss://[^"]+)')


def extract_endpoint(body: str) -> Optional[str]:
    """Return the first quoted secure-websocket URL in *body*, if any."""
    match = WEBSOCKET_URL_PATTERN.search(body)
    return match.group(1) if match else None


class EndpointResolver:
    """Fetches the source page and extracts the stream endpoint.

    Args:
        source_url: Page that embeds the stream URL.
        retry_delay: Seconds to wait after a failed attempt.
        timeout: Per-request timeout for the page fetch.
        user_agent: User-Agent header sent with the fetch.
        transport: Optional httpx transport (tests inject a MockTransport).
    """

    def __init__(
        self,
        source_url: str,
        retry_delay: float = 5.0,
        timeout: float = 30.0,
        user_agent: str = "button-monitor/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._source_url = source_url
        self._retry_delay = retry_delay
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport
        self.attempts = 0

    async def resolve(self) -> str:
        """Return a stream URL, retrying every ``retry_delay`` seconds."""
        while True:
            endpoint = await self.fetch_once()
            if endpoint is not None:
                return endpoint
            await asyncio.sleep(self._retry_delay)

    async def fetch_once(self) -> Optional[str]:
        """Run a single discovery attempt.  Returns None on any failure."""
        self.attempts += 1
        logger.info("Finding stream URL (attempt %d)...", self.attempts)

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(
                    self._source_url,
                    headers={"User-Agent": self._user_agent},
                )
        except httpx.HTTPError as exc:
            logger.warning(
                "Source fetch failed (%s). Trying again in %.0f seconds.",
                exc,
                self._retry_delay,
            )
            return None

        if response.status_code != 200:
            logger.warning(
                "Source returned HTTP %d. Trying again in %.0f seconds.",
                response.status_code,
                self._retry_delay,
            )
            return None

        endpoint = extract_endpoint(response.text)
        if endpoint is None:
            logger.warning(
                "No stream URL found in source page. Trying again in %.0f seconds.",
                self._retry_delay,
            )
            return None

        logger.info("Stream URL found: %s", endpoint)
        return endpoint
