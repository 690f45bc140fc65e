"""
HTTP client used to download attachments.

``HttpFetcher`` wraps an ``aiohttp.ClientSession`` and implements the fetch
contract expected by ``DocumentReferenceHandler``: HTTP error statuses are
returned, not raised.
"""

from typing import Dict, Mapping, Optional

import aiohttp

from attachment_inliner.config.models import HttpConfig
from attachment_inliner.streams.types import HttpResponse
from attachment_inliner.utils.logging import get_logger

logger = get_logger(__name__)


class HttpFetcher:
    """Time-bounded attachment downloads over a shared aiohttp session."""

    def __init__(self, config: Optional[HttpConfig] = None):
        self.config = config or HttpConfig()
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        """Open the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                headers=self.config.headers,
            )

    async def stop(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "HttpFetcher":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def __call__(
        self, url: str, headers: Mapping[str, str], accept_binary: bool = True
    ) -> HttpResponse:
        """
        Download ``url``.

        Args:
            url: Absolute URL to download.
            headers: Extra request headers.
            accept_binary: Keep the body as bytes. When False the body is
                decoded as text and re-encoded as UTF-8.

        Returns:
            The response status, headers and body.
        """
        if self._session is None:
            raise RuntimeError("HttpFetcher is not started")

        logger.debug("http_request", url=url)
        async with self._session.get(url, headers=dict(headers)) as response:
            if accept_binary:
                body = await response.read()
            else:
                body = (await response.text()).encode("utf-8")
            response_headers: Dict[str, str] = {
                key.lower(): value for key, value in response.headers.items()
            }
            logger.debug(
                "http_response", url=url, status_code=response.status, size=len(body)
            )
            return HttpResponse(
                status_code=response.status, headers=response_headers, body=body
            )
