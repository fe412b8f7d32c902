# === NAVMAP v1 ===
# {
#   "module": "CrawlGuard.RobotsCompliance.net.fetcher",
#   "purpose": "Header-first HTTP fetching with capped body reads.",
#   "sections": [
#     {"id": "page", "name": "Page", "anchor": "class-page", "kind": "class"},
#     {"id": "fetchresult", "name": "FetchResult", "anchor": "class-fetchresult", "kind": "class"},
#     {"id": "pagefetcher", "name": "PageFetcher", "anchor": "class-pagefetcher", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""
Header-first HTTP fetching with capped body reads.

A fetch happens in two steps so that callers can inspect the status before
paying for the body:

1. :meth:`PageFetcher.fetch_header` sends the request in streaming mode and
   returns a :class:`FetchResult` once status and headers have arrived.
2. :meth:`FetchResult.fetch_content` reads at most ``max_bytes`` of the body
   into a :class:`Page`.

Whatever the outcome, :meth:`FetchResult.discard_content_if_not_consumed`
must be called to give the connection back to the pool. It is idempotent.

Transport failures and timeouts surface as
:class:`~CrawlGuard.RobotsCompliance.errors.FetchError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

import httpx

from ..config.models import FetcherConfig
from ..errors import FetchError
from .client import build_http_client

logger = logging.getLogger(__name__)

__all__ = ["Page", "FetchResult", "PageFetcher"]


@dataclass
class Page:
    """Body and content metadata of a fetched resource."""

    url: str
    content_data: Optional[bytes] = None
    content_type: Optional[str] = None
    content_charset: Optional[str] = None
    truncated: bool = False


class FetchResult:
    """Status and headers of an in-flight response whose body is unread."""

    def __init__(self, response: httpx.Response, requested_url: str) -> None:
        self._response = response
        self.requested_url = requested_url
        self._consumed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def fetched_url(self) -> str:
        """Final URL after redirects."""
        return str(self._response.url)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def fetch_content(self, page: Page, max_bytes: int) -> Page:
        """Read up to ``max_bytes`` of the body into ``page``.

        Raises:
            FetchError: If the body read fails or times out.
        """
        if self._consumed:
            raise FetchError("Response body already consumed", url=self.requested_url)

        buffer = bytearray()
        truncated = False
        try:
            for chunk in self._response.iter_bytes():
                if not chunk:
                    continue
                remaining = max_bytes - len(buffer)
                # A full buffer with bytes still arriving is truncated too.
                if len(chunk) > remaining:
                    buffer.extend(chunk[:remaining])
                    truncated = True
                    break
                buffer.extend(chunk)
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise FetchError(
                f"Failed reading body from {self.requested_url}: {exc}",
                url=self.requested_url,
                details={"error_type": type(exc).__name__},
            ) from exc
        finally:
            self._consumed = True
            self._response.close()

        content_type = self._response.headers.get("Content-Type")
        page.content_data = bytes(buffer)
        page.content_type = content_type
        page.content_charset = self._response.charset_encoding
        page.truncated = truncated
        if truncated:
            logger.debug("Body of %s truncated at %d bytes", self.requested_url, max_bytes)
        return page

    def discard_content_if_not_consumed(self) -> None:
        """Release the connection if the body was never read."""
        if self._consumed:
            return
        self._consumed = True
        try:
            self._response.close()
        except httpx.HTTPError as exc:  # pragma: no cover - close rarely fails
            logger.debug("Error closing response for %s: %s", self.requested_url, exc)


class PageFetcher:
    """Thin HTTPX wrapper exposing the header-first fetch protocol.

    Args:
        config: Fetcher settings (timeouts, redirects, User-Agent).
        client: Optional pre-built client. When omitted the fetcher builds and
            owns one, and :meth:`close` closes it.
    """

    def __init__(
        self,
        config: Optional[FetcherConfig] = None,
        *,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.config = config or FetcherConfig()
        self._owns_client = client is None
        self._client = client if client is not None else build_http_client(self.config)

    @property
    def max_robots_bytes(self) -> int:
        return self.config.max_robots_bytes

    def fetch_header(self, url: Union[str, httpx.URL]) -> FetchResult:
        """Send GET for ``url`` and return once headers are available.

        Raises:
            FetchError: On transport failure, timeout or an invalid URL.
        """
        url_text = str(url)
        try:
            request = self._client.build_request("GET", url_text)
            response = self._client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(
                f"Failed to fetch {url_text}: {exc}",
                url=url_text,
                details={"error_type": type(exc).__name__},
            ) from exc
        logger.debug("Fetched headers for %s: HTTP %s", url_text, response.status_code)
        return FetchResult(response, url_text)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> PageFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
