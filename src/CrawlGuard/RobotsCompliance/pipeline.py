# === NAVMAP v1 ===
# {
#   "module": "CrawlGuard.RobotsCompliance.pipeline",
#   "purpose": "Fetch robots.txt for a host and turn it into HostDirectives, failing open.",
#   "sections": [
#     {"id": "fetchparsepipeline", "name": "FetchParsePipeline", "anchor": "class-fetchparsepipeline", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Fetch robots.txt for a host and turn it into :class:`HostDirectives`.

**Flow**
--------
1. Build ``http://<host>[:<port>]/robots.txt``.
2. Fetch headers only; any status other than 200 stops here.
3. Read at most ``max_bytes`` of the body.
4. Reject content types that are not plain text.
5. Decode with the declared charset (``default_encoding`` otherwise).
6. Parse into ``(generic, specific)`` rule sets for ``user_agent_name``.

The fetch handle is released on every exit path.

**Fail-open semantics**
-----------------------
Network errors, timeouts, non-OK statuses, non-text bodies, undecodable
bytes and parse errors all produce :meth:`HostDirectives.empty`. The caller
caches that result like any other, so a failing host is retried only after
the TTL lapses.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from .content import is_plain_text
from .errors import FetchError, RobotsParseError
from .net.fetcher import FetchResult, Page, PageFetcher
from .parser import parse
from .rules import Clock, HostDirectives

__all__ = ["FetchParsePipeline", "robots_url"]

logger = logging.getLogger(__name__)

HTTP_OK = 200


def robots_url(host: str, port: Optional[int] = None) -> str:
    """Canonical robots.txt URL for ``host``; ``port`` only when non-default."""
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    port_part = f":{port}" if port is not None else ""
    return f"http://{host}{port_part}/robots.txt"


class FetchParsePipeline:
    """Produce :class:`HostDirectives` for a host; never raises.

    Args:
        fetcher: Header-first fetcher collaborator.
        user_agent_name: Crawler name selecting the specific rule group.
        max_bytes: Body cap; defaults to the fetcher's ``max_robots_bytes``.
        default_encoding: Used when the response declares no charset.
        clock: Time source stamped onto produced rule sets.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        user_agent_name: str,
        *,
        max_bytes: Optional[int] = None,
        default_encoding: str = "utf-8",
        clock: Clock = time.monotonic,
    ) -> None:
        self.fetcher = fetcher
        self.user_agent_name = user_agent_name
        self.max_bytes = max_bytes if max_bytes is not None else fetcher.max_robots_bytes
        self.default_encoding = default_encoding
        self.clock = clock

    def fetch_directives(self, host: str, port: Optional[int] = None) -> HostDirectives:
        url = robots_url(host, port)
        directives: Optional[HostDirectives] = None
        fetch_result: Optional[FetchResult] = None
        try:
            fetch_result = self.fetcher.fetch_header(url)
            if fetch_result.status_code != HTTP_OK:
                logger.info(
                    "robots.txt at %s returned HTTP %s; allowing all",
                    url,
                    fetch_result.status_code,
                )
            else:
                page = Page(url)
                fetch_result.fetch_content(page, self.max_bytes)
                directives = self._directives_from_page(page)
        except FetchError as exc:
            logger.warning(f"Failed to fetch robots.txt from {url}: {exc}")
        except Exception:
            logger.exception("Unexpected error while fetching robots.txt from %s", url)
        finally:
            if fetch_result is not None:
                fetch_result.discard_content_if_not_consumed()

        if directives is None:
            # Still cached, so the fetch time is tracked and the host is not hammered.
            directives = HostDirectives.empty(clock=self.clock)
        return directives

    def _directives_from_page(self, page: Page) -> Optional[HostDirectives]:
        if not is_plain_text(page.content_type):
            logger.warning(
                "robots.txt at %s has non-text content type %r; allowing all",
                page.url,
                page.content_type,
            )
            return None
        if not page.content_data:
            logger.info("No data received for robots.txt retrieved from URL: %s", page.url)
            return None

        data = page.content_data
        if page.truncated:
            # Drop the partial last line so a cut multi-byte sequence cannot fail decoding.
            cut = data.rfind(b"\n")
            data = data[: cut + 1] if cut >= 0 else data

        encoding = page.content_charset or self.default_encoding
        try:
            content = data.decode(encoding)
            generic, specific = parse(content, self.user_agent_name, clock=self.clock)
        except (UnicodeDecodeError, LookupError, RobotsParseError):
            logger.error(
                "Error occurred while processing robots.txt from %s (encoding=%s)",
                page.url,
                encoding,
                exc_info=True,
            )
            return None
        return HostDirectives(generic=generic, specific=specific)
