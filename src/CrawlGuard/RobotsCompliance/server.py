# === NAVMAP v1 ===
# {
#   "module": "CrawlGuard.RobotsCompliance.server",
#   "purpose": "Public allow/deny entry point for crawler URL dispatch",
#   "sections": [
#     {"id": "robotsserver", "name": "RobotsServer", "anchor": "class-robotsserver", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Public allow/deny entry point for a crawler's URL dispatch path.

:class:`RobotsServer` answers "may this crawler fetch this URL?" by
resolving the URL's host and path, looking the host up in a
:class:`~CrawlGuard.RobotsCompliance.cache.DirectiveCache` and evaluating
the cached :class:`~CrawlGuard.RobotsCompliance.rules.HostDirectives`.

Rules are matched against the path *and* query string (``/search?q=x``),
not the path alone, so ``Disallow: /search?q=`` can target query URLs.

Every failure resolves to *allowed*: a disabled policy, an unparsable or
non-HTTP URL, and anything the fetch pipeline absorbs. Callers only ever see
``True`` or ``False``.

Example::

    >>> config = load_config(overrides={"robots": {"user_agent_name": "MyBot"}})
    >>> with RobotsServer(config) as robots:
    ...     if robots.allows("https://example.com/articles/1"):
    ...         ...
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Union
from urllib.parse import urlsplit

import httpx

from .cache import DirectiveCache
from .config.models import CrawlGuardConfig
from .net.fetcher import PageFetcher
from .pipeline import FetchParsePipeline

__all__ = ["RobotsServer", "TargetLocation", "split_target"]

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}


class TargetLocation(NamedTuple):
    host: str
    port: Optional[int]
    path: str


def split_target(url: Union[str, httpx.URL]) -> Optional[TargetLocation]:
    """Split ``url`` into lower-cased host, non-default port and path.

    Returns ``None`` for URLs robots.txt does not govern (non-HTTP schemes,
    missing host).

    Raises:
        ValueError: If ``url`` is malformed (bad port, broken IPv6 literal).
    """
    parts = urlsplit(str(url).strip())
    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        return None
    host = parts.hostname
    if not host:
        return None

    port = parts.port
    if port == DEFAULT_PORTS[scheme]:
        port = None

    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return TargetLocation(host=host.lower(), port=port, path=path)


class RobotsServer:
    """Robots exclusion checks backed by a shared directive cache.

    Args:
        config: Top-level configuration.
        fetcher: Optional fetcher; built from ``config.fetcher`` when omitted
            and then owned (closed by :meth:`close`).
        pipeline: Optional pre-built fetch/parse pipeline.
        cache: Optional pre-built cache; when given, ``pipeline`` and
            ``fetcher`` are not used.
    """

    def __init__(
        self,
        config: Optional[CrawlGuardConfig] = None,
        *,
        fetcher: Optional[PageFetcher] = None,
        pipeline: Optional[FetchParsePipeline] = None,
        cache: Optional[DirectiveCache] = None,
    ) -> None:
        self.config = config or CrawlGuardConfig()
        robots = self.config.robots
        self._owned_fetcher: Optional[PageFetcher] = None

        if cache is None:
            if pipeline is None:
                if fetcher is None:
                    fetcher = self._owned_fetcher = PageFetcher(self.config.fetcher)
                pipeline = FetchParsePipeline(
                    fetcher,
                    robots.user_agent_name,
                    max_bytes=self.config.fetcher.max_robots_bytes,
                )
            cache = DirectiveCache(pipeline, robots.cache_max_entries, robots.ttl)
        self.cache = cache

    @property
    def is_enabled(self) -> bool:
        return self.config.robots.enabled

    def allows(self, url: Union[str, httpx.URL]) -> bool:
        """Return whether the crawler may fetch ``url``.

        ``True`` when robots checks are disabled, when ``url`` is malformed or
        not an HTTP(S) URL, and whenever robots.txt could not be obtained.
        """
        if not self.is_enabled:
            return True

        try:
            target = split_target(url)
        except ValueError as exc:
            logger.warning("Malformed URL %r; allowing: %s", url, exc)
            return True
        if target is None:
            return True

        directives = self.cache.get(target.host, target.port)
        allowed = directives.allows(target.path)
        if not allowed:
            logger.debug("robots.txt disallows %s for %s", url, self.config.robots.user_agent_name)
        return allowed

    def close(self) -> None:
        if self._owned_fetcher is not None:
            self._owned_fetcher.close()
            self._owned_fetcher = None

    def __enter__(self) -> RobotsServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
