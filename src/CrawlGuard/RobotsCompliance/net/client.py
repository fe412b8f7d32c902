"""
HTTPX client construction for robots.txt fetches.

The fetcher owns a single :class:`httpx.Client` built from
:class:`~CrawlGuard.RobotsCompliance.config.models.FetcherConfig`:
explicit timeouts, redirect policy, TLS verification and a polite
User-Agent header.
"""

from __future__ import annotations

import logging

import httpx

from ..config.models import FetcherConfig

logger = logging.getLogger(__name__)


def build_timeout(cfg: FetcherConfig) -> httpx.Timeout:
    """Connect/read/write/pool timeouts for one robots.txt round trip."""
    return httpx.Timeout(
        cfg.timeout_read_s,
        connect=cfg.timeout_connect_s,
        read=cfg.timeout_read_s,
    )


def build_http_client(
    cfg: FetcherConfig, *, transport: httpx.BaseTransport | None = None
) -> httpx.Client:
    """Build a new HTTPX client from fetcher config."""
    client = httpx.Client(
        transport=transport,
        timeout=build_timeout(cfg),
        follow_redirects=cfg.follow_redirects,
        max_redirects=cfg.max_redirects,
        verify=cfg.verify_tls,
        headers={
            "User-Agent": cfg.user_agent,
            "Accept": "text/plain, */*;q=0.5",
        },
    )
    logger.debug(
        "Created HTTPX client (follow_redirects=%s, connect=%.1fs, read=%.1fs)",
        cfg.follow_redirects,
        cfg.timeout_connect_s,
        cfg.timeout_read_s,
    )
    return client


__all__ = ["build_http_client", "build_timeout"]
