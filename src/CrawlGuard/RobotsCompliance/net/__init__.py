"""
Network layer for RobotsCompliance.

Provides the HTTPX client factory and the header-first fetcher used to
retrieve robots.txt.
"""

from .client import build_http_client, build_timeout
from .fetcher import FetchResult, Page, PageFetcher

__all__ = [
    "build_http_client",
    "build_timeout",
    "FetchResult",
    "Page",
    "PageFetcher",
]
