"""
Robots exclusion compliance for crawlers.

Answers "may this crawler fetch this URL?" using a bounded, thread-safe
per-host cache of robots.txt directives with TTL refetch and LRU eviction.
Any failure to obtain or read robots.txt resolves to *allowed*.

Entry points:
- :class:`RobotsServer`: ``allows(url)`` for the crawler's dispatch path
- :func:`load_config`: file < env < overrides configuration
"""

from .cache import CacheStats, DirectiveCache
from .config import CrawlGuardConfig, FetcherConfig, RobotsConfig, load_config
from .errors import ConfigError, FetchError, RobotsError, RobotsParseError
from .net import FetchResult, Page, PageFetcher
from .parser import parse
from .pipeline import FetchParsePipeline, robots_url
from .rules import DirectiveRuleSet, HostDirectives, Rule
from .server import RobotsServer, split_target

__all__ = [
    "CacheStats",
    "ConfigError",
    "CrawlGuardConfig",
    "DirectiveCache",
    "DirectiveRuleSet",
    "FetchError",
    "FetchParsePipeline",
    "FetchResult",
    "FetcherConfig",
    "HostDirectives",
    "Page",
    "PageFetcher",
    "RobotsConfig",
    "RobotsError",
    "RobotsParseError",
    "RobotsServer",
    "Rule",
    "load_config",
    "parse",
    "robots_url",
    "split_target",
]
