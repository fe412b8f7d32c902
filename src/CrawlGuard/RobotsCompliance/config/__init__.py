"""Configuration models and loading for RobotsCompliance."""

from __future__ import annotations

from .loader import ENV_PREFIX, export_config_schema, load_config
from .models import CrawlGuardConfig, FetcherConfig, RobotsConfig

__all__ = [
    "CrawlGuardConfig",
    "FetcherConfig",
    "RobotsConfig",
    "ENV_PREFIX",
    "load_config",
    "export_config_schema",
]
