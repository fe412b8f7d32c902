# === NAVMAP v1 ===
# {
#   "module": "CrawlGuard.RobotsCompliance.errors",
#   "purpose": "Exception taxonomy for robots.txt fetching, parsing and configuration.",
#   "sections": [
#     {"id": "robotserror", "name": "RobotsError", "anchor": "class-robotserror", "kind": "class"},
#     {"id": "fetcherror", "name": "FetchError", "anchor": "class-fetcherror", "kind": "class"},
#     {"id": "robotsparseerror", "name": "RobotsParseError", "anchor": "class-robotsparseerror", "kind": "class"},
#     {"id": "configerror", "name": "ConfigError", "anchor": "class-configerror", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Exception taxonomy for robots.txt compliance.

Responsibilities
----------------
- Give the fetcher and parser collaborators typed failures that carry
  enough context (URL, line number) for log messages.
- Keep every failure inside the pipeline boundary: :class:`FetchError` and
  :class:`RobotsParseError` are raised by collaborators and absorbed by
  :mod:`CrawlGuard.RobotsCompliance.pipeline`, which falls back to
  permissive directives. Callers of ``RobotsServer.allows`` never see them.
"""

from __future__ import annotations

from typing import Any

__all__ = (
    "RobotsError",
    "FetchError",
    "RobotsParseError",
    "ConfigError",
)


class RobotsError(Exception):
    """Base class for robots compliance failures."""


class FetchError(RobotsError):
    """Raised when robots.txt cannot be retrieved (transport error or timeout)."""

    def __init__(
        self, message: str, *, url: str | None = None, details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.url = url
        self.details = details or {}


class RobotsParseError(RobotsError):
    """Raised when fetched text cannot be interpreted as robots.txt."""

    def __init__(self, message: str, *, line_number: int | None = None):
        super().__init__(message)
        self.line_number = line_number


class ConfigError(RobotsError, ValueError):
    """Raised when a configuration file cannot be read or decoded."""
