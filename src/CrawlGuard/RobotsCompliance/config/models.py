"""
Pydantic v2 Configuration Models for RobotsCompliance

Provides strict, typed configuration for the robots.txt subsystem:
- Robots policy (enable/disable, user-agent name, cache capacity and TTL)
- Fetcher settings (timeouts, redirects, TLS, body cap)
- Top-level CrawlGuardConfig as single source of truth

All models use extra="forbid" for strict validation. Environment variables
and programmatic overrides follow: file < env < overrides precedence.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_AGENT_NAME = "crawlguard"
DEFAULT_CACHE_TTL_SECONDS = 24 * 60 * 60.0
DEFAULT_MAX_ROBOTS_BYTES = 16384


class RobotsConfig(BaseModel):
    """Configuration for robots.txt compliance checks."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    enabled: bool = Field(default=True, description="Enable robots.txt checks")
    user_agent_name: str = Field(
        default=DEFAULT_USER_AGENT_NAME,
        description="Name matched against User-agent lines to select the specific rules",
    )
    cache_max_entries: int = Field(default=500, description="Maximum hosts held in the cache")
    cache_ttl_seconds: float = Field(
        default=DEFAULT_CACHE_TTL_SECONDS, description="Age after which a host is refetched"
    )

    @field_validator("user_agent_name")
    @classmethod
    def validate_user_agent_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("user_agent_name must not be blank")
        return v.strip()

    @field_validator("cache_max_entries")
    @classmethod
    def validate_max_entries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("cache_max_entries must be >= 1")
        return v

    @field_validator("cache_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("cache_ttl_seconds must be > 0")
        return v

    @property
    def ttl(self) -> float:
        """TTL in seconds."""
        return float(self.cache_ttl_seconds)


class FetcherConfig(BaseModel):
    """Configuration for the HTTP fetcher used to retrieve robots.txt."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    user_agent: str = Field(
        default="CrawlGuard/0.1 (+robots.txt compliance)",
        description="User-Agent header sent with robots.txt requests",
    )
    timeout_connect_s: float = Field(default=5.0, description="Connect timeout (seconds)")
    timeout_read_s: float = Field(default=10.0, description="Read timeout (seconds)")
    max_robots_bytes: int = Field(
        default=DEFAULT_MAX_ROBOTS_BYTES, description="Maximum robots.txt body bytes read"
    )
    follow_redirects: bool = Field(default=True, description="Follow 3xx responses")
    max_redirects: int = Field(default=5, description="Redirect hop limit")
    verify_tls: bool = Field(default=True, description="Verify TLS certificates")

    @field_validator("timeout_connect_s", "timeout_read_s")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be > 0")
        return v

    @field_validator("max_robots_bytes")
    @classmethod
    def validate_max_bytes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_robots_bytes must be > 0")
        return v

    @field_validator("max_redirects")
    @classmethod
    def validate_max_redirects(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_redirects must be >= 0")
        return v


class CrawlGuardConfig(BaseModel):
    """
    Single source of truth for CrawlGuard configuration.

    Loaded from file (YAML/JSON), overlaid with environment variables,
    and finally overridden programmatically. Precedence: file < env < overrides.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid", validate_assignment=True)

    robots: RobotsConfig = Field(default_factory=RobotsConfig, description="Robots policy")
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig, description="Fetcher settings")

    def config_hash(self) -> str:
        """
        Compute deterministic SHA256 hash of config for reproducibility.

        Returns:
            Hex-encoded SHA256 hash of normalized config JSON.
        """
        import hashlib
        import json

        normalized = json.dumps(self.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(normalized.encode()).hexdigest()


__all__ = [
    "RobotsConfig",
    "FetcherConfig",
    "CrawlGuardConfig",
    "DEFAULT_CACHE_TTL_SECONDS",
    "DEFAULT_MAX_ROBOTS_BYTES",
    "DEFAULT_USER_AGENT_NAME",
]
