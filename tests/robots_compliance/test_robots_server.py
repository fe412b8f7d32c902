"""End-to-end tests for RobotsServer.allows() over a mocked robots.txt site.

Covers:
- Disabled policy short-circuits without network access
- Generic/specific precedence on real robots.txt bodies
- Fail-open on non-OK statuses, malformed and non-HTTP URLs
- Host normalisation, ports and query strings
"""

from __future__ import annotations

import httpx
import pytest

from CrawlGuard.RobotsCompliance.cache import DirectiveCache
from CrawlGuard.RobotsCompliance.config.models import CrawlGuardConfig, RobotsConfig
from CrawlGuard.RobotsCompliance.net.fetcher import PageFetcher
from CrawlGuard.RobotsCompliance.server import RobotsServer, TargetLocation, split_target
from tests.robots_compliance.fakes import RobotsSite

ROBOTS = "http://example.com/robots.txt"


def _config(**robots: object) -> CrawlGuardConfig:
    settings = {"user_agent_name": "MyBot", **robots}
    return CrawlGuardConfig(robots=RobotsConfig(**settings))


@pytest.fixture
def server(fetcher: PageFetcher) -> RobotsServer:
    return RobotsServer(_config(), fetcher=fetcher)


class TestDisabledPolicy:
    def test_disabled_allows_everything_without_fetching(
        self, site: RobotsSite, fetcher: PageFetcher
    ) -> None:
        site.serve(ROBOTS, "User-agent: *\nDisallow: /\n")
        server = RobotsServer(_config(enabled=False), fetcher=fetcher)

        assert server.is_enabled is False
        assert server.allows("http://example.com/")
        assert server.allows("http://example.com/private")
        assert server.allows("not even a url")
        assert site.requests == []
        assert len(server.cache) == 0


class TestPrecedence:
    """Generic/specific combination on parsed robots.txt."""

    def test_wildcard_rule_blocks_crawler_without_own_group(
        self, site: RobotsSite, server: RobotsServer
    ) -> None:
        site.serve(ROBOTS, "User-agent: *\nDisallow: /private\n")

        assert server.allows("http://example.com/private/x") is False
        assert server.allows("http://example.com/public") is True

    def test_specific_allow_overrides_generic_disallow(
        self, site: RobotsSite, server: RobotsServer
    ) -> None:
        site.serve(ROBOTS, "User-agent: *\nDisallow: /\n\nUser-agent: MyBot\nAllow: /\n")

        assert server.allows("http://example.com/page")

    def test_either_side_allowing_is_enough(self, site: RobotsSite, server: RobotsServer) -> None:
        site.serve(ROBOTS, "User-agent: MyBot\nDisallow: /a\n\nUser-agent: *\nDisallow: /b\n")

        assert server.allows("http://example.com/a")
        assert server.allows("http://example.com/b")

    def test_blocked_when_both_sides_deny(self, site: RobotsSite, server: RobotsServer) -> None:
        site.serve(ROBOTS, "User-agent: MyBot\nDisallow: /x\n\nUser-agent: *\nDisallow: /x\n")

        assert not server.allows("http://example.com/x/1")

    def test_query_string_matched(self, site: RobotsSite, server: RobotsServer) -> None:
        site.serve(ROBOTS, "User-agent: *\nDisallow: /search?q=\n")

        assert not server.allows("http://example.com/search?q=robots")
        assert server.allows("http://example.com/search")


class TestFailOpen:
    def test_not_found_allows_and_is_cached(self, site: RobotsSite, server: RobotsServer) -> None:
        site.serve("http://x.example/robots.txt", "", status=404)

        assert server.allows("http://x.example/")
        assert server.allows("http://x.example/admin/secret")
        assert server.allows("https://x.example/other")

        assert site.requested_urls() == ["http://x.example/robots.txt"]
        cached = server.cache.peek("x.example")
        assert cached is not None and cached.is_empty()

    def test_server_error_allows_every_path(self, site: RobotsSite, server: RobotsServer) -> None:
        site.serve(ROBOTS, "User-agent: *\nDisallow: /\n", status=500)

        for path in ("/", "/a", "/a/b?c=d"):
            assert server.allows(f"http://example.com{path}")

    def test_network_error_allows(self, site: RobotsSite, server: RobotsServer) -> None:
        site.fail(ROBOTS, lambda request: httpx.ConnectError("refused", request=request))

        assert server.allows("http://example.com/private")

    @pytest.mark.parametrize(
        "url",
        [
            "http://example.com:99999/page",
            "http://[::1/page",
            "ftp://example.com/private",
            "mailto:someone@example.com",
            "/relative/path",
            "http:///no-host",
        ],
    )
    def test_unusable_urls_allowed_without_fetch(
        self, site: RobotsSite, server: RobotsServer, url: str
    ) -> None:
        site.serve(ROBOTS, "User-agent: *\nDisallow: /\n")

        assert server.allows(url) is True
        assert site.requests == []


class TestTargetResolution:
    def test_host_lower_cased_for_cache_key(self, site: RobotsSite, server: RobotsServer) -> None:
        site.serve(ROBOTS, "User-agent: *\nDisallow: /private\n")

        assert not server.allows("http://EXAMPLE.com/private")
        assert not server.allows("http://example.COM/private")
        assert len(site.requests) == 1
        assert "example.com" in server.cache

    def test_non_default_port_used_for_robots_url(
        self, site: RobotsSite, server: RobotsServer
    ) -> None:
        site.serve("http://example.com:8080/robots.txt", "User-agent: *\nDisallow: /\n")

        assert not server.allows("http://example.com:8080/page")
        assert site.requested_urls() == ["http://example.com:8080/robots.txt"]

    def test_https_default_port_dropped(self, site: RobotsSite, server: RobotsServer) -> None:
        site.serve(ROBOTS, "User-agent: *\nDisallow: /\n")

        assert not server.allows("https://example.com:443/page")
        assert site.requested_urls() == [ROBOTS]

    def test_httpx_url_accepted(self, site: RobotsSite, server: RobotsServer) -> None:
        site.serve(ROBOTS, "User-agent: *\nDisallow: /private\n")

        assert not server.allows(httpx.URL("http://example.com/private"))

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("http://Example.com", TargetLocation("example.com", None, "/")),
            ("https://example.com:8443/a?b=c", TargetLocation("example.com", 8443, "/a?b=c")),
            ("http://example.com:80/x", TargetLocation("example.com", None, "/x")),
            ("gopher://example.com/x", None),
        ],
    )
    def test_split_target(self, url: str, expected: TargetLocation | None) -> None:
        assert split_target(url) == expected

    def test_split_target_rejects_bad_port(self) -> None:
        with pytest.raises(ValueError):
            split_target("http://example.com:port/")


class TestComposition:
    def test_cache_sized_from_config(self, fetcher: PageFetcher) -> None:
        server = RobotsServer(
            _config(cache_max_entries=3, cache_ttl_seconds=60), fetcher=fetcher
        )

        assert server.cache.max_entries == 3
        assert server.cache.ttl == 60
        assert server.cache.pipeline.user_agent_name == "MyBot"

    def test_cache_eviction_through_server(self, site: RobotsSite, fetcher: PageFetcher) -> None:
        server = RobotsServer(_config(cache_max_entries=2), fetcher=fetcher)

        for host in ("a.example", "b.example", "c.example"):
            server.allows(f"http://{host}/")

        assert len(server.cache) == 2

    def test_injected_cache_used(self, site: RobotsSite, fetcher: PageFetcher) -> None:
        base = RobotsServer(_config(), fetcher=fetcher)
        cache: DirectiveCache = base.cache
        other = RobotsServer(_config(), cache=cache)

        other.allows("http://example.com/")

        assert other.cache is cache
        assert "example.com" in cache

    def test_owned_fetcher_closed_on_exit(self) -> None:
        with RobotsServer(_config()) as server:
            fetcher = server._owned_fetcher
            assert fetcher is not None

        assert fetcher._client.is_closed
