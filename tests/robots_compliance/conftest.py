"""Shared fixtures for RobotsCompliance tests."""

from __future__ import annotations

import os
from typing import Iterator

import httpx
import pytest

from CrawlGuard.RobotsCompliance.config.models import FetcherConfig
from CrawlGuard.RobotsCompliance.net.client import build_http_client
from CrawlGuard.RobotsCompliance.net.fetcher import PageFetcher
from tests.robots_compliance.fakes import FakeClock, RobotsSite, StubPipeline


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def site() -> RobotsSite:
    return RobotsSite()


@pytest.fixture
def fetcher_config() -> FetcherConfig:
    return FetcherConfig(user_agent="TestBot/1.0 (+tests)")


@pytest.fixture
def fetcher(site: RobotsSite, fetcher_config: FetcherConfig) -> Iterator[PageFetcher]:
    """PageFetcher whose client talks to ``site`` instead of the network."""

    client = build_http_client(fetcher_config, transport=httpx.MockTransport(site.handler))
    page_fetcher = PageFetcher(fetcher_config, client=client)
    yield page_fetcher
    client.close()


@pytest.fixture
def stub_pipeline(clock: FakeClock) -> StubPipeline:
    return StubPipeline(clock)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CRAWLGUARD_* variables from the host environment out of tests."""

    for key in list(os.environ):
        if key.startswith("CRAWLGUARD_"):
            monkeypatch.delenv(key, raising=False)
