"""robots.txt parsing into generic and crawler-specific rule sets.

:func:`parse` walks the file once and sorts every ``Allow``/``Disallow``
line into the group(s) it belongs to:

- groups whose ``User-agent`` is ``*`` feed the **generic** rule set;
- groups whose ``User-agent`` token names this crawler feed the
  **specific** rule set (case-insensitive containment in either direction,
  so ``mybot`` matches a crawler called ``MyBot/2.1``).

When the file has no group for this crawler, the specific side *is* the
generic rule set, so a ``*`` group binds the crawler like any other.

Comments, blank lines, HTML tags left behind by misconfigured servers and
unknown directives are skipped. ``Sitemap`` URLs and ``Crawl-delay`` values
are kept as informational attributes.
"""

from __future__ import annotations

import logging
import re
import time
from typing import List, Optional, Tuple

from .errors import RobotsParseError
from .rules import Clock, DirectiveRuleSet, Rule

logger = logging.getLogger(__name__)

__all__ = ["parse", "WILDCARD_AGENT"]

WILDCARD_AGENT = "*"

_LINE_SPLIT = re.compile(r"[\r\n]+")
_TAG = re.compile(r"<[^>]+>")


class _Side:
    """Rules accumulated for one half of the result."""

    def __init__(self) -> None:
        self.rules: List[Rule] = []
        self.crawl_delay: Optional[float] = None
        self.seen = False


def _agent_targets(agents: List[str], user_agent_name: str) -> Tuple[bool, bool]:
    """Return whether a group with ``agents`` feeds the (generic, specific) side."""
    generic = WILDCARD_AGENT in agents
    specific = False
    if user_agent_name != WILDCARD_AGENT:
        for agent in agents:
            if agent and agent != WILDCARD_AGENT and (
                agent in user_agent_name or user_agent_name in agent
            ):
                specific = True
                break
    return generic, specific


def _clean_path(value: str) -> str:
    path = value.split()[0] if value else ""
    return path.rstrip("*")


def parse(
    text: str, user_agent_name: str, *, clock: Clock = time.monotonic
) -> Tuple[DirectiveRuleSet, DirectiveRuleSet]:
    """Parse robots.txt ``text`` for the crawler called ``user_agent_name``.

    Args:
        text: Decoded robots.txt body.
        user_agent_name: Crawler name used to pick the specific group.
        clock: Time source stamped onto the returned rule sets.

    Returns:
        ``(generic, specific)`` rule sets. ``specific`` is the generic rule
        set when no group names the crawler.

    Raises:
        RobotsParseError: If ``text`` is not a string or contains NUL
            characters (binary content served as text).
    """
    if not isinstance(text, str):
        raise RobotsParseError(f"robots.txt content must be str, got {type(text).__name__}")

    name = user_agent_name.strip().lower() or WILDCARD_AGENT
    generic = _Side()
    specific = _Side()
    sitemaps: List[str] = []

    agents: List[str] = []
    in_rules = False
    targets = (False, False)

    for line_number, raw_line in enumerate(_LINE_SPLIT.split(text.lstrip("\ufeff")), start=1):
        if "\x00" in raw_line:
            raise RobotsParseError("NUL character in robots.txt", line_number=line_number)

        line = raw_line.split("#", 1)[0]
        line = _TAG.sub("", line).strip()
        if not line or ":" not in line:
            continue

        key, _, value = line.partition(":")
        key = key.strip().lower()
        value = value.strip()

        if key == "user-agent":
            if in_rules:
                agents = []
                in_rules = False
            agents.append(value.lower())
            targets = _agent_targets(agents, name)
            if targets[1]:
                specific.seen = True
            continue

        if key in ("allow", "disallow"):
            in_rules = True
            path = _clean_path(value)
            if not path:
                continue
            rule = Rule(allow=key == "allow", path=path)
            if targets[0]:
                generic.rules.append(rule)
            if targets[1]:
                specific.rules.append(rule)
        elif key == "crawl-delay":
            in_rules = True
            try:
                delay = float(value)
            except ValueError:
                logger.debug("Ignoring invalid Crawl-delay %r on line %d", value, line_number)
                continue
            if targets[0]:
                generic.crawl_delay = delay
            if targets[1]:
                specific.crawl_delay = delay
        elif key == "sitemap" and value:
            sitemaps.append(value)

    generic_set = DirectiveRuleSet(
        generic.rules, sitemaps=sitemaps, crawl_delay=generic.crawl_delay, clock=clock
    )
    if not specific.seen:
        return generic_set, generic_set
    specific_set = DirectiveRuleSet(
        specific.rules, sitemaps=sitemaps, crawl_delay=specific.crawl_delay, clock=clock
    )
    return generic_set, specific_set
