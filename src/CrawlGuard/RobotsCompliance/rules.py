# === NAVMAP v1 ===
# {
#   "module": "CrawlGuard.RobotsCompliance.rules",
#   "purpose": "Immutable allow/disallow rule sets and the per-host generic/specific pair.",
#   "sections": [
#     {"id": "rule", "name": "Rule", "anchor": "class-rule", "kind": "class"},
#     {"id": "directiveruleset", "name": "DirectiveRuleSet", "anchor": "class-directiveruleset", "kind": "class"},
#     {"id": "hostdirectives", "name": "HostDirectives", "anchor": "class-hostdirectives", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Allow/disallow rule sets and the per-host directive pair.

**Responsibilities**
--------------------
- :class:`DirectiveRuleSet` stores the ordered path-prefix rules produced by
  the parser for one user-agent group, plus a creation timestamp and a
  last-access timestamp. Rule content never changes after construction.
- :class:`HostDirectives` pairs the ``generic`` (``*``) and ``specific``
  (crawler's own name) rule sets of one host and combines their decisions.

**Timestamps**
--------------
Both timestamps come from the rule set's ``clock`` (``time.monotonic`` by
default). ``touch()`` is a single attribute store and needs no lock: the
last-access time only ranks entries for eviction, so a lost update is
harmless.

**Combination**
---------------
``HostDirectives.allows`` grants access when *either* side allows the path.
A path is blocked only when both rule sets deny it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable, NamedTuple, Optional, Sequence, Tuple

__all__ = ["Clock", "Rule", "DirectiveRuleSet", "HostDirectives"]

Clock = Callable[[], float]


class Rule(NamedTuple):
    """One ``Allow``/``Disallow`` line: a path prefix and its verdict."""

    allow: bool
    path: str

    def matches(self, path: str) -> bool:
        return path.startswith(self.path)


class DirectiveRuleSet:
    """Ordered path-prefix rules for a single user-agent group.

    The longest matching prefix decides; on equal length ``Allow`` wins.
    A path no rule matches is allowed, so an empty rule set allows
    everything.
    """

    __slots__ = ("_rules", "_clock", "created_at", "_last_access", "sitemaps", "crawl_delay")

    def __init__(
        self,
        rules: Iterable[Rule] = (),
        *,
        sitemaps: Sequence[str] = (),
        crawl_delay: Optional[float] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._rules: Tuple[Rule, ...] = tuple(rules)
        self._clock = clock
        self.created_at = clock()
        self._last_access = self.created_at
        self.sitemaps: Tuple[str, ...] = tuple(sitemaps)
        self.crawl_delay = crawl_delay

    @classmethod
    def empty(cls, *, clock: Clock = time.monotonic) -> DirectiveRuleSet:
        """Permissive rule set used when robots.txt is missing or unusable."""
        return cls((), clock=clock)

    @classmethod
    def parse_from(
        cls, text: str, user_agent_name: str = "*", *, clock: Clock = time.monotonic
    ) -> DirectiveRuleSet:
        """Parse ``text`` and return the rules that apply to ``user_agent_name``.

        Raises:
            RobotsParseError: If ``text`` cannot be read as robots.txt.
        """
        from .parser import parse

        _generic, specific = parse(text, user_agent_name, clock=clock)
        return specific

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    @property
    def last_access(self) -> float:
        return self._last_access

    def is_empty(self) -> bool:
        return not self._rules

    def allows(self, path: str) -> bool:
        best: Optional[Rule] = None
        for rule in self._rules:
            if not rule.matches(path):
                continue
            if (
                best is None
                or len(rule.path) > len(best.path)
                or (len(rule.path) == len(best.path) and rule.allow)
            ):
                best = rule
        return True if best is None else best.allow

    def touch(self) -> None:
        self._last_access = self._clock()

    def needs_refetch(self, ttl: float) -> bool:
        """True once the rule set is older than ``ttl`` seconds."""
        return self._clock() - self.created_at > ttl

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"DirectiveRuleSet(rules={len(self._rules)}, created_at={self.created_at:.3f})"


@dataclass(frozen=True)
class HostDirectives:
    """Generic and crawler-specific rule sets for one host.

    Both halves are always present and are replaced together on refetch.
    """

    generic: DirectiveRuleSet
    specific: DirectiveRuleSet

    @classmethod
    def empty(cls, *, clock: Clock = time.monotonic) -> HostDirectives:
        """Allow-everything directives, cached after fetch or parse failures."""
        return cls(DirectiveRuleSet.empty(clock=clock), DirectiveRuleSet.empty(clock=clock))

    @classmethod
    def parse_from(
        cls, text: str, user_agent_name: str, *, clock: Clock = time.monotonic
    ) -> HostDirectives:
        """Build both halves from robots.txt ``text``.

        Raises:
            RobotsParseError: If ``text`` cannot be read as robots.txt.
        """
        from .parser import parse

        generic, specific = parse(text, user_agent_name, clock=clock)
        return cls(generic=generic, specific=specific)

    def allows(self, path: str) -> bool:
        return self.specific.allows(path) or self.generic.allows(path)

    def needs_refetch(self, ttl: float) -> bool:
        # Both halves are created together; the specific side's age stands for both.
        return self.specific.needs_refetch(ttl)

    def record_access(self) -> None:
        self.specific.touch()
        self.generic.touch()

    def last_access_time(self) -> float:
        return max(self.specific.last_access, self.generic.last_access)

    def is_empty(self) -> bool:
        return self.generic.is_empty() and self.specific.is_empty()
