from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Tuple

from .exceptions import ConfigError


@dataclass(frozen=True)
class Ruleset:
    """
    Immutable, compiled form of the detector rules.

    Precedence:
    1. Empty User-Agent -> reject_if_empty
    2. Exact allowlist member -> not a bot (beats deny and patterns)
    3. Exact denylist member -> bot (beats patterns)
    4. Any pattern found anywhere in the value -> bot
    5. Otherwise -> not a bot

    Values are compared exactly as received: no case folding, no trimming.
    """

    denylist: FrozenSet[str] = frozenset()
    allowlist: FrozenSet[str] = frozenset()
    patterns: Tuple[re.Pattern, ...] = ()
    reject_if_empty: bool = False

    def first_match(self, user_agent: str) -> Optional[str]:
        """Return the source of the first pattern found in user_agent, if any."""
        for pattern in self.patterns:
            if pattern.search(user_agent):
                return pattern.pattern
        return None


def compile_ruleset(
    deny: Iterable[str] = (),
    allow: Iterable[str] = (),
    patterns: Iterable[str] = (),
    reject_if_empty: bool = False,
) -> Ruleset:
    """
    Compile raw rule lists into a Ruleset.

    Patterns keep their declaration order. A single invalid pattern aborts
    the whole build.

    Raises:
        ConfigError: If a pattern is not a valid regular expression
    """
    compiled = []
    for raw in patterns:
        try:
            compiled.append(re.compile(raw))
        except re.error as e:
            raise ConfigError(f"invalid pattern {raw!r}: {e}") from e

    return Ruleset(
        denylist=frozenset(deny),
        allowlist=frozenset(allow),
        patterns=tuple(compiled),
        reject_if_empty=reject_if_empty,
    )


def classify(ruleset: Ruleset, user_agent: str) -> bool:
    """Return True if user_agent belongs to a bot. Pure function."""
    if not user_agent:
        return ruleset.reject_if_empty

    if user_agent in ruleset.allowlist:
        return False

    if user_agent in ruleset.denylist:
        return True

    return any(pattern.search(user_agent) for pattern in ruleset.patterns)
