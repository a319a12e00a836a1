"""Regular-expression rules matched in order against host names."""

from __future__ import annotations

import re
from typing import Iterator

__all__ = ["Rule", "RuleSet"]


class Rule:
    """A pattern that matches anywhere in a host name."""

    def __init__(self, pattern: str | None = None) -> None:
        self.pattern = pattern
        self._regex: re.Pattern[str] | None = None

    def accept_arg(self, arg: str) -> None:
        """Take ``arg`` as the pattern; raise ValueError if one is already set."""
        if self.pattern is not None:
            raise ValueError(f"Unexpected table rule argument: {arg}")
        self.pattern = arg

    def compile(self) -> None:
        """Compile the pattern once; raise ValueError if it is invalid or missing."""
        if self._regex is not None:
            return
        if self.pattern is None:
            raise ValueError("rule has no pattern")
        try:
            self._regex = re.compile(self.pattern)
        except re.error as exc:
            raise ValueError(
                f"regex compilation failed at offset {exc.pos}: {exc.msg}"
            ) from exc

    def matches(self, name: str | None) -> bool:
        """Return True if the pattern matches somewhere in ``name`` (None is "")."""
        self.compile()
        return self._regex.search(name or "") is not None

    def __repr__(self) -> str:
        return f"Rule({self.pattern!r})"


class RuleSet:
    """Rules kept in the order they were added."""

    def __init__(self) -> None:
        self._rules: list[Rule] = []

    def add(self, rule: Rule) -> None:
        """Append ``rule`` after the existing rules."""
        self._rules.append(rule)

    def lookup(self, name: str | None) -> Rule | None:
        """Return the first rule matching ``name``, or None."""
        for rule in self._rules:
            if rule.matches(name):
                return rule
        return None

    def remove(self, rule: Rule) -> None:
        """Remove ``rule``; raise ValueError if it is not in the set."""
        for position, item in enumerate(self._rules):
            if item is rule:
                del self._rules[position]
                return
        raise ValueError("rule is not in the set")

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)