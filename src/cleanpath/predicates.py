from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

CONTAINS = "matches"
STARTS = "starts"
ENDS = "ends"

KINDS = (CONTAINS, STARTS, ENDS)


@dataclass(frozen=True)
class SubstringPredicate:
    kind: str  # "matches" | "starts" | "ends"
    pattern: str

    def matches(self, subject: str) -> bool:
        if self.kind == CONTAINS:
            return self.pattern in subject
        if self.kind == STARTS:
            return subject.find(self.pattern) == 0
        if self.kind == ENDS:
            # A pattern longer than the subject can never sit at its end.
            offset = len(subject) - len(self.pattern)
            if offset < 0:
                return False
            return subject.find(self.pattern, offset) == offset
        raise ValueError(f"unknown predicate kind '{self.kind}'")

    def describe(self) -> str:
        verb = {CONTAINS: "matched", STARTS: "began with", ENDS: "ended with"}[self.kind]
        return f"{verb} '{self.pattern}'"


def first_match(predicates: Iterable[SubstringPredicate], subject: str) -> SubstringPredicate | None:
    """Return the first predicate (in configured order) that matches ``subject``."""
    for p in predicates:
        if p.matches(subject):
            return p
    return None


def predicates_for(kind: str, patterns: Iterable[str]) -> tuple[SubstringPredicate, ...]:
    if kind not in KINDS:
        raise ValueError(f"unknown predicate kind '{kind}'")
    return tuple(SubstringPredicate(kind=kind, pattern=p) for p in patterns)
