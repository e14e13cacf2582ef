from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .config import UnsetPredicates
from .log import debug, verbose
from .predicates import CONTAINS, ENDS, STARTS, SubstringPredicate, first_match, predicates_for
from .shells import set_line, unset_line


@dataclass(frozen=True)
class UnsetMatch:
    name: str
    subject: str  # "name" | "value"
    predicate: SubstringPredicate

    def describe(self) -> str:
        if self.subject == "name":
            return f"'{self.name}' {self.predicate.describe()}"
        return f"{self.name}'s value {self.predicate.describe()}"


class UnsetFilter:
    """Decides which environment variables to unset."""

    def __init__(self, preds: UnsetPredicates):
        self.preds = preds
        self._name = (
            predicates_for(CONTAINS, preds.name_matches)
            + predicates_for(STARTS, preds.name_starts)
            + predicates_for(ENDS, preds.name_ends)
        )
        self._value = (
            predicates_for(CONTAINS, preds.value_matches)
            + predicates_for(STARTS, preds.value_starts)
            + predicates_for(ENDS, preds.value_ends)
        )

    def unset_name_if(self, name: str) -> UnsetMatch | None:
        debug(' - Checking env_name="%s"', name)
        hit = first_match(self._name, name)
        return UnsetMatch(name=name, subject="name", predicate=hit) if hit else None

    def unset_value_if(self, name: str, value: str) -> UnsetMatch | None:
        debug(' - Checking env_name="%s", env_value="%s"', name, value)
        hit = first_match(self._value, value)
        return UnsetMatch(name=name, subject="value", predicate=hit) if hit else None

    def decide(self, name: str, value: str) -> UnsetMatch | None:
        """Name predicates first, then value predicates; first hit wins."""
        if self.preds.checks_name:
            m = self.unset_name_if(name)
            if m is not None:
                return m
        if self.preds.checks_value:
            return self.unset_value_if(name, value)
        return None


def unset_lines(
    environ: Iterable[tuple[str, str]],
    preds: UnsetPredicates,
    *,
    shell: str = "bash",
    output_unchanged: bool = False,
) -> list[str]:
    """Shell commands for one pass over ``environ`` (name, value) pairs, in order."""
    flt = UnsetFilter(preds)
    out: list[str] = []
    for name, value in environ:
        m = flt.decide(name, value)
        if m is not None:
            verbose(1, "%s", m.describe())
            out.append(unset_line(shell, name))
        elif output_unchanged:
            out.append(set_line(shell, name, value))
    return out
