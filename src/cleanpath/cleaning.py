from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from .config import COMMON_PATHS
from .log import debug, verbose
from .normalizer import PathNormalizer
from .shells import set_line


@dataclass(frozen=True)
class CleanResult:
    name: str
    old: str | None
    new: str

    @property
    def was_unset(self) -> bool:
        return self.old is None

    @property
    def changed(self) -> bool:
        return self.old is not None and self.old != self.new


def clean_variable(name: str, value: str | None, normalizer: PathNormalizer) -> CleanResult:
    if value is None:
        verbose(3, 'OLD %s="" # was unset', name)
        return CleanResult(name=name, old=None, new="")

    verbose(3, 'OLD %s="%s"', name, value)
    new = normalizer.normalize(value)
    verbose(3, 'NEW %s="%s"', name, new)
    return CleanResult(name=name, old=value, new=new)


def select_variables(
    names: Iterable[str],
    environ: Mapping[str, str],
    *,
    all_paths: bool = False,
    common_paths: bool = False,
) -> list[str]:
    """Which variables to clean, in processing order.

    All ``*PATH`` variables first (-A), then the common list (-C), then the
    names given on the command line. Defaults to ``PATH`` alone.
    """
    names = list(names)
    out: list[str] = []
    if all_paths:
        debug("Looking for all PATH environment variables")
        out.extend(n for n in environ if n.endswith("PATH"))
    if common_paths:
        out.extend(COMMON_PATHS)
    if names:
        out.extend(names)
    elif not all_paths and not common_paths:
        out.append("PATH")
    return out


def clean_lines(
    names: Iterable[str],
    environ: Mapping[str, str],
    normalizer: PathNormalizer,
    *,
    shell: str = "bash",
    output_unchanged: bool = False,
) -> list[str]:
    """Shell assignments for every selected variable that changed."""
    out: list[str] = []
    for name in names:
        res = clean_variable(name, environ.get(name), normalizer)
        if res.was_unset:
            continue
        if res.changed or output_unchanged:
            out.append(set_line(shell, res.name, res.new))
    return out
