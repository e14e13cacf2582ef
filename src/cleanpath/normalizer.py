from __future__ import annotations

import os
import stat as stat_mod
from dataclasses import dataclass
from typing import Callable

from .config import FilterConfig
from .hashing import SeenSet
from .log import debug, verbose
from .paths import iter_hashed_segments, join_segments
from .predicates import CONTAINS, first_match, predicates_for

StatFn = Callable[[str], os.stat_result]


@dataclass(frozen=True)
class Identity:
    """uid/gid of the running process, captured once per run."""

    uid: int
    gid: int

    @staticmethod
    def current() -> "Identity":
        return Identity(uid=os.getuid(), gid=os.getgid())


def is_usable_dir(st: os.stat_result, identity: Identity) -> bool:
    """Can this process execute into the directory described by ``st``?

    Callers must have checked that ``st`` is a directory.
    """
    mode = st.st_mode
    # most common case first: world-executable
    if mode & stat_mod.S_IXOTH:
        return True
    if st.st_gid == identity.gid and mode & stat_mod.S_IXGRP:
        return True
    if st.st_uid == identity.uid and mode & stat_mod.S_IXUSR:
        return True
    return False


def _safe_stat(stat_fn: StatFn, segment: str) -> os.stat_result | None:
    # Any failure (ENOENT, EACCES, NUL byte in the name, ...) counts as absent.
    try:
        return stat_fn(segment)
    except (OSError, ValueError):
        return None


class PathNormalizer:
    """Cleans delimited path lists under one :class:`FilterConfig`."""

    def __init__(
        self,
        cfg: FilterConfig,
        *,
        identity: Identity | None = None,
        stat: StatFn = os.stat,
    ):
        self.cfg = cfg
        self._identity = identity
        self._stat = stat
        self._excludes = predicates_for(CONTAINS, cfg.exclude_patterns)

    @property
    def identity(self) -> Identity:
        if self._identity is None:
            self._identity = Identity.current()
        return self._identity

    def normalize(self, raw: str | None) -> str:
        if raw is None:
            return ""

        cfg = self.cfg
        seen = SeenSet()
        kept: list[str] = []

        for segment, h in iter_hashed_segments(raw, cfg.delimiter):
            debug("segment %r hash=%d", segment, h)
            if self._should_keep(segment, h, seen):
                kept.append(segment)

        return join_segments(kept, cfg.delimiter)

    def _should_keep(self, segment: str, h: int, seen: SeenSet) -> bool:
        cfg = self.cfg

        if cfg.discard_empty and not segment:
            verbose(2, 'Ignoring empty string directory name "%s"', segment)
            return False

        hit = first_match(self._excludes, segment)
        if hit is not None:
            verbose(2, "Removing \"%s\" (matched '%s')", segment, hit.pattern)
            return False

        if cfg.remove_dupes and not seen.add(segment, h):
            verbose(2, 'Ignoring duplicate file or directory "%s"', segment)
            return False

        if not cfg.needs_stat:
            verbose(2, 'Keeping "%s"', segment)
            return True

        st = _safe_stat(self._stat, segment)
        if st is None:
            verbose(2, 'Ignoring non-existent file or directory "%s"', segment)
            return False

        is_dir = stat_mod.S_ISDIR(st.st_mode)
        if cfg.dirs_only and not is_dir:
            verbose(2, 'Ignoring non-directory "%s"', segment)
            return False
        if cfg.only_executable_dirs and is_dir and not is_usable_dir(st, self.identity):
            verbose(2, 'Ignoring non-usable directory "%s"', segment)
            return False

        return True


def normalize(
    raw: str | None,
    cfg: FilterConfig,
    *,
    identity: Identity | None = None,
    stat: StatFn = os.stat,
) -> str:
    """Clean one raw path string. ``None`` (variable unset) yields ``""``."""
    return PathNormalizer(cfg, identity=identity, stat=stat).normalize(raw)
