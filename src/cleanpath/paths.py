from __future__ import annotations

from typing import Iterable, Iterator

from .hashing import HashState


def strip_trailing_slashes(segment: str) -> str:
    """Drop trailing '/' characters. A segment of only slashes becomes ''."""
    return segment.rstrip("/")


def iter_hashed_segments(raw: str, delimiter: str = ":") -> Iterator[tuple[str, int]]:
    """Yield ``(segment, hash)`` pairs in one left-to-right scan of ``raw``.

    Segments come back with trailing slashes stripped, and the hash is the
    DJB2 hash of the stripped segment. The hash state resets at each
    delimiter.
    """
    state = HashState()
    start = 0
    # hash value just before the current run of trailing slashes, if any
    before_slashes: int | None = None

    for i, ch in enumerate(raw):
        if ch == delimiter:
            yield strip_trailing_slashes(raw[start:i]), _stripped_hash(state, before_slashes)
            start = i + 1
            state.reset()
            before_slashes = None
            continue
        if ch == "/":
            if before_slashes is None:
                before_slashes = state.value
        else:
            before_slashes = None
        state.update(ch)

    yield strip_trailing_slashes(raw[start:]), _stripped_hash(state, before_slashes)


def _stripped_hash(state: HashState, before_slashes: int | None) -> int:
    return before_slashes if before_slashes is not None else state.value


def join_segments(segments: Iterable[str], delimiter: str = ":") -> str:
    return delimiter.join(segments)
