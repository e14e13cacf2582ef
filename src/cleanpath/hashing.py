from __future__ import annotations

from dataclasses import dataclass, field

DJB2_SEED = 5381
_MASK = 0xFFFFFFFF


def djb2(text: str) -> int:
    """DJB2 string hash (``h = h * 33 + c``), truncated to 32 bits unsigned."""
    h = DJB2_SEED
    for ch in text:
        h = ((h << 5) + h + ord(ch)) & _MASK
    return h


@dataclass
class HashState:
    """Incremental form of :func:`djb2`, fed one character at a time."""

    value: int = DJB2_SEED

    def update(self, ch: str) -> None:
        self.value = ((self.value << 5) + self.value + ord(ch)) & _MASK

    def reset(self) -> None:
        self.value = DJB2_SEED


@dataclass
class SeenSet:
    """Segments accepted so far in one normalization run.

    Buckets are keyed by the DJB2 hash; a hit is always confirmed by string
    comparison.
    """

    _buckets: dict[int, list[str]] = field(default_factory=dict)
    _size: int = 0

    def __len__(self) -> int:
        return self._size

    def __contains__(self, segment: str) -> bool:
        return segment in self._buckets.get(djb2(segment), ())

    def add(self, segment: str, hash_value: int | None = None) -> bool:
        """Insert ``segment``. Returns False if an equal string was already present."""
        h = djb2(segment) if hash_value is None else hash_value
        bucket = self._buckets.setdefault(h, [])
        if segment in bucket:
            return False
        bucket.append(segment)
        self._size += 1
        return True
