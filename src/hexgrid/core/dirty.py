from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from hexgrid.core.region import Region

_default_logger = logging.getLogger(__name__)
_default_logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class DamageSpan:
    """Byte span touched by an edit. `end` is inclusive."""

    begin: int
    end: int

    @classmethod
    def single(cls, offset: int) -> DamageSpan:
        return cls(offset, offset)

    @classmethod
    def range(cls, begin: int, end_exclusive: int) -> DamageSpan:
        return cls(begin, end_exclusive - 1)

    @classmethod
    def range_inclusive(cls, begin: int, end: int) -> DamageSpan:
        return cls(begin, end)

    def is_empty(self) -> bool:
        """True for a zero-length exclusive range such as `range(5, 5)`."""
        return self.end == self.begin - 1

    def is_reversed(self) -> bool:
        return self.end < self.begin - 1


class DirtyTracker:
    """Bounding range of every edit since the last clean checkpoint.

    The tracked region is a bounding box, not an exact set: bytes inside it
    may be unchanged, but no changed byte lies outside it.
    """

    def __init__(
        self,
        length_of: Callable[[], int] | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._region: Region | None = None
        self._length_of = length_of
        # Length at the last clean checkpoint; compared against to detect truncation
        self.orig_len = length_of() if length_of is not None else 0
        self._log = logger or _default_logger

    def current(self) -> Region | None:
        if self._region is None:
            return None
        return Region(self._region.begin, self._region.end)

    @property
    def is_dirty(self) -> bool:
        return self._region is not None

    def truncated(self, current_len: int) -> bool:
        return current_len < self.orig_len

    def widen(self, damage: DamageSpan) -> None:
        if damage.is_empty():
            self._log.debug("ignoring empty damage span %s", damage)
            return
        if damage.is_reversed():
            self._log.error("logic error in widen: damage %s ends before it begins", damage)
            return
        region = self._region
        if region is None:
            self._region = Region(damage.begin, damage.end)
            return
        region.begin = min(region.begin, damage.begin)
        region.end = max(region.end, damage.end)

    def undirty(self) -> None:
        """Mark the data clean and record the current length as the new baseline."""
        self._region = None
        if self._length_of is not None:
            self.orig_len = self._length_of()
