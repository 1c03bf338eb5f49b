from __future__ import annotations

from dataclasses import dataclass

from hexgrid.core.handles import KeyMap, RegionKey


@dataclass
class Region:
    """Inclusive byte range `[begin, end]` over the data buffer."""

    begin: int
    end: int

    def len(self) -> int:
        # Inclusive, so add 1 to end; saturates at zero when end < begin
        return max(0, self.end + 1 - self.begin)

    def is_empty(self) -> bool:
        return self.len() == 0

    def contains(self, offset: int) -> bool:
        return self.begin <= offset <= self.end

    def contains_region(self, other: Region) -> bool:
        return self.begin <= other.begin and self.end >= other.end

    def clamped(self, data_len: int) -> Region:
        """Return a copy bounded to `[0, data_len - 1]`."""
        last = max(0, data_len - 1)
        begin = max(0, min(self.begin, last))
        end = max(0, min(self.end, last))
        return Region(begin, end)

    @classmethod
    def from_selection(cls, a: int, b: int) -> Region:
        """Region spanned by two selection points given in either order."""
        return cls(min(a, b), max(a, b))


@dataclass
class NamedRegion:
    name: str
    region: Region
    desc: str = ""


RegionMap = KeyMap[RegionKey, NamedRegion]


def new_region_map() -> RegionMap:
    return KeyMap(RegionKey)
