from __future__ import annotations

from dataclasses import dataclass

from hexgrid.core.handles import KeyMap, PerspectiveKey, RegionKey
from hexgrid.core.region import Region, RegionMap

DEFAULT_COLS = 48


@dataclass
class Perspective:
    """A fixed column count grid over one region.

    Row `r`, column `c` maps to `region.begin + r * cols + c`. The column
    count is kept within `[1, region.len()]` by `clamp_cols`; every query
    that divides by `cols` clamps a local copy first so a bad value can
    never divide by zero.

    `flip_row_order` only affects the order rows are drawn in. Sometimes
    binary files store images "upside-down", and a flipped perspective makes
    such data readable. Offset arithmetic ignores it.
    """

    region: RegionKey
    cols: int = DEFAULT_COLS
    flip_row_order: bool = False
    name: str = ""

    @classmethod
    def from_region(cls, key: RegionKey, name: str, cols: int = DEFAULT_COLS) -> Perspective:
        return cls(region=key, cols=cols, flip_row_order=False, name=name)

    def _region(self, regions: RegionMap) -> Region:
        # Raises StaleHandle when the region was removed
        return regions[self.region].region

    def _safe_cols(self, region: Region) -> int:
        return max(1, min(self.cols, region.len()))

    # ---- Addressing ----
    def byte_offset_of(self, row: int, col: int, regions: RegionMap) -> int:
        return self._region(regions).begin + (row * self.cols + col)

    def row_col_of(self, offset: int, regions: RegionMap) -> tuple[int, int]:
        reg = self._region(regions)
        cols = self._safe_cols(reg)
        rel = max(0, offset - reg.begin)
        return (rel // cols, rel % cols)

    def in_bounds(self, row: int, col: int, regions: RegionMap) -> bool:
        """Whether `col` is within `cols` and the resulting offset is inside the region."""
        if row < 0 or col < 0 or col >= self.cols:
            return False
        return self._region(regions).contains(self.byte_offset_of(row, col, regions))

    def clamp_cols(self, regions: RegionMap) -> None:
        self.cols = self._safe_cols(self._region(regions))

    def row_span_of(self, region: Region) -> tuple[int, int]:
        """Rows spanned by `region` and the remainder."""
        cols = max(1, self.cols)
        return divmod(region.len(), cols)

    # ---- Derived extents ----
    def last_row_idx(self, regions: RegionMap) -> int:
        reg = self._region(regions)
        return reg.end // self._safe_cols(reg)

    def last_col_idx(self, regions: RegionMap) -> int:
        reg = self._region(regions)
        return reg.end % self._safe_cols(reg)

    def n_rows(self, regions: RegionMap) -> int:
        reg = self._region(regions)
        rows, rem = divmod(reg.len(), self._safe_cols(reg))
        return rows + 1 if rem else rows

    def display_row(self, row: int, n_rows: int) -> int:
        """Vertical draw position of `row` out of `n_rows`."""
        if self.flip_row_order:
            return max(0, n_rows - 1 - row)
        return row


PerspectiveMap = KeyMap[PerspectiveKey, Perspective]


def new_perspective_map() -> PerspectiveMap:
    return KeyMap(PerspectiveKey)
