from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from hexgrid.core.config import Config
from hexgrid.core.handles import KeyMap, PerspectiveKey, ViewKey
from hexgrid.core.perspective import Perspective, PerspectiveMap
from hexgrid.core.region import Region, RegionMap


class ViewKind(Enum):
    """Flavor of rendering for a view. Selects the draw strategy."""

    HEX = "hex"
    ASCII = "ascii"
    BLOCK = "block"


@dataclass
class ViewportRect:
    x: int = 0
    y: int = 0
    w: int = 0
    h: int = 0

    def is_degenerate(self) -> bool:
        return self.w <= 0 or self.h <= 0


@dataclass
class ScrollOffset:
    row: int = 0
    col: int = 0
    # Sub-cell offsets, always in [0, row_h) / [0, col_w)
    pix_x: int = 0
    pix_y: int = 0


@dataclass
class View:
    """A rectangle on screen looking through a perspective.

    Several views can share one perspective; each keeps its own scroll
    position and shows as much data as its rectangle and cell size allow.
    `viewport_rect` is rewritten by the layout engine every frame.
    """

    perspective: PerspectiveKey
    kind: ViewKind = ViewKind.HEX
    col_w: int = 3
    row_h: int = 1
    viewport_rect: ViewportRect = field(default_factory=ViewportRect)
    scroll_offset: ScrollOffset = field(default_factory=ScrollOffset)
    scroll_speed: int = 1

    @classmethod
    def new(cls, perspective: PerspectiveKey, kind: ViewKind, config: Config | None = None) -> View:
        config = config or Config()
        cell = config.cell_for(kind.value)
        return cls(
            perspective=perspective,
            kind=kind,
            col_w=cell.col_w,
            row_h=cell.row_h,
            scroll_speed=config.scroll_speed,
        )

    # ---- Extents ----
    def rows(self) -> int:
        """Number of grid rows visible in the current rectangle."""
        if self.row_h <= 0:
            return 0
        return max(0, self.viewport_rect.h // self.row_h)

    def cols(self) -> int:
        if self.col_w <= 0:
            return 0
        return max(0, self.viewport_rect.w // self.col_w)

    def max_needed_size(self, perspectives: PerspectiveMap, regions: RegionMap) -> tuple[int, int]:
        """Size required to show every column of the perspective without clipping."""
        persp = perspectives[self.perspective]
        persp.clamp_cols(regions)
        return (persp.cols * self.col_w, persp.n_rows(regions) * self.row_h)

    def contains_pos(self, x: int, y: int) -> bool:
        r = self.viewport_rect
        return r.x <= x < r.x + r.w and r.y <= y < r.y + r.h

    # ---- Scrolling ----
    def _clamp_scroll(self, persp: Perspective, regions: RegionMap) -> None:
        so = self.scroll_offset
        max_row = max(0, persp.n_rows(regions) - 1)
        max_col = max(0, persp.cols - 1)
        if so.row < 0:
            so.row, so.pix_y = 0, 0
        elif so.row >= max_row:
            so.row, so.pix_y = max_row, 0
        if so.col < 0:
            so.col, so.pix_x = 0, 0
        elif so.col >= max_col:
            so.col, so.pix_x = max_col, 0

    def scroll_y(self, amount: int, perspectives: PerspectiveMap, regions: RegionMap) -> None:
        """Scroll vertically by `amount` sub-cell units, carrying whole rows."""
        so = self.scroll_offset
        total = so.row * self.row_h + so.pix_y + amount
        so.row, so.pix_y = divmod(max(0, total), max(1, self.row_h))
        self._clamp_scroll(perspectives[self.perspective], regions)

    def scroll_x(self, amount: int, perspectives: PerspectiveMap, regions: RegionMap) -> None:
        so = self.scroll_offset
        total = so.col * self.col_w + so.pix_x + amount
        so.col, so.pix_x = divmod(max(0, total), max(1, self.col_w))
        self._clamp_scroll(perspectives[self.perspective], regions)

    def scroll_page_down(self, perspectives: PerspectiveMap, regions: RegionMap) -> None:
        self.scroll_y(max(1, self.rows()) * self.row_h, perspectives, regions)

    def scroll_page_up(self, perspectives: PerspectiveMap, regions: RegionMap) -> None:
        self.scroll_y(-max(1, self.rows()) * self.row_h, perspectives, regions)

    def go_home(self) -> None:
        self.scroll_offset = ScrollOffset()

    def scroll_to_end(self, perspectives: PerspectiveMap, regions: RegionMap) -> None:
        persp = perspectives[self.perspective]
        so = self.scroll_offset
        so.row = max(0, persp.n_rows(regions) - self.rows())
        so.col = max(0, persp.cols - self.cols())
        so.pix_x = so.pix_y = 0
        self._clamp_scroll(persp, regions)

    def center_on_offset(self, offset: int, perspectives: PerspectiveMap, regions: RegionMap) -> None:
        persp = perspectives[self.perspective]
        row, col = persp.row_col_of(offset, regions)
        so = self.scroll_offset
        so.row = max(0, row - self.rows() // 2)
        so.col = max(0, col - self.cols() // 2)
        so.pix_x = so.pix_y = 0
        self._clamp_scroll(persp, regions)

    def ensure_offset_visible(self, offset: int, perspectives: PerspectiveMap, regions: RegionMap) -> None:
        """Scroll the minimum amount so the cell at `offset` is on screen."""
        persp = perspectives[self.perspective]
        row, col = persp.row_col_of(offset, regions)
        so = self.scroll_offset
        rows, cols = max(1, self.rows()), max(1, self.cols())
        if row < so.row:
            so.row, so.pix_y = row, 0
        elif row >= so.row + rows:
            so.row, so.pix_y = row - rows + 1, 0
        if col < so.col:
            so.col, so.pix_x = col, 0
        elif col >= so.col + cols:
            so.col, so.pix_x = col - cols + 1, 0
        self._clamp_scroll(persp, regions)

    # ---- Addressing through the rectangle ----
    def offsets(self, perspectives: PerspectiveMap, regions: RegionMap) -> Region | None:
        """First and last byte offset visible in the view, or None when nothing is."""
        persp = perspectives[self.perspective]
        reg = regions[persp.region].region
        rows, cols = self.rows(), self.cols()
        if rows == 0 or cols == 0 or reg.is_empty():
            return None
        so = self.scroll_offset
        n_rows = persp.n_rows(regions)
        if so.col >= persp.cols or so.row >= n_rows:
            return None
        first_row, last_row = so.row, so.row + rows - 1
        if persp.flip_row_order:
            first_row = persp.display_row(min(last_row, n_rows - 1), n_rows)
            last_row = persp.display_row(so.row, n_rows)
        first = persp.byte_offset_of(first_row, so.col, regions)
        if first > reg.end:
            return None
        last_col = min(so.col + cols - 1, persp.cols - 1)
        last = min(persp.byte_offset_of(last_row, last_col, regions), reg.end)
        return Region(first, last)

    def row_col_offset_of_pos(
        self, x: int, y: int, perspectives: PerspectiveMap, regions: RegionMap
    ) -> tuple[int, int, int] | None:
        """Hit-test a screen position. Returns (row, col, offset) or None."""
        if not self.contains_pos(x, y):
            return None
        persp = perspectives[self.perspective]
        so = self.scroll_offset
        rel_x = x - self.viewport_rect.x + so.pix_x
        rel_y = y - self.viewport_rect.y + so.pix_y
        col = so.col + rel_x // max(1, self.col_w)
        drawn_row = so.row + rel_y // max(1, self.row_h)
        row = persp.display_row(drawn_row, persp.n_rows(regions))
        if not persp.in_bounds(row, col, regions):
            return None
        return (row, col, persp.byte_offset_of(row, col, regions))


@dataclass
class NamedView:
    view: View
    name: str


ViewMap = KeyMap[ViewKey, NamedView]


def new_view_map() -> ViewMap:
    return KeyMap(ViewKey)
