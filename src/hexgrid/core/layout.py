"""View layout grids and the per-frame auto-layout pass."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from hexgrid.core.handles import KeyMap, LayoutKey, ViewKey
from hexgrid.core.view import ViewMap, ViewportRect

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEFAULT_MARGIN = 1


def default_margin() -> int:
    return DEFAULT_MARGIN


@dataclass
class Layout:
    """Rows of views. Views in one row sit side by side; rows stack vertically."""

    name: str
    view_grid: list[list[ViewKey]] = field(default_factory=list)
    margin: int = DEFAULT_MARGIN

    def iter_views(self) -> Iterator[ViewKey]:
        for row in self.view_grid:
            yield from row

    def contains(self, key: ViewKey) -> bool:
        return any(k == key for k in self.iter_views())

    def remove_view(self, key: ViewKey) -> bool:
        """Remove `key` from every row; rows left empty are dropped."""
        before = sum(len(r) for r in self.view_grid)
        grid = [[k for k in row if k != key] for row in self.view_grid]
        self.view_grid = [row for row in grid if row]
        return sum(len(r) for r in self.view_grid) != before

    def retain_views(self, keep: Callable[[ViewKey], bool]) -> list[ViewKey]:
        """Drop every key for which `keep` is false. Returns the dropped keys."""
        dropped = [k for k in self.iter_views() if not keep(k)]
        for k in dropped:
            self.remove_view(k)
        return dropped

    def add_to_new_row(self, key: ViewKey) -> None:
        self.view_grid.append([key])

    def add_to_last_row(self, key: ViewKey) -> None:
        if not self.view_grid:
            self.view_grid.append([])
        self.view_grid[-1].append(key)

    def swap(self, a: ViewKey, b: ViewKey) -> None:
        for row in self.view_grid:
            for i, k in enumerate(row):
                if k == a:
                    row[i] = b
                elif k == b:
                    row[i] = a


LayoutMap = KeyMap[LayoutKey, Layout]


def new_layout_map() -> LayoutMap:
    return KeyMap(LayoutKey)


MaxNeeded = Callable[[ViewKey], tuple[int, int]]


def do_auto_layout(
    layout: Layout,
    views: ViewMap,
    viewport: ViewportRect,
    max_needed: MaxNeeded,
) -> list[ViewKey]:
    """Size and place every view of `layout` inside `viewport`.

    Each view first gets the smaller of its needed size and an even share of
    its row (width) and of the viewport (height). Leftover width in a row is
    handed out in declared order, earliest views first. Leftover height is
    handed out row by row: every view in a row may grow by up to the largest
    growth any view in that row wants, and the shared budget is charged once
    per row for that largest growth.

    Rectangles can come out zero or negative when the grid does not fit;
    callers treat those as nothing to draw. Returns the keys laid out, in
    declared order.
    """
    margin = layout.margin
    grid: list[list[ViewKey]] = []
    for row in layout.view_grid:
        present = []
        for key in row:
            if key in views:
                present.append(key)
            else:
                logger.warning("layout %r references missing view %s", layout.name, key.token())
        if present:
            grid.append(present)
    if not grid:
        return []

    needed = {key: max_needed(key) for row in grid for key in row}
    n_rows = len(grid)
    avail_h = viewport.h - margin * (n_rows + 1)
    max_allowed_h = avail_h // n_rows

    # Phase A: intrinsic sizing
    total_h = 0
    row_avail_w: list[int] = []
    row_total_w: list[int] = []
    for row in grid:
        n_cols = len(row)
        avail_w = viewport.w - margin * (n_cols + 1)
        max_allowed_w = avail_w // n_cols
        total_row_w = 0
        row_max_h = 0
        for key in row:
            rect = views[key].view.viewport_rect
            need_w, need_h = needed[key]
            rect.w = min(need_w, max_allowed_w)
            rect.h = min(need_h, max_allowed_h)
            total_row_w += rect.w
            row_max_h = max(row_max_h, rect.h)
        row_avail_w.append(avail_w)
        row_total_w.append(total_row_w)
        total_h += row_max_h

    # Phase B: leftover width, first come first served within each row
    for row, avail_w, total_row_w in zip(grid, row_avail_w, row_total_w):
        remaining = avail_w - total_row_w
        for key in row:
            if remaining <= 0:
                break
            rect = views[key].view.viewport_rect
            gap = needed[key][0] - rect.w
            if gap <= 0:
                continue
            grow = min(gap, remaining)
            rect.w += grow
            remaining -= grow

    # Phase C: leftover height, charged once per row for its hungriest view
    remaining = avail_h - total_h
    for row in grid:
        if remaining <= 0:
            break
        gaps = [needed[key][1] - views[key].view.viewport_rect.h for key in row]
        increment = min(max(gaps), remaining)
        if increment <= 0:
            continue
        for key, gap in zip(row, gaps):
            if gap > 0:
                views[key].view.viewport_rect.h += min(gap, increment)
        remaining -= increment

    # Phase D: placement
    x = viewport.x + margin
    y = viewport.y + margin
    for row in grid:
        row_h = 0
        for key in row:
            rect = views[key].view.viewport_rect
            rect.x = x
            rect.y = y
            x += rect.w + margin
            row_h = max(row_h, rect.h)
        x = viewport.x + margin
        y += row_h + margin

    return [key for row in grid for key in row]
