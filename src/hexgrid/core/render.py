"""Turn a view into styled text lines.

One rendering function serves every view kind; the kind only selects how a
single byte is drawn into its cell.
"""

from __future__ import annotations

from rich.style import Style
from rich.text import Text

from hexgrid.core.io import DataBuffer
from hexgrid.core.perspective import PerspectiveMap
from hexgrid.core.region import Region, RegionMap
from hexgrid.core.view import View, ViewKind
from hexgrid.ui.palette import PALETTE, Palette


def _byte_fg(byte: int, palette: Palette) -> str:
    if byte == 0:
        return palette.byte_zero_fg
    if 32 <= byte <= 126:
        return palette.byte_printable_fg
    if byte < 32 or byte == 127:
        return palette.byte_control_fg
    return palette.byte_high_fg


def draw_cell(kind: ViewKind, byte: int, col_w: int, palette: Palette) -> tuple[str, Style]:
    """Text and style for one byte drawn in a cell `col_w` wide."""
    if kind is ViewKind.HEX:
        return f"{byte:02X}".ljust(col_w)[:col_w], Style(color=_byte_fg(byte, palette))
    if kind is ViewKind.ASCII:
        ch = chr(byte) if 32 <= byte <= 126 else "."
        return ch.ljust(col_w)[:col_w], Style(color=_byte_fg(byte, palette))
    # Block: solid cell shaded by value
    shade = f"#{byte:02x}{byte:02x}{byte:02x}"
    return " " * col_w, Style(bgcolor=shade)


def render_view(
    view: View,
    perspectives: PerspectiveMap,
    regions: RegionMap,
    data: DataBuffer,
    *,
    cursor: int | None = None,
    selection: Region | None = None,
    palette: Palette = PALETTE,
) -> list[Text]:
    """Render the visible part of `view` as `rect.h` lines of `rect.w` cells.

    Returns an empty list for a degenerate rectangle or an invalid
    perspective chain.
    """
    rect = view.viewport_rect
    if rect.is_degenerate():
        return []
    persp = perspectives.get(view.perspective)
    if persp is None or persp.region not in regions:
        return []
    reg = regions[persp.region].region
    cols = persp.cols
    n_rows = persp.n_rows(regions)
    so = view.scroll_offset
    col_w = max(1, view.col_w)
    row_h = max(1, view.row_h)
    # One extra cell so a sub-cell horizontal offset never leaves a gap
    n_cells = rect.w // col_w + 2

    lines: list[Text] = []
    for i in range(rect.h):
        drawn_row = so.row + (i + so.pix_y) // row_h
        if (i + so.pix_y) % row_h != 0 or drawn_row >= n_rows:
            lines.append(Text(" " * rect.w))
            continue
        row = persp.display_row(drawn_row, n_rows)
        line = Text()
        for col in range(so.col, min(cols, so.col + n_cells)):
            offset = persp.byte_offset_of(row, col, regions)
            byte = data.byte_at(offset) if offset >= 0 and reg.contains(offset) else None
            if byte is None:
                line.append(" " * col_w)
                continue
            cell, style = draw_cell(view.kind, byte, col_w, palette)
            if offset == cursor:
                style = Style(bgcolor=palette.cursor_bg, color=palette.cursor_fg)
                if view.kind is ViewKind.BLOCK:
                    cell = "█" * col_w
            elif selection is not None and selection.contains(offset):
                style = style + Style(bgcolor=palette.selection_bg)
            line.append(cell, style=style)
        line = line[so.pix_x : so.pix_x + rect.w]
        line.pad_right(rect.w - len(line))
        lines.append(line)
    return lines
