from __future__ import annotations

import pytest

pytest.importorskip("textual")

from rich.style import Style  # noqa: E402
from rich.text import Text  # noqa: E402

from hexgrid.core.io import DataBuffer  # noqa: E402
from hexgrid.core.meta import Meta  # noqa: E402
from hexgrid.widgets.layout_view import LayoutView, _Canvas  # noqa: E402


def test_canvas_clips_and_keeps_styles() -> None:
    canvas = _Canvas(4, 2)
    canvas.paint_text(2, 0, Text("abc", style="bold"))
    canvas.put(9, 9, "x")
    text = canvas.to_text()
    assert text.plain == "  ab\n    "
    styles = [s.style for s in text.spans]
    assert Style(bold=True) in styles


def test_layout_and_hit_testing() -> None:
    data = DataBuffer.from_bytes(bytes(range(256)))
    meta = Meta.default_for_len(len(data))
    for pkey in list(meta.perspectives.keys()):
        meta.set_cols(pkey, 16)
    lv = LayoutView(meta, data)
    keys = lv.layout_views(80, 20)
    assert len(keys) == 2
    assert lv.focused_view == keys[0]
    hex_rect = meta.views[keys[0]].view.viewport_rect
    ascii_rect = meta.views[keys[1]].view.viewport_rect
    # hex: 16 cols * 3 cells, ascii: 16 cols * 1 cell, margin 1
    assert (hex_rect.x, hex_rect.w) == (1, 48)
    assert (ascii_rect.x, ascii_rect.w) == (50, 16)
    assert lv.view_at(0, 0) is None
    assert lv.view_at(50, 1) == keys[1]
    # Second row, fifth column of the ascii view
    assert lv.offset_at(ascii_rect.x + 4, ascii_rect.y + 1) == 16 + 4
    # Third hex cell spans three terminal cells
    assert lv.offset_at(hex_rect.x + 7, hex_rect.y) == 2


def test_sync_to_cursor_scrolls_views() -> None:
    data = DataBuffer.from_bytes(bytes(4096))
    meta = Meta.default_for_len(len(data))
    lv = LayoutView(meta, data)
    keys = lv.layout_views(200, 10)
    lv.cursor = 4000
    lv.sync_to_cursor()
    for key in keys:
        view = meta.views[key].view
        offsets = view.offsets(meta.perspectives, meta.regions)
        assert offsets is not None and offsets.contains(4000)


def test_hit_testing_skips_removed_views() -> None:
    data = DataBuffer.from_bytes(bytes(256))
    meta = Meta.default_for_len(len(data))
    lv = LayoutView(meta, data)
    keys = lv.layout_views(120, 30)
    ascii_rect = meta.views[keys[1]].view.viewport_rect
    x, y = ascii_rect.x, ascii_rect.y
    assert lv.view_at(x, y) == keys[1]
    meta.remove_view(keys[1])
    # No repaint yet: the old key is still in the last layout pass
    assert lv.view_at(x, y) is None
    assert lv.offset_at(x, y) is None
    lv.focused_view = keys[1]
    lv.forget_view(keys[1])
    assert lv.visible_views() == [keys[0]]
    assert lv.focused_view == keys[0]
