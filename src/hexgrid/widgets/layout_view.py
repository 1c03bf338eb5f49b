from __future__ import annotations

from rich.style import Style
from rich.text import Text
from textual.widget import Widget

from hexgrid.core.handles import LayoutKey, ViewKey
from hexgrid.core.io import DataBuffer
from hexgrid.core.layout import do_auto_layout
from hexgrid.core.meta import Meta
from hexgrid.core.region import Region
from hexgrid.core.render import render_view
from hexgrid.core.view import ViewportRect
from hexgrid.ui.palette import PALETTE, Palette


class _Canvas:
    """Fixed-size character grid that styled text is painted onto."""

    def __init__(self, w: int, h: int) -> None:
        self.w = max(0, w)
        self.h = max(0, h)
        self._chars = [[" "] * self.w for _ in range(self.h)]
        self._styles: list[list[Style | None]] = [[None] * self.w for _ in range(self.h)]

    def put(self, x: int, y: int, ch: str, style: Style | None = None) -> None:
        if 0 <= x < self.w and 0 <= y < self.h:
            self._chars[y][x] = ch
            self._styles[y][x] = style

    def paint_text(self, x: int, y: int, text: Text) -> None:
        plain = text.plain
        base = Style.parse(text.style) if isinstance(text.style, str) else text.style
        styles: list[Style | None] = [base or None] * len(plain)
        for span in text.spans:
            span_style = Style.parse(span.style) if isinstance(span.style, str) else span.style
            for i in range(max(0, span.start), min(len(plain), span.end)):
                styles[i] = span_style if styles[i] is None else styles[i] + span_style
        for i, ch in enumerate(plain):
            self.put(x + i, y, ch, styles[i])

    def to_text(self) -> Text:
        out = Text()
        for y in range(self.h):
            for x in range(self.w):
                out.append(self._chars[y][x], style=self._styles[y][x])
            if y < self.h - 1:
                out.append("\n")
        return out


class LayoutView(Widget):
    """Draws every view of the current layout, re-laid-out on every render.

    Rectangles come from the auto-layout pass over this widget's size; views
    whose rectangle degenerates, or whose perspective lost its region, are
    skipped for the frame.
    """

    can_focus = True

    def __init__(
        self,
        meta: Meta,
        data: DataBuffer,
        *,
        layout: LayoutKey | None = None,
        palette: Palette = PALETTE,
    ) -> None:
        super().__init__()
        self.meta = meta
        self.data = data
        self.palette = palette
        self.current_layout: LayoutKey = layout if layout is not None else meta.first_layout()
        self.focused_view: ViewKey | None = None
        self.cursor: int = 0
        self.selection: Region | None = None
        self._laid_out: list[ViewKey] = []

    # ---- Layout ----
    def layout_views(self, w: int | None = None, h: int | None = None) -> list[ViewKey]:
        """Run the auto-layout pass and return the keys that got a rectangle."""
        layout = self.meta.layouts.get(self.current_layout)
        if layout is None:
            self._laid_out = []
            return []
        w = self.size.width if w is None else w
        h = self.size.height if h is None else h
        self._laid_out = do_auto_layout(
            layout, self.meta.views, ViewportRect(0, 0, w, h), self.meta.view_max_needed_size
        )
        if self.focused_view not in self._laid_out:
            self.focused_view = self._laid_out[0] if self._laid_out else None
        return self._laid_out

    def visible_views(self) -> list[ViewKey]:
        return list(self._laid_out)

    def focus_next_view(self) -> None:
        keys = [k for k in self._laid_out if self.meta.view_valid(k)]
        if not keys:
            self.focused_view = None
            return
        if self.focused_view in keys:
            self.focused_view = keys[(keys.index(self.focused_view) + 1) % len(keys)]
        else:
            self.focused_view = keys[0]
        self.refresh()

    def sync_to_cursor(self) -> None:
        """Scroll every laid-out view whose region holds the cursor so it stays visible."""
        for key in self._laid_out:
            region = self.meta.region_of_view(key)
            if region is None or not region.contains(self.cursor):
                continue
            view = self.meta.views[key].view
            view.ensure_offset_visible(self.cursor, self.meta.perspectives, self.meta.regions)

    def view_at(self, x: int, y: int) -> ViewKey | None:
        for key in self._laid_out:
            # A key can outlive its view until the next layout pass
            named = self.meta.views.get(key)
            if named is not None and named.view.contains_pos(x, y):
                return key
        return None

    def forget_view(self, key: ViewKey) -> None:
        """Drop `key` from the last layout pass so hit-testing never sees it."""
        self._laid_out = [k for k in self._laid_out if k != key]
        if self.focused_view == key:
            self.focused_view = self._laid_out[0] if self._laid_out else None

    def offset_at(self, x: int, y: int) -> int | None:
        key = self.view_at(x, y)
        if key is None or not self.meta.view_valid(key):
            return None
        hit = self.meta.views[key].view.row_col_offset_of_pos(
            x, y, self.meta.perspectives, self.meta.regions
        )
        return hit[2] if hit is not None else None

    # ---- Input ----
    def on_key(self, event) -> None:  # type: ignore[override]
        # Edit mode swallows printable keys before app bindings see them
        if hasattr(self.app, "handle_edit_key"):
            if self.app.handle_edit_key(event.key, event.character):  # type: ignore[attr-defined]
                event.prevent_default()
                event.stop()

    def on_click(self, event) -> None:  # type: ignore[override]
        key = self.view_at(event.x, event.y)
        if key is not None:
            self.focused_view = key
        offset = self.offset_at(event.x, event.y)
        if offset is not None and hasattr(self.app, "jump_cursor"):
            self.app.jump_cursor(offset)  # type: ignore[attr-defined]
        self.refresh()

    # ---- Rendering ----
    def _draw_frame(self, canvas: _Canvas, key: ViewKey) -> None:
        named = self.meta.views[key]
        r = named.view.viewport_rect
        color = self.palette.focus_border if key == self.focused_view else self.palette.view_border
        style = Style(color=color)
        left, right, top, bottom = r.x - 1, r.x + r.w, r.y - 1, r.y + r.h
        for x in range(left + 1, right):
            canvas.put(x, top, "─", style)
            canvas.put(x, bottom, "─", style)
        for y in range(top + 1, bottom):
            canvas.put(left, y, "│", style)
            canvas.put(right, y, "│", style)
        canvas.put(left, top, "┌", style)
        canvas.put(right, top, "┐", style)
        canvas.put(left, bottom, "└", style)
        canvas.put(right, bottom, "┘", style)
        if named.name and r.w > 2:
            canvas.paint_text(r.x + 1, top, Text(named.name[: r.w - 2], style=self.palette.view_name))

    def render(self) -> Text:
        w, h = self.size.width, self.size.height
        keys = self.layout_views(w, h)
        canvas = _Canvas(w, h)
        layout = self.meta.layouts.get(self.current_layout)
        framed = layout is not None and layout.margin >= 1
        for key in keys:
            view = self.meta.views[key].view
            if view.viewport_rect.is_degenerate():
                continue
            if framed:
                self._draw_frame(canvas, key)
            lines = render_view(
                view,
                self.meta.perspectives,
                self.meta.regions,
                self.data,
                cursor=self.cursor,
                selection=self.selection,
                palette=self.palette,
            )
            for i, line in enumerate(lines):
                canvas.paint_text(view.viewport_rect.x, view.viewport_rect.y + i, line)
        if not keys:
            return Text("<no layout>")
        return canvas.to_text()
