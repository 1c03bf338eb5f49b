from __future__ import annotations

import logging
import os
from enum import Enum

from rich.text import Text
from textual.app import App, ComposeResult
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, Label, Static

from hexgrid.core.config import Config
from hexgrid.core.edit import EditState
from hexgrid.core.handles import StaleHandle, ViewKey
from hexgrid.core.io import DataBuffer
from hexgrid.core.meta import Bookmark, Meta
from hexgrid.core.metafile import MetafileError, load_meta, metafile_path_for, save_meta
from hexgrid.core.region import Region
from hexgrid.core.search import find_bytes, parse_pattern, rfind_bytes
from hexgrid.core.view import ViewKind
from hexgrid.ui.palette import palette_named
from hexgrid.widgets.layout_view import LayoutView

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class InteractMode(Enum):
    VIEW = "view"
    EDIT = "edit"


class HexgridApp(App):
    """Textual application shell for hexgrid."""

    CSS = """
    LayoutView { height: 1fr; }
    #status { height: 1; }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("left", "cursor_left", "Left"),
        ("right", "cursor_right", "Right"),
        ("up", "cursor_up", "Up"),
        ("down", "cursor_down", "Down"),
        ("pageup", "page_up", "PgUp"),
        ("pagedown", "page_down", "PgDn"),
        ("home", "go_start", "Start"),
        ("end", "go_end", "End"),
        ("tab", "focus_next_view", "Next View"),
        ("i", "toggle_edit", "Edit"),
        ("+", "cols_inc", "Cols+"),
        ("-", "cols_dec", "Cols-"),
        ("c", "set_cols", "Set Cols"),
        ("f", "flip_rows", "Flip Rows"),
        ("v", "mark_selection", "Select"),
        ("r", "region_from_selection", "New Region"),
        ("x", "remove_view", "Remove View"),
        ("b", "toggle_bookmark", "Bookmark"),
        ("l", "next_layout", "Next Layout"),
        ("g", "open_goto", "Goto"),
        ("/", "open_search", "Find"),
        ("n", "search_next", "Next Match"),
        ("p", "search_prev", "Prev Match"),
        ("ctrl+s", "save_data", "Save"),
        ("ctrl+w", "save_meta", "Save Meta"),
        ("ctrl+r", "reload", "Reload"),
    ]

    def __init__(
        self,
        path: str,
        *,
        meta_path: str | None = None,
        config: Config | None = None,
        cols: int | None = None,
    ) -> None:
        super().__init__()
        self._path = path
        self._meta_path = meta_path or str(metafile_path_for(path))
        self.config = config or Config()
        self._cols_override = cols
        self.title = f"hexgrid: {os.path.basename(path)}"
        self.status = Static(id="status")
        self.data: DataBuffer | None = None
        self.meta: Meta | None = None
        self.layout_view: LayoutView | None = None
        self.edit = EditState()
        self.mode = InteractMode.VIEW
        self._select_a: int | None = None
        self._last_search: tuple[str, bytes] | None = None
        self._status_hint = ""

    def _load_meta(self, data_len: int) -> Meta:
        if os.path.exists(self._meta_path):
            try:
                meta = load_meta(self._meta_path, logger=logger)
            except MetafileError as e:
                logger.warning("ignoring metafile %s: %s", self._meta_path, e)
            else:
                if len(meta.layouts):
                    meta.clamp_regions(data_len)
                    return meta
        meta = Meta.default_for_len(data_len, self.config)
        if self._cols_override is not None:
            for key in list(meta.perspectives.keys()):
                meta.set_cols(key, self._cols_override)
        return meta

    def compose(self) -> ComposeResult:  # noqa: D401 - Textual API
        try:
            self.data = DataBuffer.from_path(self._path)
        except FileNotFoundError:
            yield Static(f"Error: file not found: {self._path}")
            return
        self.meta = self._load_meta(len(self.data))
        self.layout_view = LayoutView(
            self.meta, self.data, palette=palette_named(self.config.palette)
        )
        yield Header(show_clock=False, id="header")
        yield self.layout_view
        yield self.status
        yield Footer()

    def on_mount(self) -> None:
        self.update_status()
        if self.layout_view is not None:
            self.set_focus(self.layout_view)

    # ---- Helpers ----
    def _focused(self) -> ViewKey | None:
        if self.layout_view is None:
            return None
        return self.layout_view.focused_view

    def _focused_cols(self) -> int:
        key = self._focused()
        if key is None or self.meta is None or not self.meta.view_valid(key):
            return 1
        return self.meta.perspectives[self.meta.views[key].view.perspective].cols

    def _set_cursor(self, offset: int) -> None:
        if self.data is None or self.layout_view is None:
            return
        self.edit.set_cursor(offset, len(self.data))
        self.layout_view.cursor = self.edit.cursor
        if self._select_a is not None:
            self.layout_view.selection = Region.from_selection(self._select_a, self.edit.cursor)
        self.layout_view.sync_to_cursor()
        self.layout_view.refresh()
        self.update_status()

    def jump_cursor(self, offset: int) -> None:
        self._set_cursor(offset)

    def set_status_hint(self, text: str | None) -> None:
        self._status_hint = text or ""
        self.update_status()

    def update_status(self) -> None:
        if self.data is None or self.meta is None:
            self.status.update(Text("hexgrid"))
            return
        cur = self.edit.cursor
        b = self.data.byte_at(cur)
        b_hex = f"{b:02X}" if b is not None else "--"
        parts = [
            os.path.basename(self._path),
            f"{len(self.data)} bytes",
            f"cursor: 0x{cur:08X} [{b_hex}]",
            self.mode.value,
        ]
        key = self._focused()
        if key is not None and self.meta.view_valid(key):
            view = self.meta.views[key]
            persp = self.meta.perspectives[view.view.perspective]
            row, col = persp.row_col_of(cur, self.meta.regions)
            parts.append(f"{view.name} r{row} c{col} cols={persp.cols}")
        dirty = self.data.dirty.current()
        if dirty is not None:
            parts.append(f"dirty 0x{dirty.begin:X}..=0x{dirty.end:X}")
        if self.data.dirty.truncated(len(self.data)):
            parts.append("truncated")
        bm = self.meta.bookmark_at(cur)
        if bm is not None:
            parts.append(f"bookmark: {bm.label}")
        if self._status_hint:
            parts.append(self._status_hint)
        self.status.update(Text(" | ".join(parts)))

    # ---- Cursor actions ----
    def action_cursor_left(self) -> None:
        self._set_cursor(self.edit.cursor - 1)

    def action_cursor_right(self) -> None:
        self._set_cursor(self.edit.cursor + 1)

    def action_cursor_up(self) -> None:
        self._set_cursor(self.edit.cursor - self._focused_cols())

    def action_cursor_down(self) -> None:
        self._set_cursor(self.edit.cursor + self._focused_cols())

    def _page_rows(self) -> int:
        key = self._focused()
        if key is None or self.meta is None or key not in self.meta.views:
            return 1
        return max(1, self.meta.views[key].view.rows())

    def action_page_up(self) -> None:
        self._set_cursor(self.edit.cursor - self._page_rows() * self._focused_cols())

    def action_page_down(self) -> None:
        self._set_cursor(self.edit.cursor + self._page_rows() * self._focused_cols())

    def action_go_start(self) -> None:
        self._set_cursor(0)

    def action_go_end(self) -> None:
        if self.data is not None:
            self._set_cursor(len(self.data) - 1)

    def action_focus_next_view(self) -> None:
        if self.layout_view is not None:
            self.layout_view.focus_next_view()
            self.update_status()

    def action_next_layout(self) -> None:
        if self.meta is None or self.layout_view is None:
            return
        keys = list(self.meta.layouts.keys())
        if not keys:
            return
        cur = self.layout_view.current_layout
        nxt = keys[(keys.index(cur) + 1) % len(keys)] if cur in keys else keys[0]
        self.layout_view.current_layout = nxt
        self.layout_view.refresh()
        self.set_status_hint(f"layout: {self.meta.layouts[nxt].name}")

    # ---- Perspective actions ----
    def _change_cols(self, cols: int) -> None:
        key = self._focused()
        if key is None or self.meta is None or not self.meta.view_valid(key):
            return
        pkey = self.meta.views[key].view.perspective
        self.meta.set_cols(pkey, cols)
        if self.layout_view is not None:
            self.layout_view.sync_to_cursor()
            self.layout_view.refresh()
        self.update_status()

    def action_cols_inc(self) -> None:
        self._change_cols(self._focused_cols() + 1)

    def action_cols_dec(self) -> None:
        self._change_cols(self._focused_cols() - 1)

    def action_set_cols(self) -> None:
        self.push_screen(PromptScreen("Column count:"), self._cols_submit)

    def _cols_submit(self, value: str | None) -> None:
        if value is None:
            return
        cols = parse_offset(value)
        if cols is None:
            self.set_status_hint("[invalid column count]")
            return
        self._change_cols(cols)

    def action_flip_rows(self) -> None:
        key = self._focused()
        if key is None or self.meta is None or not self.meta.view_valid(key):
            return
        persp = self.meta.perspectives[self.meta.views[key].view.perspective]
        persp.flip_row_order = not persp.flip_row_order
        if self.layout_view is not None:
            self.layout_view.refresh()

    # ---- Metadata actions ----
    def action_mark_selection(self) -> None:
        if self.layout_view is None:
            return
        if self._select_a is None:
            self._select_a = self.edit.cursor
            self.layout_view.selection = Region(self.edit.cursor, self.edit.cursor)
            self.set_status_hint("[selecting]")
        else:
            self._select_a = None
            self.layout_view.selection = None
            self.set_status_hint("")
        self.layout_view.refresh()

    def action_region_from_selection(self) -> None:
        """Selection -> region -> perspective -> hex view, added as a new layout row."""
        if self.meta is None or self.layout_view is None or self.layout_view.selection is None:
            self.set_status_hint("[no selection]")
            return
        sel = self.layout_view.selection
        name = f"region {sel.begin:X}-{sel.end:X}"
        rkey = self.meta.add_region(name, Region(sel.begin, sel.end))
        pkey = self.meta.add_perspective_from_region(rkey, name, cols=self.config.default_cols)
        vkey = self.meta.add_view_from_perspective(pkey, ViewKind.HEX, name, self.config)
        layout = self.meta.layouts.get(self.layout_view.current_layout)
        if layout is not None:
            layout.add_to_new_row(vkey)
        self._select_a = None
        self.layout_view.selection = None
        self.layout_view.refresh()
        self.set_status_hint(f"[added {name}]")

    def action_remove_view(self) -> None:
        key = self._focused()
        if key is None or self.meta is None or self.layout_view is None:
            return
        self.meta.remove_view(key)
        self.layout_view.forget_view(key)
        self.layout_view.refresh()
        self.update_status()

    def action_toggle_bookmark(self) -> None:
        if self.meta is None:
            return
        bm = self.meta.bookmark_at(self.edit.cursor)
        if bm is not None:
            self.meta.bookmarks.remove(bm)
        else:
            cur = self.edit.cursor
            self.meta.bookmarks.append(Bookmark(offset=cur, label=f"0x{cur:X}"))
        self.update_status()

    # ---- Editing ----
    def action_toggle_edit(self) -> None:
        self.mode = InteractMode.EDIT if self.mode is InteractMode.VIEW else InteractMode.VIEW
        self.edit.hex_edit_half_digit = None
        self.update_status()

    def handle_edit_key(self, key: str, character: str | None) -> bool:
        """Feed a key to the editor. Returns True when consumed."""
        if self.mode is not InteractMode.EDIT or self.data is None or self.meta is None:
            return False
        if key == "escape":
            self.action_toggle_edit()
            return True
        if character is None:
            return False
        vkey = self._focused()
        if vkey is None or vkey not in self.meta.views:
            return False
        kind = self.meta.views[vkey].view.kind
        if kind is ViewKind.ASCII:
            consumed = self.edit.type_ascii(character, self.data)
        else:
            consumed = character in "0123456789abcdefABCDEF"
            self.edit.type_hex_digit(character, self.data)
        if consumed:
            self._set_cursor(self.edit.cursor)
        return consumed

    # ---- Persistence ----
    def action_save_data(self) -> None:
        if self.data is None:
            return
        try:
            self.data.save()
        except OSError as e:
            self.set_status_hint(f"[save failed: {e}]")
            return
        self.set_status_hint("[saved]")

    def action_save_meta(self) -> None:
        if self.meta is None:
            return
        try:
            save_meta(self.meta, self._meta_path)
        except OSError as e:
            self.set_status_hint(f"[meta save failed: {e}]")
            return
        self.set_status_hint(f"[saved {os.path.basename(self._meta_path)}]")

    def action_reload(self) -> None:
        if self.data is None:
            return
        self.data.reload()
        if self.meta is not None:
            self.meta.clamp_regions(len(self.data))
        self._set_cursor(self.edit.cursor)
        self.set_status_hint("[reloaded]")

    # ---- Goto ----
    def action_open_goto(self) -> None:
        self.push_screen(PromptScreen("Goto offset (hex like 0x1A2B or decimal):"), self._goto_submit)

    def _goto_submit(self, value: str | None) -> None:
        if value is None or self.data is None:
            return
        offs = parse_offset(value)
        if offs is None or offs < 0 or offs >= len(self.data):
            self.set_status_hint("[invalid offset]")
            return
        self._set_cursor(offs)
        key = self._focused()
        if key is not None and self.meta is not None:
            try:
                self.meta.views[key].view.center_on_offset(offs, self.meta.perspectives, self.meta.regions)
            except StaleHandle:
                logger.debug("focused view has no valid perspective")
        self.set_status_hint("")

    # ---- Find ----
    def action_open_search(self) -> None:
        self.push_screen(
            PromptScreen('Find (hex bytes like DE AD BE EF, or "text"):'), self._search_submit
        )

    def _search_submit(self, value: str | None) -> None:
        if value is None or self.data is None:
            return
        kind, needle = parse_pattern(value)
        if needle is None:
            self.set_status_hint("[invalid pattern]")
            return
        self._last_search = (kind, needle)
        self._jump_to_match(find_bytes(self.data, needle, self.edit.cursor))

    def action_search_next(self) -> None:
        if self.data is None or self._last_search is None:
            return
        _, needle = self._last_search
        start = min(len(self.data), self.edit.cursor + 1)
        self._jump_to_match(find_bytes(self.data, needle, start))

    def action_search_prev(self) -> None:
        if self.data is None or self._last_search is None:
            return
        _, needle = self._last_search
        self._jump_to_match(rfind_bytes(self.data, needle, self.edit.cursor))

    def _jump_to_match(self, found: int | None) -> None:
        if found is None:
            self.set_status_hint("[no match]")
            return
        self._set_cursor(found)
        kind, needle = self._last_search or ("bytes", b"")
        self.set_status_hint(f"[{kind} match, {len(needle)} bytes]")


def parse_offset(text: str) -> int | None:
    s = text.strip().lower()
    try:
        if s.startswith("0x"):
            return int(s, 16)
        return int(s, 10)
    except ValueError:
        return None


class PromptScreen(ModalScreen[str | None]):
    def __init__(self, prompt: str):
        super().__init__()
        self._prompt = prompt

    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield Label(self._prompt)
        self._input = Input(placeholder="value")
        yield self._input

    def on_mount(self) -> None:  # type: ignore[override]
        self.set_focus(self._input)

    def on_input_submitted(self, event: Input.Submitted) -> None:  # type: ignore[override]
        self.dismiss(event.value)

    def on_key(self, event) -> None:  # type: ignore[override]
        if event.key == "escape":
            self.dismiss(None)
