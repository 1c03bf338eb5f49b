from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Palette:
    status_bg: str
    status_fg: str
    accent: str
    view_border: str
    focus_border: str
    view_name: str
    offset_fg: str
    byte_zero_fg: str
    byte_printable_fg: str
    byte_control_fg: str
    byte_high_fg: str
    cursor_bg: str
    cursor_fg: str
    selection_bg: str
    selection_fg: str
    dirty_fg: str
    warning_fg: str


DEFAULT = Palette(
    status_bg="#1f2430",
    status_fg="#d8dee9",
    accent="#5ea1ff",
    view_border="#3b4252",
    focus_border="#ffa657",
    view_name="#8892a0",
    offset_fg="#8892a0",
    byte_zero_fg="#6b7280",
    byte_printable_fg="#9cdcfe",
    byte_control_fg="#ce9178",
    byte_high_fg="#d7ba7d",
    cursor_bg="#b36b00",
    cursor_fg="#ffffff",
    selection_bg="#3b4252",
    selection_fg="#ffffff",
    dirty_fg="#ffb86c",
    warning_fg="#ff5555",
)

DIM = Palette(
    status_bg="#2b2b2b",
    status_fg="#cccccc",
    accent="#a0a0a0",
    view_border="#444444",
    focus_border="#bbbbbb",
    view_name="#777777",
    offset_fg="#777777",
    byte_zero_fg="#666666",
    byte_printable_fg="#cccccc",
    byte_control_fg="#aaaaaa",
    byte_high_fg="#bbbbbb",
    cursor_bg="#7a7a7a",
    cursor_fg="#000000",
    selection_bg="#303030",
    selection_fg="#000000",
    dirty_fg="#e6b673",
    warning_fg="#ff6666",
)

HIGH_CONTRAST = Palette(
    status_bg="#000000",
    status_fg="#ffffff",
    accent="#00ffff",
    view_border="#888888",
    focus_border="#ffff00",
    view_name="#aaaaaa",
    offset_fg="#aaaaaa",
    byte_zero_fg="#888888",
    byte_printable_fg="#00ffff",
    byte_control_fg="#ff00ff",
    byte_high_fg="#ffff00",
    cursor_bg="#888800",
    cursor_fg="#000000",
    selection_bg="#333333",
    selection_fg="#000000",
    dirty_fg="#ffb000",
    warning_fg="#ff6666",
)

PALETTES = {"default": DEFAULT, "dim": DIM, "high_contrast": HIGH_CONTRAST}

# Selected palette for now
PALETTE = DEFAULT


def palette_named(name: str) -> Palette:
    return PALETTES.get(name, DEFAULT)
