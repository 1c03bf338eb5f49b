from __future__ import annotations

from dataclasses import dataclass

from hexgrid.core.io import DataBuffer

HEX_DIGITS = "0123456789abcdefABCDEF"


@dataclass
class EditState:
    # The editing byte offset
    cursor: int = 0
    # The high nibble typed so far into a hex view
    hex_edit_half_digit: int | None = None

    def move_cursor(self, delta: int, data_len: int) -> None:
        self.set_cursor(self.cursor + delta, data_len)

    def set_cursor(self, offset: int, data_len: int) -> None:
        self.hex_edit_half_digit = None
        if data_len <= 0:
            self.cursor = 0
            return
        self.cursor = max(0, min(offset, data_len - 1))

    def type_hex_digit(self, digit: str, data: DataBuffer) -> bool:
        """Feed one hex digit. The second digit writes the byte and advances.

        Returns True when a byte was written.
        """
        if len(digit) != 1 or digit not in HEX_DIGITS or len(data) == 0:
            return False
        nibble = int(digit, 16)
        if self.hex_edit_half_digit is None:
            self.hex_edit_half_digit = nibble
            return False
        data.set_byte(self.cursor, (self.hex_edit_half_digit << 4) | nibble)
        self.move_cursor(1, len(data))
        return True

    def type_ascii(self, ch: str, data: DataBuffer) -> bool:
        if len(ch) != 1 or not (32 <= ord(ch) <= 126) or len(data) == 0:
            return False
        data.set_byte(self.cursor, ord(ch))
        self.move_cursor(1, len(data))
        return True
