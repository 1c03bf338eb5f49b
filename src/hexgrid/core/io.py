from __future__ import annotations

import logging
import os
from pathlib import Path

from hexgrid.core.dirty import DamageSpan, DirtyTracker
from hexgrid.core.region import Region

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class InvalidOffset(ValueError):
    """Raised when an invalid (e.g., negative) offset is provided."""


class DataBuffer:
    """Editable in-memory copy of a file with dirty-span tracking.

    Every mutation widens the dirty region so `save` only has to write the
    bytes that may have changed.
    """

    def __init__(self, data: bytes | bytearray = b"", *, path: str | None = None) -> None:
        self._data = bytearray(data)
        self._path = path
        self.dirty = DirtyTracker(lambda: len(self._data), logger=logger)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray) -> DataBuffer:
        return cls(data)

    @classmethod
    def from_path(cls, path: str) -> DataBuffer:
        try:
            data = Path(path).read_bytes()
        except FileNotFoundError:
            raise FileNotFoundError(f"File not found: {path}") from None
        return cls(data, path=path)

    @property
    def path(self) -> str | None:
        return self._path

    @property
    def size(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    # ---- Reads ----
    def read(self, offset: int, length: int) -> bytes:
        """Read up to `length` bytes starting at `offset`.

        - Negative `offset` or `length` raises `InvalidOffset`.
        - Reading past the end returns the truncated data.
        """
        if offset < 0:
            raise InvalidOffset("offset must be >= 0")
        if length < 0:
            raise InvalidOffset("length must be >= 0")
        return bytes(self._data[offset : offset + length])

    def byte_at(self, offset: int) -> int | None:
        if offset < 0:
            raise InvalidOffset("offset must be >= 0")
        if offset >= len(self._data):
            return None
        return self._data[offset]

    # ---- Writes ----
    def write(self, offset: int, data: bytes) -> int:
        """Overwrite bytes in place, truncating at the end. Returns bytes written."""
        if offset < 0:
            raise InvalidOffset("offset must be >= 0")
        n = max(0, min(len(data), len(self._data) - offset))
        if n == 0:
            return 0
        self._data[offset : offset + n] = data[:n]
        self.dirty.widen(DamageSpan.range(offset, offset + n))
        return n

    def set_byte(self, offset: int, value: int) -> None:
        if offset < 0 or offset >= len(self._data):
            raise InvalidOffset(f"offset {offset} outside buffer of {len(self._data)} bytes")
        self._data[offset] = value & 0xFF
        self.dirty.widen(DamageSpan.single(offset))

    def zero_fill_region(self, region: Region) -> None:
        if region.is_empty() or region.begin < 0 or region.end >= len(self._data):
            return
        self._data[region.begin : region.end + 1] = bytes(region.len())
        self.dirty.widen(DamageSpan.range_inclusive(region.begin, region.end))

    def resize(self, new_len: int, fill: int = 0) -> None:
        if new_len < 0:
            raise InvalidOffset("length must be >= 0")
        old_len = len(self._data)
        if new_len > old_len:
            self._data.extend(bytes([fill & 0xFF]) * (new_len - old_len))
            self.dirty.widen(DamageSpan.range(old_len, new_len))
        else:
            del self._data[new_len:]

    # ---- Persistence ----
    def save(self, path: str | None = None) -> str:
        """Write changes back and mark the buffer clean.

        When the file on disk still has the baseline length only the dirty span
        is rewritten; otherwise the whole buffer is written.
        """
        path = path or self._path
        if path is None:
            raise ValueError("no path to save to")
        dirty = self.dirty.current()
        same_file = path == self._path and os.path.exists(path)
        same_len = same_file and len(self._data) == self.dirty.orig_len == os.path.getsize(path)
        if same_len and dirty is None:
            logger.debug("nothing to save to %s", path)
        elif same_len and dirty is not None:
            with open(path, "r+b") as fh:
                fh.seek(dirty.begin)
                fh.write(self._data[dirty.begin : dirty.end + 1])
            logger.debug("saved dirty span %d..=%d to %s", dirty.begin, dirty.end, path)
        else:
            Path(path).write_bytes(bytes(self._data))
            logger.debug("saved %d bytes to %s", len(self._data), path)
        self._path = path
        self.dirty.undirty()
        return path

    def reload(self) -> None:
        """Discard edits and re-read the backing file."""
        if self._path is None:
            raise ValueError("buffer has no backing file")
        self._data = bytearray(Path(self._path).read_bytes())
        self.dirty.undirty()
