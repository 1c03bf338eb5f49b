from __future__ import annotations

from hexgrid.core.io import DataBuffer

_CHUNK_SIZE = 64 * 1024
_HEX = "0123456789abcdef"


def parse_pattern(text: str) -> tuple[str, bytes | None]:
    """Turn user input into ("bytes" | "ascii", needle).

    Hex input may be 'DEADBEEF', 'DE AD BE EF' or '0xDEADBEEF'. Text in
    double quotes is always searched as ASCII; anything else that is not
    hex falls back to ASCII too. Empty input gives a None needle.
    """
    s = text.strip()
    if not s:
        return ("bytes", None)
    if len(s) >= 2 and s[0] == s[-1] == '"':
        inner = s[1:-1]
        return ("ascii", inner.encode("utf-8") if inner else None)
    s_no_space = s.replace(" ", "").lower()
    if s_no_space.startswith("0x"):
        s_no_space = s_no_space[2:]
    if s_no_space and all(c in _HEX for c in s_no_space) and len(s_no_space) % 2 == 0:
        return ("bytes", bytes.fromhex(s_no_space))
    return ("ascii", s.encode("utf-8"))


def find_bytes(data: DataBuffer, needle: bytes, start: int) -> int | None:
    """Find `needle` at or after `start`. Returns offset or None.

    Chunked scan; chunks overlap by len(needle)-1 to catch boundary matches.
    """
    if start < 0:
        start = 0
    size = len(data)
    if not needle:
        return start if start <= size else None
    if start >= size:
        return None

    overlap = len(needle) - 1
    pos = start
    while pos < size:
        end = min(size, pos + _CHUNK_SIZE)
        idx = data.read(pos, end - pos).find(needle)
        if idx != -1:
            return pos + idx
        if end >= size:
            break
        pos = end - overlap
    return None


def rfind_bytes(data: DataBuffer, needle: bytes, before: int) -> int | None:
    """Find the last match of `needle` starting strictly before `before`."""
    if not needle or before <= 0:
        return None
    size = len(data)
    # A match starting at before-1 may extend up to len(needle)-1 bytes further
    hi = min(size, before - 1 + len(needle))
    while hi > 0:
        lo = max(0, hi - _CHUNK_SIZE)
        idx = data.read(lo, hi - lo).rfind(needle)
        if idx != -1:
            return lo + idx
        if lo == 0:
            break
        hi = lo + len(needle) - 1
    return None


def find_ascii(data: DataBuffer, text: str, start: int, encoding: str = "utf-8") -> int | None:
    """Find ASCII/UTF-8 text forward from `start`. Returns offset or None."""
    try:
        needle = text.encode(encoding)
    except UnicodeEncodeError:
        return None
    return find_bytes(data, needle, start)


def find_all(data: DataBuffer, needle: bytes) -> list[int]:
    """Offsets of every non-overlapping match, in ascending order."""
    hits: list[int] = []
    if not needle:
        return hits
    pos = find_bytes(data, needle, 0)
    while pos is not None:
        hits.append(pos)
        pos = find_bytes(data, needle, pos + len(needle))
    return hits
