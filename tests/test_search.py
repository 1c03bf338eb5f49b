from __future__ import annotations

import pytest

from hexgrid.core.io import DataBuffer
from hexgrid.core.search import find_all, find_ascii, find_bytes, parse_pattern, rfind_bytes


@pytest.mark.parametrize(
    "text,expected",
    [
        ("DEADBEEF", ("bytes", b"\xde\xad\xbe\xef")),
        ("de ad be ef", ("bytes", b"\xde\xad\xbe\xef")),
        ("0x00ff", ("bytes", b"\x00\xff")),
        ("abc", ("ascii", b"abc")),
        ('"cafe"', ("ascii", b"cafe")),
        ("hello world", ("ascii", b"hello world")),
        ("", ("bytes", None)),
        ('""', ("ascii", None)),
    ],
)
def test_parse_pattern(text, expected) -> None:
    assert parse_pattern(text) == expected


def test_find_bytes_basic() -> None:
    raw = b"hello world\x00\x01\x02DEADBEEFtrail"
    data = DataBuffer.from_bytes(raw)
    assert find_bytes(data, b"DEADBEEF", 0) == raw.index(b"DEADBEEF")
    assert find_bytes(data, b"NOPE", 0) is None
    assert find_bytes(data, b"hello", 1) is None
    assert find_bytes(data, b"", 3) == 3


def test_find_bytes_boundary() -> None:
    # Needle crossing a 64k chunk boundary
    chunk = 64 * 1024
    buf = bytearray(b"A" * (chunk + 10))
    start = chunk - 2
    buf[start : start + 4] = b"XYZW"
    data = DataBuffer.from_bytes(bytes(buf))
    assert find_bytes(data, b"XYZW", 0) == start
    assert rfind_bytes(data, b"XYZW", len(data)) == start


def test_rfind_bytes_strictly_before() -> None:
    data = DataBuffer.from_bytes(b"ab--ab--ab")
    assert rfind_bytes(data, b"ab", 10) == 8
    assert rfind_bytes(data, b"ab", 8) == 4
    assert rfind_bytes(data, b"ab", 5) == 4
    assert rfind_bytes(data, b"ab", 4) == 0
    assert rfind_bytes(data, b"ab", 0) is None


def test_find_ascii_and_find_all() -> None:
    data = DataBuffer.from_bytes(b"abc123 abcXYZ abc")
    assert find_ascii(data, "abcXYZ", 0) == 7
    assert find_ascii(data, "missing", 0) is None
    assert find_all(data, b"abc") == [0, 7, 14]
    assert find_all(DataBuffer.from_bytes(b"aaaa"), b"aa") == [0, 2]
    assert find_all(data, b"") == []


def test_search_sees_unsaved_edits() -> None:
    data = DataBuffer.from_bytes(bytes(32))
    data.write(20, b"\xca\xfe")
    assert find_bytes(data, b"\xca\xfe", 0) == 20
