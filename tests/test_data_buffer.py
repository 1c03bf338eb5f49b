from __future__ import annotations

from pathlib import Path

import pytest

from hexgrid.core.io import DataBuffer, InvalidOffset
from hexgrid.core.region import Region


def make_fixture_file(tmp_path: Path, size: int = 256) -> Path:
    # Deterministic content: 0..255 repeating
    p = tmp_path / "fixture.bin"
    p.write_bytes(bytes(i % 256 for i in range(size)))
    return p


def test_read_and_byte_at(tmp_path: Path) -> None:
    buf = DataBuffer.from_path(str(make_fixture_file(tmp_path)))
    assert len(buf) == 256
    assert buf.read(0, 4) == bytes([0, 1, 2, 3])
    assert buf.read(250, 100) == bytes(range(250, 256))
    assert buf.byte_at(255) == 255
    assert buf.byte_at(256) is None
    with pytest.raises(InvalidOffset):
        buf.read(-1, 1)
    with pytest.raises(InvalidOffset):
        buf.byte_at(-1)


def test_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        DataBuffer.from_path(str(tmp_path / "missing.bin"))


def test_writes_widen_dirty_region() -> None:
    buf = DataBuffer.from_bytes(bytes(100))
    assert buf.dirty.current() is None
    buf.set_byte(10, 0xAB)
    buf.write(40, b"\x01\x02\x03")
    assert buf.dirty.current() == Region(10, 42)
    assert buf.read(40, 3) == b"\x01\x02\x03"
    # Writes past the end are truncated
    assert buf.write(98, b"xyz") == 2
    assert buf.dirty.current() == Region(10, 99)
    with pytest.raises(InvalidOffset):
        buf.set_byte(100, 1)


def test_zero_fill_and_resize() -> None:
    buf = DataBuffer.from_bytes(b"\xff" * 16)
    buf.zero_fill_region(Region(4, 7))
    assert buf.read(0, 8) == b"\xff" * 4 + b"\x00" * 4
    assert buf.dirty.current() == Region(4, 7)
    buf.resize(20, 0xEE)
    assert len(buf) == 20
    assert buf.read(16, 4) == b"\xee" * 4
    assert buf.dirty.current() == Region(4, 19)
    buf.resize(8)
    assert buf.dirty.truncated(len(buf))


def test_save_writes_only_dirty_span(tmp_path: Path) -> None:
    p = make_fixture_file(tmp_path, size=64)
    buf = DataBuffer.from_path(str(p))
    buf.set_byte(5, 0xAA)
    buf.set_byte(9, 0xBB)
    # Changed on disk outside the dirty span: must survive a span-only save
    raw = bytearray(p.read_bytes())
    raw[40] = 0x77
    p.write_bytes(bytes(raw))
    buf.save()
    on_disk = p.read_bytes()
    assert on_disk[5] == 0xAA and on_disk[9] == 0xBB
    assert on_disk[40] == 0x77
    assert buf.dirty.current() is None


def test_save_after_resize_rewrites_whole_file(tmp_path: Path) -> None:
    p = make_fixture_file(tmp_path, size=32)
    buf = DataBuffer.from_path(str(p))
    buf.resize(16)
    buf.save()
    assert p.read_bytes() == bytes(range(16))
    assert buf.dirty.orig_len == 16
    assert not buf.dirty.truncated(len(buf))


def test_save_as_and_reload(tmp_path: Path) -> None:
    p = make_fixture_file(tmp_path, size=8)
    buf = DataBuffer.from_path(str(p))
    buf.set_byte(0, 0xFF)
    out = tmp_path / "copy.bin"
    buf.save(str(out))
    assert out.read_bytes()[0] == 0xFF
    assert buf.path == str(out)
    buf.set_byte(1, 0xEE)
    buf.reload()
    assert buf.byte_at(1) == 1
    assert buf.dirty.current() is None
