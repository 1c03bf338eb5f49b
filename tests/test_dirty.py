from __future__ import annotations

import logging

import pytest

from hexgrid.core.dirty import DamageSpan, DirtyTracker
from hexgrid.core.region import Region


def test_damage_span_constructors() -> None:
    assert DamageSpan.single(4) == DamageSpan(4, 4)
    assert DamageSpan.range(5, 9) == DamageSpan(5, 8)
    assert DamageSpan.range_inclusive(5, 9) == DamageSpan(5, 9)
    assert DamageSpan.range(5, 5).is_empty()


def test_widen_bounding_box() -> None:
    t = DirtyTracker()
    assert t.current() is None
    t.widen(DamageSpan.range(5, 9))
    assert t.current() == Region(5, 8)
    t.widen(DamageSpan.range(20, 25))
    assert t.current() == Region(5, 24)
    t.widen(DamageSpan.single(2))
    assert t.current() == Region(2, 24)
    # Inside the box: no change
    t.widen(DamageSpan.range_inclusive(10, 12))
    assert t.current() == Region(2, 24)


def test_widen_is_idempotent() -> None:
    t = DirtyTracker()
    for _ in range(3):
        t.widen(DamageSpan.range_inclusive(7, 11))
    assert t.current() == Region(7, 11)


@pytest.mark.parametrize(
    "spans",
    [
        [DamageSpan.single(50), DamageSpan.single(3), DamageSpan.range(10, 100)],
        [DamageSpan.range_inclusive(0, 0), DamageSpan.range(99, 101)],
        [DamageSpan.range(30, 40), DamageSpan.range(31, 32), DamageSpan.single(29)],
    ],
)
def test_widen_monotonic_and_contains_every_span(spans) -> None:
    t = DirtyTracker()
    prev: Region | None = None
    for s in spans:
        t.widen(s)
        cur = t.current()
        assert cur is not None
        assert cur.begin <= s.begin and cur.end >= s.end
        if prev is not None:
            assert cur.contains_region(prev)
        prev = cur


def test_empty_range_is_ignored() -> None:
    t = DirtyTracker()
    t.widen(DamageSpan.range(0, 0))
    assert t.current() is None


def test_undirty_resets_and_records_length() -> None:
    length = [100]
    t = DirtyTracker(lambda: length[0])
    assert t.orig_len == 100
    t.widen(DamageSpan.range(0, 10))
    length[0] = 80
    assert t.truncated(length[0])
    t.undirty()
    assert t.current() is None
    assert t.orig_len == 80
    assert not t.truncated(80)
    t.widen(DamageSpan.single(3))
    assert t.current() == Region(3, 3)


def test_current_returns_a_copy() -> None:
    t = DirtyTracker()
    t.widen(DamageSpan.single(1))
    snapshot = t.current()
    assert snapshot is not None
    snapshot.end = 999
    assert t.current() == Region(1, 1)


def test_injected_logger_receives_diagnostics(caplog: pytest.LogCaptureFixture) -> None:
    log = logging.getLogger("hexgrid.test.dirty")
    t = DirtyTracker(logger=log)
    with caplog.at_level(logging.DEBUG, logger="hexgrid.test.dirty"):
        t.widen(DamageSpan.range(4, 4))
    assert any("empty damage span" in r.getMessage() for r in caplog.records)


def test_reversed_span_is_logged_as_error(caplog: pytest.LogCaptureFixture) -> None:
    t = DirtyTracker()
    t.widen(DamageSpan.single(5))
    with caplog.at_level(logging.DEBUG, logger="hexgrid.core.dirty"):
        t.widen(DamageSpan(10, 3))
    assert t.current() == Region(5, 5)
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "ends before it begins" in errors[0].getMessage()
    assert DamageSpan(10, 3).is_reversed() and not DamageSpan(10, 3).is_empty()
