from __future__ import annotations

import pytest

from hexgrid.core.handles import StaleHandle
from hexgrid.core.region import NamedRegion, Region, new_region_map


@pytest.mark.parametrize(
    "begin,end,length",
    [(0, 0, 1), (0, 99, 100), (10, 19, 10), (5, 4, 0), (9, 2, 0)],
)
def test_len_is_inclusive_and_saturating(begin, end, length) -> None:
    r = Region(begin, end)
    assert r.len() == length
    assert r.is_empty() == (length == 0)


def test_contains() -> None:
    r = Region(10, 20)
    assert r.contains(10) and r.contains(20)
    assert not r.contains(9) and not r.contains(21)
    assert r.contains_region(Region(12, 20))
    assert not r.contains_region(Region(12, 21))


def test_from_selection_and_clamped() -> None:
    assert Region.from_selection(30, 5) == Region(5, 30)
    assert Region(50, 500).clamped(100) == Region(50, 99)
    assert Region(-3, 4).clamped(100) == Region(0, 4)
    assert Region(0, 9).clamped(0) == Region(0, 0)


def test_region_map() -> None:
    regions = new_region_map()
    key = regions.insert(NamedRegion(name="hdr", region=Region(0, 15)))
    assert regions[key].region.len() == 16
    regions.remove(key)
    with pytest.raises(StaleHandle):
        regions[key]
