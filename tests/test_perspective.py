from __future__ import annotations

import pytest

from hexgrid.core.handles import StaleHandle
from hexgrid.core.perspective import Perspective
from hexgrid.core.region import NamedRegion, Region, new_region_map


def make(begin: int, end: int, cols: int):
    regions = new_region_map()
    key = regions.insert(NamedRegion(name="r", region=Region(begin, end)))
    return Perspective(region=key, cols=cols, name="p"), regions


def test_region_len_and_contains() -> None:
    r = Region(0, 99)
    assert r.len() == 100
    assert r.contains(0) and r.contains(99) and not r.contains(100)
    assert Region(5, 4).len() == 0
    assert Region(10, 2).is_empty()
    assert Region(0, 10).contains_region(Region(2, 3))
    assert not Region(0, 10).contains_region(Region(2, 11))
    assert Region.from_selection(9, 3) == Region(3, 9)
    assert Region(5, 500).clamped(100) == Region(5, 99)


def test_scenario_region_0_99_cols_10() -> None:
    p, regions = make(0, 99, 10)
    assert p.byte_offset_of(3, 4, regions) == 34
    assert p.row_col_of(34, regions) == (3, 4)
    assert p.n_rows(regions) == 10
    assert p.last_row_idx(regions) == 9
    assert p.last_col_idx(regions) == 9


def test_offset_relative_to_region_begin() -> None:
    p, regions = make(100, 149, 16)
    assert p.byte_offset_of(0, 0, regions) == 100
    assert p.byte_offset_of(1, 2, regions) == 118
    assert p.row_col_of(118, regions) == (1, 2)
    # Offsets before the region saturate to the origin
    assert p.row_col_of(5, regions) == (0, 0)
    assert p.n_rows(regions) == 4


@pytest.mark.parametrize("cols", [1, 3, 7, 10, 16, 50])
def test_inverse_mapping(cols: int) -> None:
    p, regions = make(20, 69, cols)
    for row in range(60):
        for col in range(cols):
            if p.in_bounds(row, col, regions):
                assert p.row_col_of(p.byte_offset_of(row, col, regions), regions) == (row, col)


def test_in_bounds() -> None:
    p, regions = make(0, 24, 10)
    assert p.in_bounds(0, 0, regions)
    assert p.in_bounds(2, 4, regions)
    assert not p.in_bounds(2, 5, regions)
    assert not p.in_bounds(0, 10, regions)
    assert not p.in_bounds(-1, 0, regions)
    assert not p.in_bounds(0, -1, regions)


@pytest.mark.parametrize("requested", [-5, 0, 1, 7, 50, 51, 10_000])
def test_clamp_cols(requested: int) -> None:
    p, regions = make(0, 49, requested)
    p.clamp_cols(regions)
    assert 1 <= p.cols <= 50


def test_clamp_cols_zero_length_region_never_divides_by_zero() -> None:
    p, regions = make(10, 5, 0)
    assert p.row_col_of(12, regions) == (2, 0)
    assert p.n_rows(regions) == 0
    p.clamp_cols(regions)
    assert p.cols == 1


def test_row_span_of() -> None:
    p, regions = make(0, 99, 10)
    assert p.row_span_of(Region(0, 24)) == (2, 5)
    assert p.row_span_of(Region(0, 9)) == (1, 0)


def test_flip_row_order_does_not_change_addressing() -> None:
    p, regions = make(0, 99, 10)
    p.flip_row_order = True
    assert p.byte_offset_of(3, 4, regions) == 34
    assert p.row_col_of(34, regions) == (3, 4)
    assert p.display_row(0, 10) == 9
    assert p.display_row(9, 10) == 0


def test_removed_region_is_not_found() -> None:
    p, regions = make(0, 99, 10)
    regions.remove(p.region)
    with pytest.raises(StaleHandle):
        p.byte_offset_of(0, 0, regions)
    with pytest.raises(StaleHandle):
        p.clamp_cols(regions)
