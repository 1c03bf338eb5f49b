"""Metadata the user collects about a file: regions, perspectives, views, layouts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from hexgrid.core.config import Config
from hexgrid.core.handles import LayoutKey, PerspectiveKey, RegionKey, ViewKey
from hexgrid.core.layout import Layout, LayoutMap, new_layout_map
from hexgrid.core.perspective import Perspective, PerspectiveMap, new_perspective_map
from hexgrid.core.region import NamedRegion, Region, RegionMap, new_region_map
from hexgrid.core.view import NamedView, View, ViewKind, ViewMap, new_view_map

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass
class Bookmark:
    """A bookmark for an offset in a file"""

    offset: int
    label: str
    desc: str = ""


@dataclass
class Meta:
    regions: RegionMap = field(default_factory=new_region_map)
    perspectives: PerspectiveMap = field(default_factory=new_perspective_map)
    views: ViewMap = field(default_factory=new_view_map)
    layouts: LayoutMap = field(default_factory=new_layout_map)
    bookmarks: list[Bookmark] = field(default_factory=list)

    @classmethod
    def default_for_len(cls, data_len: int, config: Config | None = None) -> Meta:
        """Whole-file region, one perspective, and hex + ascii views side by side."""
        config = config or Config()
        meta = cls()
        rkey = meta.add_region("default", Region(0, max(0, data_len - 1)))
        pkey = meta.add_perspective_from_region(rkey, "default", cols=config.default_cols)
        hex_key = meta.add_view_from_perspective(pkey, ViewKind.HEX, "default hex", config)
        ascii_key = meta.add_view_from_perspective(pkey, ViewKind.ASCII, "default ascii", config)
        meta.add_layout("Default", [[hex_key, ascii_key]], margin=config.margin)
        return meta

    # ---- Creation ----
    def add_region(self, name: str, region: Region, desc: str = "") -> RegionKey:
        return self.regions.insert(NamedRegion(name=name, region=region, desc=desc))

    def add_region_from_selection(self, a: int, b: int, name: str) -> RegionKey:
        return self.add_region(name, Region.from_selection(a, b))

    def add_perspective_from_region(
        self, key: RegionKey, name: str, cols: int | None = None
    ) -> PerspectiveKey:
        persp = Perspective.from_region(key, name)
        if cols is not None:
            persp.cols = cols
        persp.clamp_cols(self.regions)
        return self.perspectives.insert(persp)

    def add_view_from_perspective(
        self,
        key: PerspectiveKey,
        kind: ViewKind,
        name: str,
        config: Config | None = None,
    ) -> ViewKey:
        # Resolve first so a stale perspective key fails here, not at draw time
        _ = self.perspectives[key]
        return self.views.insert(NamedView(view=View.new(key, kind, config), name=name))

    def add_layout(
        self, name: str, grid: list[list[ViewKey]] | None = None, margin: int | None = None
    ) -> LayoutKey:
        layout = Layout(name=name, view_grid=[list(r) for r in (grid or []) if r])
        if margin is not None:
            layout.margin = margin
        return self.layouts.insert(layout)

    # ---- Mutation with clamping ----
    def set_region_bounds(self, key: RegionKey, begin: int, end: int) -> None:
        named = self.regions[key]
        named.region = Region(begin, end)
        for persp in self.perspectives.values():
            if persp.region == key:
                persp.clamp_cols(self.regions)

    def set_cols(self, key: PerspectiveKey, cols: int) -> int:
        persp = self.perspectives[key]
        persp.cols = cols
        persp.clamp_cols(self.regions)
        return persp.cols

    def set_perspective_region(self, key: PerspectiveKey, region: RegionKey) -> None:
        persp = self.perspectives[key]
        _ = self.regions[region]
        persp.region = region
        persp.clamp_cols(self.regions)

    def clamp_regions(self, data_len: int) -> int:
        """Bound every region to the buffer, then re-clamp cols. Returns regions changed."""
        changed = 0
        for key, named in self.regions.items():
            bounded = named.region.clamped(data_len)
            if bounded != named.region:
                logger.info(
                    "region %s %r clamped to %d..=%d", key.token(), named.name, bounded.begin, bounded.end
                )
                named.region = bounded
                changed += 1
        self.clamp_all_cols()
        return changed

    def clamp_all_cols(self) -> None:
        for key, persp in self.perspectives.items():
            if persp.region in self.regions:
                persp.clamp_cols(self.regions)
            else:
                logger.debug("perspective %s has no region; not clamping", key.token())

    # ---- Validity ----
    def perspective_valid(self, key: PerspectiveKey) -> bool:
        persp = self.perspectives.get(key)
        return persp is not None and persp.region in self.regions

    def view_valid(self, key: ViewKey) -> bool:
        named = self.views.get(key)
        return named is not None and self.perspective_valid(named.view.perspective)

    def view_max_needed_size(self, key: ViewKey) -> tuple[int, int]:
        """Layout-engine adapter; invalid views need no space."""
        if not self.view_valid(key):
            return (0, 0)
        return self.views[key].view.max_needed_size(self.perspectives, self.regions)

    # ---- Removal and membership maintenance ----
    def remove_view(self, key: ViewKey) -> NamedView | None:
        removed = self.views.remove(key)
        for layout in self.layouts.values():
            layout.remove_view(key)
        return removed

    def remove_region(self, key: RegionKey) -> NamedRegion | None:
        removed = self.regions.remove(key)
        if removed is not None:
            stale = [k.token() for k, p in self.perspectives.items() if p.region == key]
            if stale:
                logger.info("region %s removed; perspectives now invalid: %s", key.token(), stale)
        return removed

    def remove_perspective(self, key: PerspectiveKey) -> Perspective | None:
        return self.perspectives.remove(key)

    def remove_layout(self, key: LayoutKey) -> Layout | None:
        return self.layouts.remove(key)

    def prune_dangling(self) -> int:
        """Drop layout entries whose view no longer exists. Returns count dropped."""
        count = 0
        for layout in self.layouts.values():
            dropped = layout.retain_views(lambda k: k in self.views)
            for k in dropped:
                logger.warning("layout %r: dropped dangling view %s", layout.name, k.token())
            count += len(dropped)
        return count

    def layouts_containing(self, key: ViewKey) -> list[LayoutKey]:
        return [lk for lk, layout in self.layouts.items() if layout.contains(key)]

    def first_layout(self) -> LayoutKey:
        return next(iter(self.layouts.keys()), LayoutKey.null())

    def region_of_view(self, key: ViewKey) -> Region | None:
        if not self.view_valid(key):
            return None
        persp = self.perspectives[self.views[key].view.perspective]
        return self.regions[persp.region].region

    def bookmark_at(self, offset: int) -> Bookmark | None:
        for bm in self.bookmarks:
            if bm.offset == offset:
                return bm
        return None
