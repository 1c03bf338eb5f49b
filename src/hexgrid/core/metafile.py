"""YAML persistence for `Meta`.

Keys are written as `<index>v<version>` tokens and restored verbatim, so
references between tables survive a save/load round trip. Entries whose
references do not resolve after loading are dropped with a warning.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from hexgrid.core.handles import LayoutKey, PerspectiveKey, RegionKey, ViewKey
from hexgrid.core.layout import Layout, default_margin
from hexgrid.core.meta import Bookmark, Meta
from hexgrid.core.perspective import DEFAULT_COLS, Perspective
from hexgrid.core.region import NamedRegion, Region
from hexgrid.core.view import NamedView, ScrollOffset, View, ViewKind

_default_logger = logging.getLogger(__name__)
_default_logger.addHandler(logging.NullHandler())

METAFILE_VERSION = 1
METAFILE_SUFFIX = ".hexgrid.yaml"


class MetafileError(Exception):
    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


def metafile_path_for(data_path: str | Path) -> Path:
    p = Path(data_path)
    return p.with_name(p.name + METAFILE_SUFFIX)


def meta_to_dict(meta: Meta) -> dict[str, Any]:
    regions = {
        k.token(): {
            "name": r.name,
            "begin": r.region.begin,
            "end": r.region.end,
            "desc": r.desc,
        }
        for k, r in meta.regions.items()
    }
    perspectives = {
        k.token(): {
            "region": p.region.token(),
            "cols": p.cols,
            "flip_row_order": p.flip_row_order,
            "name": p.name,
        }
        for k, p in meta.perspectives.items()
    }
    views = {}
    for k, nv in meta.views.items():
        v = nv.view
        views[k.token()] = {
            "name": nv.name,
            "perspective": v.perspective.token(),
            "kind": v.kind.value,
            "col_w": v.col_w,
            "row_h": v.row_h,
            "scroll_speed": v.scroll_speed,
            "scroll": {"row": v.scroll_offset.row, "col": v.scroll_offset.col},
        }
    layouts = {
        k.token(): {
            "name": lay.name,
            "margin": lay.margin,
            "view_grid": [[vk.token() for vk in row] for row in lay.view_grid],
        }
        for k, lay in meta.layouts.items()
    }
    return {
        "version": METAFILE_VERSION,
        "regions": regions,
        "perspectives": perspectives,
        "views": views,
        "layouts": layouts,
        "bookmarks": [
            {"offset": b.offset, "label": b.label, "desc": b.desc} for b in meta.bookmarks
        ],
    }


def _table(data: dict[str, Any], name: str, errors: list[str]) -> dict[str, Any]:
    table = data.get(name) or {}
    if not isinstance(table, dict):
        errors.append(f"{name} must be a mapping")
        return {}
    return table


def _int(
    entry: dict[str, Any], key: str, default: int | None = None, minimum: int | None = None
) -> int:
    value = entry.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    if minimum is not None and value < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {value}")
    return value


def meta_from_dict(data: dict[str, Any], *, logger: logging.Logger | None = None) -> Meta:
    """Rebuild a `Meta`. Structural problems raise `MetafileError`;
    unresolved references drop the entry with a warning."""
    log = logger or _default_logger
    if not isinstance(data, dict):
        raise MetafileError(["metafile root must be a mapping"])
    errors: list[str] = []
    version = data.get("version", METAFILE_VERSION)
    if version != METAFILE_VERSION:
        errors.append(f"unsupported metafile version {version!r}")
    regions_raw = _table(data, "regions", errors)
    persps_raw = _table(data, "perspectives", errors)
    views_raw = _table(data, "views", errors)
    layouts_raw = _table(data, "layouts", errors)
    bookmarks_raw = data.get("bookmarks") or []
    if not isinstance(bookmarks_raw, list):
        errors.append("bookmarks must be a list")
        bookmarks_raw = []
    if errors:
        raise MetafileError(errors)

    meta = Meta()

    for token, entry in regions_raw.items():
        try:
            key = RegionKey.parse(token)
            region = Region(_int(entry, "begin", minimum=0), _int(entry, "end", minimum=0))
            named = NamedRegion(
                name=str(entry.get("name", "")), region=region, desc=str(entry.get("desc", ""))
            )
            meta.regions.insert_at(key, named)
        except (ValueError, AttributeError) as e:
            errors.append(f"regions.{token}: {e}")

    for token, entry in persps_raw.items():
        try:
            key = PerspectiveKey.parse(token)
            rkey = RegionKey.parse(entry.get("region", "null"))
            persp = Perspective(
                region=rkey,
                cols=_int(entry, "cols", DEFAULT_COLS),
                flip_row_order=bool(entry.get("flip_row_order", False)),
                name=str(entry.get("name", "")),
            )
        except (ValueError, AttributeError) as e:
            errors.append(f"perspectives.{token}: {e}")
            continue
        if rkey not in meta.regions:
            log.warning("dropping perspective %s: region %s not found", token, rkey.token())
            continue
        persp.clamp_cols(meta.regions)
        meta.perspectives.insert_at(key, persp)

    for token, entry in views_raw.items():
        try:
            key = ViewKey.parse(token)
            pkey = PerspectiveKey.parse(entry.get("perspective", "null"))
            kind = ViewKind(entry.get("kind", ViewKind.HEX.value))
            scroll = entry.get("scroll") or {}
            view = View(
                perspective=pkey,
                kind=kind,
                col_w=_int(entry, "col_w", 1, minimum=1),
                row_h=_int(entry, "row_h", 1, minimum=1),
                scroll_offset=ScrollOffset(
                    row=_int(scroll, "row", 0, minimum=0), col=_int(scroll, "col", 0, minimum=0)
                ),
                scroll_speed=_int(entry, "scroll_speed", 1, minimum=1),
            )
        except (ValueError, AttributeError) as e:
            errors.append(f"views.{token}: {e}")
            continue
        if pkey not in meta.perspectives:
            log.warning("dropping view %s: perspective %s not found", token, pkey.token())
            continue
        meta.views.insert_at(key, NamedView(view=view, name=str(entry.get("name", ""))))

    for token, entry in layouts_raw.items():
        try:
            key = LayoutKey.parse(token)
            grid_raw = entry.get("view_grid") or []
            grid = [[ViewKey.parse(t) for t in row] for row in grid_raw]
            layout = Layout(
                name=str(entry.get("name", "")),
                view_grid=grid,
                margin=_int(entry, "margin", default_margin(), minimum=0),
            )
        except (ValueError, AttributeError, TypeError) as e:
            errors.append(f"layouts.{token}: {e}")
            continue
        for vk in layout.retain_views(lambda k: k in meta.views):
            log.warning("layout %s: dropping view %s: not found", token, vk.token())
        meta.layouts.insert_at(key, layout)

    for i, entry in enumerate(bookmarks_raw):
        try:
            meta.bookmarks.append(
                Bookmark(
                    offset=_int(entry, "offset", minimum=0),
                    label=str(entry.get("label", "")),
                    desc=str(entry.get("desc", "")),
                )
            )
        except (ValueError, AttributeError) as e:
            errors.append(f"bookmarks[{i}]: {e}")

    if errors:
        raise MetafileError(errors)
    return meta


def save_meta(meta: Meta, path: str | Path) -> Path:
    path = Path(path)
    path.write_text(yaml.safe_dump(meta_to_dict(meta), sort_keys=False), encoding="utf-8")
    return path


def load_meta(path: str | Path, *, logger: logging.Logger | None = None) -> Meta:
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise MetafileError([f"YAML parse error: {e}"]) from e
    return meta_from_dict(data, logger=logger)
