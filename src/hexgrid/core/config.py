"""User configuration: default column count, layout margin and cell metrics."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

PALETTE_NAMES = ("default", "dim", "high_contrast")


class ConfigError(Exception):
    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class CellMetrics:
    """Size of one grid cell in terminal cells."""

    col_w: int
    row_h: int = 1


def _default_cells() -> dict[str, CellMetrics]:
    return {
        "hex": CellMetrics(col_w=3),
        "ascii": CellMetrics(col_w=1),
        "block": CellMetrics(col_w=1),
    }


@dataclass
class Config:
    default_cols: int = 48
    margin: int = 1
    scroll_speed: int = 1
    palette: str = "default"
    cells: dict[str, CellMetrics] = field(default_factory=_default_cells)

    def cell_for(self, kind_name: str) -> CellMetrics:
        return self.cells.get(kind_name) or _default_cells()[kind_name]


def get_config_dir() -> Path:
    """Get platform-appropriate config directory."""
    if os.name == "nt":  # Windows
        base = os.environ.get("APPDATA", os.path.expanduser("~"))
        return Path(base) / "hexgrid"
    return Path.home() / ".config" / "hexgrid"


def default_config_path() -> Path:
    return get_config_dir() / "config.yaml"


def _int_at_least(
    data: dict[str, Any], key: str, default: int, errors: list[str], minimum: int = 1
) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        errors.append(f"{key} must be an integer, got {type(value).__name__}")
        return default
    if value < minimum:
        errors.append(f"{key} must be >= {minimum}, got {value}")
        return default
    return value


def config_from_dict(data: dict[str, Any]) -> Config:
    if not isinstance(data, dict):
        raise ConfigError(["config root must be a mapping"])
    errors: list[str] = []
    cfg = Config()
    cfg.default_cols = _int_at_least(data, "default_cols", cfg.default_cols, errors)
    cfg.margin = _int_at_least(data, "margin", cfg.margin, errors, minimum=0)
    cfg.scroll_speed = _int_at_least(data, "scroll_speed", cfg.scroll_speed, errors)

    palette = data.get("palette", cfg.palette)
    if palette not in PALETTE_NAMES:
        errors.append(f"palette must be one of {', '.join(PALETTE_NAMES)}, got {palette!r}")
    else:
        cfg.palette = palette

    cells_raw = data.get("cells") or {}
    if not isinstance(cells_raw, dict):
        errors.append("cells must be a mapping")
        cells_raw = {}
    for kind_name, metrics in cells_raw.items():
        if kind_name not in cfg.cells:
            errors.append(f"cells: unknown view kind {kind_name!r}")
            continue
        if not isinstance(metrics, dict):
            errors.append(f"cells.{kind_name} must be a mapping")
            continue
        base = cfg.cells[kind_name]
        col_w = _int_at_least(metrics, "col_w", base.col_w, errors)
        row_h = _int_at_least(metrics, "row_h", base.row_h, errors)
        cfg.cells[kind_name] = CellMetrics(col_w=col_w, row_h=row_h)

    if errors:
        raise ConfigError(errors)
    return cfg


def config_to_dict(cfg: Config) -> dict[str, Any]:
    return {
        "default_cols": cfg.default_cols,
        "margin": cfg.margin,
        "scroll_speed": cfg.scroll_speed,
        "palette": cfg.palette,
        "cells": {k: {"col_w": m.col_w, "row_h": m.row_h} for k, m in cfg.cells.items()},
    }


def load_config(path: Path | None = None) -> Config:
    """Load config from `path` (or the user config file). Missing file gives defaults."""
    path = path or default_config_path()
    if not path.exists():
        logger.debug("no config at %s, using defaults", path)
        return Config()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError([f"YAML parse error: {e}"]) from e
    return config_from_dict(data)


def save_config(cfg: Config, path: Path | None = None) -> Path:
    path = path or default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config_to_dict(cfg), sort_keys=False), encoding="utf-8")
    return path
