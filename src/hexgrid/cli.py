from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from hexgrid.app import HexgridApp
from hexgrid.core.config import ConfigError, load_config


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="hexgrid", description="Multi-view hex grid editor (Textual)")
    parser.add_argument("path", help="Path to binary file")
    parser.add_argument("--meta", help="Metafile path (default: <path>.hexgrid.yaml)")
    parser.add_argument("--cols", type=int, help="Column count for the default perspective")
    parser.add_argument("--config", help="Config file path")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (logs go to stderr)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), stream=sys.stderr)

    if not os.path.exists(args.path):
        print(f"hexgrid: file not found: {args.path}", file=sys.stderr)
        return 2

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"hexgrid: bad config: {e}", file=sys.stderr)
        return 2

    app = HexgridApp(args.path, meta_path=args.meta, config=config, cols=args.cols)
    app.run()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
