#!/usr/bin/env python3
"""Track image sources and (re)build their sprite sheets."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from packages.spritepack_core.sheets.config import SpriteConfig
from packages.spritepack_core.sheets.errors import SpriteError
from packages.spritepack_core.sheets.pipeline import SpritePipeline
from packages.spritepack_core.sheets.records import PlacementCreated


def main() -> int:
    parser = argparse.ArgumentParser(description="Build sprite sheets for tracked images")
    parser.add_argument("sources", nargs="*", help="Image paths relative to SPRITEPACK_IMAGE_ROOT")
    parser.add_argument(
        "--sheet",
        default=None,
        help="Explicit sheet id for the given sources (default: automatic assignment)",
    )
    parser.add_argument(
        "--regenerate",
        action="store_true",
        help="Rebuild every sheet even when all sources are already placed",
    )
    args = parser.parse_args()

    pipeline = SpritePipeline(SpriteConfig.from_env())
    pipeline.init_db()

    try:
        for source in args.sources:
            lookup = pipeline.ensure_placement(source, args.sheet)
            status = "placed" if isinstance(lookup, PlacementCreated) else "already placed"
            print(f"{lookup.source}: {status} on sheet {lookup.record.sheet}")
        if args.regenerate or not args.sources:
            result = pipeline.regenerate()
            for sheet in result.sheets:
                print(f"Sheet {sheet.sheet_id} ({sheet.bucket}): {sheet.width}x{sheet.height}, {len(sheet.sources)} image(s)")
            for source in result.pruned:
                print(f"WARN: dropped missing source {source}")
    except SpriteError as exc:
        print(f"ERROR: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
