#!/usr/bin/env python3
"""Print the CSS rules for every committed sprite placement."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from packages.spritepack_core.sheets.config import SpriteConfig
from packages.spritepack_core.sheets.pipeline import SpritePipeline
from packages.spritepack_core.sheets.styles import style_block


def main() -> int:
    parser = argparse.ArgumentParser(description="Print sprite CSS rules")
    parser.add_argument(
        "--html",
        action="store_true",
        help="Wrap the rules in a <style> element",
    )
    args = parser.parse_args()

    rules = SpritePipeline(SpriteConfig.from_env()).style_rules()
    print(style_block(rules) if args.html else rules)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
