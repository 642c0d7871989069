"""Removal of superseded sheet files."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional
import logging
import time

logger = logging.getLogger("spritepack_core.sheets.sweeper")


def sweep(
    sheet_dir: Path,
    retention_seconds: int = 60,
    *,
    keep: Optional[Iterable[str]] = None,
    now: Optional[float] = None,
) -> list[Path]:
    """Delete sheet files last modified more than ``retention_seconds`` ago.

    Files named in ``keep`` and dotfiles are never touched.
    """
    if not sheet_dir.is_dir():
        return []
    protected = set(keep or ())
    cutoff = (time.time() if now is None else now) - retention_seconds
    removed: list[Path] = []
    for path in sorted(sheet_dir.iterdir()):
        if path.name.startswith(".") or path.name in protected or not path.is_file():
            continue
        try:
            if path.stat().st_mtime >= cutoff:
                continue
            path.unlink()
        except FileNotFoundError:
            continue
        logger.debug("[SWEEP] Removed stale sheet '%s'", path)
        removed.append(path)
    if removed:
        logger.info("[SWEEP] Removed %d stale sheet file(s) from '%s'", len(removed), sheet_dir)
    return removed
