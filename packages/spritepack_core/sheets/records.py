"""Catalog record shapes shared by the allocator and its callers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class PlacementRecord:
    """Where one variant sits inside a rendered sheet."""

    sheet: str
    x: int
    y: int
    width: int
    height: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "PlacementRecord":
        return cls(
            sheet=str(raw["sheet"]),
            x=int(raw["x"]),
            y=int(raw["y"]),
            width=int(raw["width"]),
            height=int(raw["height"]),
        )


@dataclass(frozen=True)
class PlacementHit:
    source: str
    record: PlacementRecord


@dataclass(frozen=True)
class PlacementCreated:
    """Placement that did not exist until this call regenerated the sheets."""

    source: str
    record: PlacementRecord


PlacementLookup = Union[PlacementHit, PlacementCreated]


def normalize_sheet_id(raw: Any) -> Optional[str]:
    """Map a stored tracking value to an explicit sheet id, or None for auto."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int) and raw < 0:
        return None
    text = str(raw).strip()
    if not text or text == "-1":
        return None
    return text


def parse_placements(raw: dict[str, Any]) -> dict[str, PlacementRecord]:
    out: dict[str, PlacementRecord] = {}
    for key, value in raw.items():
        if not isinstance(value, dict):
            continue
        try:
            out[key] = PlacementRecord.from_dict(value)
        except (KeyError, TypeError, ValueError):
            continue
    return out
