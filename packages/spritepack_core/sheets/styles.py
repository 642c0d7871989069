"""CSS class names and declarations for placed sprites."""

from __future__ import annotations

from typing import Mapping
import hashlib

from .records import PlacementRecord
from .variants import state_of, strip_state

CLASS_PREFIX = "sprite_"


def class_name(source: str, states: tuple[str, ...]) -> str:
    digest = hashlib.md5(strip_state(source, states).encode("utf-8")).hexdigest()
    return CLASS_PREFIX + digest[:10]


def sheet_file_name(sheet: str, sheet_format: str = "png") -> str:
    return f"{sheet}.{sheet_format}"


def css_declarations(record: PlacementRecord, sheet_url: str, sheet_format: str = "png") -> str:
    return (
        "display:inline-block; "
        f"background-image:url({sheet_url}{sheet_file_name(record.sheet, sheet_format)}); "
        f"background-position:-{record.x}px -{record.y}px; "
        "background-color:transparent; "
        f"width:{record.width}px; "
        f"height:{record.height}px;"
    )


def selector(source: str, states: tuple[str, ...]) -> str:
    out = "." + class_name(source, states)
    state = state_of(source, states)
    if state:
        out += f":{state}"
    return out


def style_rules(
    placements: Mapping[str, PlacementRecord],
    *,
    states: tuple[str, ...],
    sheet_url: str,
    sheet_format: str = "png",
) -> str:
    return "".join(
        f"{selector(source, states)}{{{css_declarations(record, sheet_url, sheet_format)}}}"
        for source, record in placements.items()
    )


def style_block(rules: str) -> str:
    return f'<style type="text/css">{rules}</style>'
