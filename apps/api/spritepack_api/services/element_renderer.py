"""Markup fragments that display tracked images through sprite sheets."""

from __future__ import annotations

from html import escape
from typing import Mapping, Optional
import logging

from packages.spritepack_core.sheets.pipeline import SpritePipeline
from packages.spritepack_core.sheets.records import PlacementCreated, PlacementLookup
from packages.spritepack_core.sheets.styles import style_block

logger = logging.getLogger("spritepack_api.element_renderer")

INPUT_DEFAULTS = {
    "type": "submit",
    "value": "",
    "style": "border-width: 0px;",
}


def _join_style(css: str, extra: Optional[str]) -> str:
    extra = (extra or "").strip()
    return f"{css} {extra}" if extra else css


class ElementRenderer:
    """Renders sprite elements for one page.

    Once any element on the page triggered a regeneration, the page's
    style block is out of date, so later elements carry their CSS inline
    as well as their class.
    """

    def __init__(self, pipeline: SpritePipeline) -> None:
        self.pipeline = pipeline
        self.styles_stale = False
        self.last_lookup: Optional[PlacementLookup] = None

    def element(
        self,
        tag: str,
        source: str,
        attributes: Optional[Mapping[str, str]] = None,
        sheet_id: Optional[str] = None,
    ) -> str:
        attrs = {str(k): str(v) for k, v in (attributes or {}).items()}
        lookup = self.pipeline.ensure_placement(source, sheet_id)
        self.last_lookup = lookup
        css = self.pipeline.css_for(lookup.record)

        parts: list[tuple[str, str]] = []
        if isinstance(lookup, PlacementCreated):
            logger.debug("[RENDER] Inline style for freshly placed '%s'", lookup.source)
            self.styles_stale = True
            parts.append(("style", _join_style(css, attrs.pop("style", None))))
        else:
            classes = self.pipeline.class_name(lookup.source)
            extra_class = attrs.pop("class", "").strip()
            parts.append(("class", f"{classes} {extra_class}" if extra_class else classes))
            if self.styles_stale:
                attrs["style"] = _join_style(css, attrs.get("style"))
        parts.extend(attrs.items())

        rendered = "".join(f' {escape(key)}="{escape(value, quote=True)}"' for key, value in parts)
        return f"<{tag}{rendered}></{tag}>"

    def image(self, source: str, attributes: Optional[Mapping[str, str]] = None, sheet_id: Optional[str] = None) -> str:
        return self.element("span", source, attributes, sheet_id)

    def input(self, source: str, attributes: Optional[Mapping[str, str]] = None, sheet_id: Optional[str] = None) -> str:
        attrs = dict(INPUT_DEFAULTS)
        attrs.update(attributes or {})
        return self.element("input", source, attrs, sheet_id)

    def anchor(self, source: str, attributes: Optional[Mapping[str, str]] = None, sheet_id: Optional[str] = None) -> str:
        return self.element("a", source, attributes, sheet_id)

    def style_block(self) -> str:
        return style_block(self.pipeline.style_rules())
