"""Sprite markup, style and sheet endpoints."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse
from pydantic import BaseModel, Field

from packages.spritepack_core.sheets.records import PlacementCreated

from ..services.element_renderer import ElementRenderer
from ..services.sprite_service import get_pipeline
from ..storage.catalog import get_placements, get_tracking

logger = logging.getLogger("spritepack_api.sprites")

router = APIRouter(prefix="/api/v1/sprites", tags=["sprites"])
VALID_SHEET_FILE_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_-]{0,127}\.[a-z0-9]{1,8}$")


class ElementRequest(BaseModel):
    source: str = Field(description="Image path relative to the image root")
    tag: str = Field(default="span", pattern="^(span|input|a|div|button|i)$")
    attributes: dict[str, str] = Field(default_factory=dict)
    sheet_id: Optional[str] = Field(
        default=None,
        max_length=64,
        description="Explicit sheet to pack the image into; omit for automatic assignment",
    )


@router.post("/element")
def render_element(req: ElementRequest) -> dict[str, Any]:
    logger.info("[SPRITES] Element request: source='%s', tag=%s, sheet_id=%s", req.source, req.tag, req.sheet_id)
    pipeline = get_pipeline()
    renderer = ElementRenderer(pipeline)
    if req.tag == "input":
        html = renderer.input(req.source, req.attributes, req.sheet_id)
    else:
        html = renderer.element(req.tag, req.source, req.attributes, req.sheet_id)
    lookup = renderer.last_lookup
    return {
        "ok": True,
        "html": html,
        "created": isinstance(lookup, PlacementCreated),
        "source": lookup.source,
        "class_name": pipeline.class_name(lookup.source),
        "placement": lookup.record.as_dict(),
    }


@router.get("/style", response_class=HTMLResponse)
def get_style_block() -> str:
    return ElementRenderer(get_pipeline()).style_block()


@router.get("/style.css", response_class=PlainTextResponse)
def get_style_rules() -> PlainTextResponse:
    return PlainTextResponse(get_pipeline().style_rules(), media_type="text/css")


@router.get("/placements")
def list_placements() -> dict[str, Any]:
    placements = get_placements()
    return {"count": len(placements), "placements": placements}


@router.get("/tracking")
def list_tracking() -> dict[str, Any]:
    tracking = get_tracking()
    return {"count": len(tracking), "tracking": tracking}


@router.post("/regenerate")
def regenerate_sheets() -> dict[str, Any]:
    logger.info("[SPRITES] Forced regeneration requested")
    result = get_pipeline().regenerate()
    return {
        "ok": True,
        "sheet_count": len(result.sheets),
        "sheets": [sheet.as_dict() for sheet in result.sheets],
        "placement_count": len(result.placements),
        "pruned": result.pruned,
        "swept": result.swept,
    }


@router.get("/sheets/{filename}")
def get_sheet_file(filename: str) -> FileResponse:
    if not VALID_SHEET_FILE_RE.fullmatch(filename):
        raise HTTPException(status_code=404, detail="Sheet not found")
    path = get_pipeline().config.sheet_dir / filename
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Sheet not found")
    return FileResponse(path, media_type="image/png")
