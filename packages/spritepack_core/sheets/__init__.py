"""Sprite sheet packing and assembly."""

from .allocator import RegenerationResult, RenderedSheet, SheetAllocator
from .config import SpriteConfig
from .errors import (
    CompositeFailureError,
    InvalidSourcePathError,
    SourceUnreadableError,
    SpriteError,
    UnsupportedFormatError,
)
from .pipeline import SpritePipeline, build_store
from .placement import PackItem, PackResult, pack
from .records import PlacementCreated, PlacementHit, PlacementRecord
from .sweeper import sweep
from .variants import Variant, VariantResolver, normalize_source, strip_state

__all__ = [
    "RegenerationResult",
    "RenderedSheet",
    "SheetAllocator",
    "SpriteConfig",
    "CompositeFailureError",
    "InvalidSourcePathError",
    "SourceUnreadableError",
    "SpriteError",
    "UnsupportedFormatError",
    "SpritePipeline",
    "build_store",
    "PackItem",
    "PackResult",
    "pack",
    "PlacementCreated",
    "PlacementHit",
    "PlacementRecord",
    "sweep",
    "Variant",
    "VariantResolver",
    "normalize_source",
    "strip_state",
]
