"""Shared sprite pipeline for request handlers."""

from __future__ import annotations

from functools import lru_cache

from packages.spritepack_core.sheets.pipeline import SpritePipeline

from ..storage.catalog import _backend as catalog_backend
from ..storage.catalog import sprite_config


@lru_cache(maxsize=1)
def get_pipeline() -> SpritePipeline:
    return SpritePipeline(sprite_config(), catalog_backend())


def reset_pipeline_cache_for_tests() -> None:
    get_pipeline.cache_clear()
